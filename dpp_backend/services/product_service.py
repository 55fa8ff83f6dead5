"""
Product passport operations behind the detail page.

Demo passports live in process memory for the lifetime of the service;
user-created passports (ids starting with USER_PROD) are read from and
written through the key-value store on every operation.
"""
import json
import logging
import random
import time
import uuid
from typing import Any, Dict, List, Optional, Tuple

from .. import ai_processor
from ..models import (
    ClaimSuggestionInput,
    ComplianceCheckInput,
    ComplianceCheckOutput,
    CompletenessResult,
    EditSnapshot,
    EprelSyncInput,
    EprelSyncOutput,
    ImageGenerationInput,
    LifecycleEvent,
    Origin,
    Product,
    ProductFormData,
    StoredProduct,
    Supplier,
    SupplyChainLink,
)
from .completeness import calculate_dpp_completeness
from .mock_data import MOCK_PRODUCTS, MOCK_SUPPLIERS, USER_PRODUCT_PREFIX, now_iso
from .origin import reconcile_origins
from .storage import ProductRepository

logger = logging.getLogger(__name__)


class ProductNotFoundError(Exception):
    pass


class ProductNotEditableError(Exception):
    pass


class LifecycleEndError(Exception):
    pass


class InvalidSupplyChainLinkError(Exception):
    pass


def is_user_product(product_id: str) -> bool:
    return product_id.startswith(USER_PRODUCT_PREFIX)


def form_values_from_product(product: Product) -> ProductFormData:
    specs = product.specifications
    if not isinstance(specs, str):
        specs = json.dumps(specs, indent=2, ensure_ascii=False)
    return ProductFormData(
        product_name=product.product_name,
        gtin=product.gtin,
        description=product.description,
        manufacturer=product.manufacturer,
        model_number=product.model_number,
        materials=product.materials,
        sustainability_claims=product.sustainability_claims,
        specifications=specs,
        energy_label=product.energy_label,
        category=product.category,
        image_url=product.image_url,
        battery_chemistry=product.battery_chemistry,
        state_of_health=product.state_of_health,
        carbon_footprint_manufacturing=product.carbon_footprint_manufacturing,
        recycled_content_percentage=product.recycled_content_percentage,
    )


class ProductService:
    def __init__(self, repository: ProductRepository, rng: Optional[random.Random] = None):
        self.repository = repository
        self.rng = rng or random.Random()
        self._catalog: Dict[str, Product] = {p.product_id: p.model_copy(deep=True) for p in MOCK_PRODUCTS}

    # ---------- lookup ----------

    def list_products(self) -> List[Dict[str, Any]]:
        items = [
            {"productId": p.product_id, "productName": p.product_name, "category": p.category, "status": p.status}
            for p in self._catalog.values()
        ]
        for stored in self.repository.list_products():
            product = self.repository.to_product(stored)
            items.append({"productId": product.product_id, "productName": product.product_name,
                          "category": product.category, "status": product.status})
        return items

    def get_product(self, product_id: str) -> Product:
        if is_user_product(product_id):
            stored = self.repository.get_product(product_id)
            if stored is not None:
                return self.repository.to_product(stored)
        product = self._catalog.get(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    def get_completeness(self, product_id: str) -> CompletenessResult:
        return calculate_dpp_completeness(self.get_product(product_id))

    def _require_stored(self, product_id: str) -> StoredProduct:
        stored = self.repository.get_product(product_id)
        if stored is None:
            raise ProductNotFoundError(product_id)
        return stored

    def _save(self, product: Product, **stored_updates: Any) -> Product:
        """Persist user products; keep demo products in memory."""
        if is_user_product(product.product_id):
            stored = self._require_stored(product.product_id)
            stored_updates.setdefault("last_updated", product.last_updated)
            self.repository.upsert_product(stored.model_copy(update=stored_updates))
            return self.get_product(product.product_id)
        self._catalog[product.product_id] = product
        return product

    # ---------- create / edit ----------

    def create_product(self, form: ProductFormData, origins: Optional[Dict[str, Origin]] = None) -> Product:
        product_id = f"{USER_PRODUCT_PREFIX}{int(time.time() * 1000)}{uuid.uuid4().hex[:4].upper()}"
        stored = StoredProduct(
            id=product_id,
            last_updated=now_iso(),
            origins=dict(origins or {}),
            **form.model_dump(),
        )
        self.repository.upsert_product(stored)
        logger.info("Created user product %s", product_id)
        return self.repository.to_product(stored)

    def begin_edit(self, product_id: str) -> EditSnapshot:
        product = self.get_product(product_id)
        return EditSnapshot(values=form_values_from_product(product), origins=dict(product.origins))

    def submit_edit(self, product_id: str, form: ProductFormData,
                    snapshot: Optional[EditSnapshot] = None) -> Product:
        """
        Save an edit form submission.

        Fields left out of the form keep their stored value; a field sent as
        null is cleared. Origins are recomputed against the snapshot taken when
        the edit session began; if no snapshot is supplied the current record
        is used.
        """
        if not is_user_product(product_id):
            raise ProductNotEditableError(product_id)
        stored = self._require_stored(product_id)
        if snapshot is None:
            snapshot = self.begin_edit(product_id)

        submitted = form.model_dump(exclude_unset=True)
        snapshot_values = snapshot.values.model_dump()
        compared = {**snapshot_values, **submitted}
        origins = reconcile_origins(compared, snapshot_values, snapshot.origins)

        updated = stored.model_copy(update={**submitted, "origins": origins, "last_updated": now_iso()})
        self.repository.upsert_product(updated)
        logger.info("Updated user product %s (%d fields submitted)", product_id, len(submitted))
        return self.repository.to_product(updated)

    # ---------- AI assisted actions ----------

    def generate_image(self, product_id: str) -> Product:
        product = self.get_product(product_id)
        result = ai_processor.generate_product_image(
            ImageGenerationInput(product_name=product.product_name, product_category=product.category)
        )
        origins = {**product.origins, "image_url": Origin.AI_EXTRACTED}
        updated = product.model_copy(update={
            "image_url": result.image_url,
            "image_hint": product.product_name,
            "origins": origins,
            "last_updated": now_iso(),
        })
        return self._save(updated, image_url=result.image_url, origins=origins)

    def suggest_claims(self, product_id: str) -> List[str]:
        product = self.get_product(product_id)
        result = ai_processor.suggest_sustainability_claims(ClaimSuggestionInput(
            product_category=product.category or "Unknown",
            product_name=product.product_name,
            product_description=product.description,
            materials=product.materials,
        ))
        return result.claims

    def apply_claims(self, product_id: str, claims: List[str]) -> Product:
        product = self.get_product(product_id)
        text = ", ".join(c.strip() for c in claims if c.strip())
        origins = {**product.origins, "sustainability_claims": Origin.AI_EXTRACTED}
        updated = product.model_copy(update={
            "sustainability_claims": text,
            "origins": origins,
            "last_updated": now_iso(),
        })
        return self._save(updated, sustainability_claims=text, origins=origins)

    def simulate_compliance_check(self, product_id: str) -> ComplianceCheckOutput:
        product = self.get_product(product_id)
        idx = product.current_lifecycle_phase_index
        phases = product.lifecycle_phases
        if idx + 1 >= len(phases):
            raise LifecycleEndError("This product is already at its final defined lifecycle stage.")
        return ai_processor.check_product_compliance(ComplianceCheckInput(
            product_id=product.product_id,
            current_lifecycle_stage_name=phases[idx].name,
            new_lifecycle_stage_name=phases[idx + 1].name,
            product_category=product.category,
        ))

    def sync_eprel(self, product_id: str) -> Tuple[Product, EprelSyncOutput]:
        product = self.get_product(product_id)
        result = ai_processor.sync_eprel_data(EprelSyncInput(
            product_id=product.product_id,
            product_name=product.product_name,
            model_number=product.model_number,
        ))
        overall = product.overall_compliance.model_copy(deep=True)
        overall.eprel = overall.eprel.model_copy(update={
            "status": ai_processor.map_eprel_status(result.sync_status),
            "entry_id": result.eprel_id or overall.eprel.entry_id,
            "last_checked": result.last_checked,
        })
        updated = product.model_copy(update={"overall_compliance": overall})
        return self._save(updated, overall_compliance=overall), result

    # ---------- lifecycle / verification ----------

    def advance_lifecycle_stage(self, product_id: str) -> Product:
        product = self.get_product(product_id)
        idx = product.current_lifecycle_phase_index
        phases = [p.model_copy() for p in product.lifecycle_phases]
        if idx >= len(phases) - 1:
            raise LifecycleEndError("Product is already at its final lifecycle stage.")

        stamp = now_iso()
        if phases[idx].status != "issue":
            phases[idx] = phases[idx].model_copy(update={"status": "completed", "timestamp": stamp})
        next_idx = idx + 1
        phases[next_idx] = phases[next_idx].model_copy(update={"status": "in_progress", "timestamp": stamp})
        events = list(product.lifecycle_events) + [LifecycleEvent(
            id=f"EVT_SIM_{int(time.time() * 1000)}",
            type="Stage Advanced (Simulated)",
            timestamp=stamp,
            location="System Simulation",
            details=f"Product moved to '{phases[next_idx].name}' stage.",
        )]
        updated = product.model_copy(update={
            "current_lifecycle_phase_index": next_idx,
            "lifecycle_phases": phases,
            "lifecycle_events": events,
        })
        return self._save(updated, current_lifecycle_phase_index=next_idx,
                          lifecycle_phases=phases, lifecycle_events=events)

    def verify_document(self, product_id: str, regulation: str) -> Tuple[Product, bool]:
        """Mock document verification; succeeds four times out of five."""
        product = self.get_product(product_id)
        record = product.compliance_data.get(regulation)
        if record is None:
            raise ProductNotFoundError(f"{product_id}/{regulation}")
        success = self.rng.random() > 0.2
        compliance_data = dict(product.compliance_data)
        compliance_data[regulation] = record.model_copy(update={
            "is_verified": (not record.is_verified) if success else False,
            "last_checked": now_iso(),
        })
        updated = product.model_copy(update={"compliance_data": compliance_data})
        return self._save(updated, compliance_data=compliance_data), success

    # ---------- supply chain ----------

    def list_suppliers(self) -> List[Supplier]:
        user_suppliers = self.repository.list_suppliers()
        user_ids = {s.id for s in user_suppliers}
        return [s for s in MOCK_SUPPLIERS if s.id not in user_ids] + user_suppliers

    def _save_links(self, product: Product, links: List[SupplyChainLink]) -> Product:
        updated = product.model_copy(update={"supply_chain_links": links, "last_updated": now_iso()})
        return self._save(updated, supply_chain_links=links)

    def link_supplier(self, product_id: str, supplier_id: str, supplied_item: str,
                      notes: Optional[str] = None) -> Product:
        if not supplier_id or not (supplied_item or "").strip():
            raise InvalidSupplyChainLinkError("Please select a supplier and specify the supplied item.")
        if supplier_id not in {s.id for s in self.list_suppliers()}:
            raise InvalidSupplyChainLinkError(f"Unknown supplier: {supplier_id}")
        product = self.get_product(product_id)
        link = SupplyChainLink(supplier_id=supplier_id, supplied_item=supplied_item.strip(),
                               notes=(notes or "").strip() or None)
        return self._save_links(product, list(product.supply_chain_links) + [link])

    def unlink_supplier(self, product_id: str, supplier_id: str, supplied_item: str) -> Product:
        product = self.get_product(product_id)
        links = [
            link for link in product.supply_chain_links
            if not (link.supplier_id == supplier_id and link.supplied_item == supplied_item)
        ]
        return self._save_links(product, links)

    def update_supplier_link(self, product_id: str, supplier_id: str, supplied_item: str,
                             new_supplied_item: str, notes: Optional[str] = None) -> Product:
        if not (new_supplied_item or "").strip():
            raise InvalidSupplyChainLinkError("The supplied item cannot be empty.")
        product = self.get_product(product_id)
        links = [
            link.model_copy(update={"supplied_item": new_supplied_item.strip(), "notes": (notes or "").strip() or None})
            if link.supplier_id == supplier_id and link.supplied_item == supplied_item
            else link
            for link in product.supply_chain_links
        ]
        return self._save_links(product, links)
