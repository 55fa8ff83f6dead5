"""
Key-value persistence for user-created passports and suppliers.

Records are kept under two top-level keys and every write replaces the whole
list, so concurrent writers simply overwrite each other (last writer wins).
"""
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import TypeAdapter, ValidationError

from ..models import Product, StoredProduct, Supplier
from .completeness import is_placeholder_image, parse_specifications
from .mock_data import default_product_values

logger = logging.getLogger(__name__)

USER_PRODUCTS_KEY = "user_products"
USER_SUPPLIERS_KEY = "user_suppliers"

_products_adapter = TypeAdapter(List[StoredProduct])
_suppliers_adapter = TypeAdapter(List[Supplier])


class KeyValueStore(ABC):
    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        ...


class InMemoryStore(KeyValueStore):
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileStore(KeyValueStore):
    """One <key>.json file per key under a data directory."""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.root / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        fp = self._path(key)
        if not fp.exists():
            return None
        with fp.open("r", encoding="utf-8") as f:
            return f.read()

    def set(self, key: str, value: str) -> None:
        # write beside the target and swap, so a torn write never replaces the old list
        fp = self._path(key)
        tmp = fp.with_name(fp.name + ".tmp")
        with tmp.open("w", encoding="utf-8") as f:
            f.write(value)
        os.replace(tmp, fp)


class ProductRepository:
    def __init__(self, store: KeyValueStore):
        self.store = store

    def _load(self, key: str, adapter: TypeAdapter) -> list:
        raw = self.store.get(key)
        if not raw:
            return []
        try:
            return adapter.validate_json(raw)
        except ValidationError as e:
            logger.warning("Ignoring unreadable store value for %s: %s", key, e)
            return []

    def _save(self, key: str, adapter: TypeAdapter, items: list) -> None:
        self.store.set(key, adapter.dump_json(items, by_alias=True, indent=2).decode("utf-8"))

    # ---------- products ----------

    def list_products(self) -> List[StoredProduct]:
        return self._load(USER_PRODUCTS_KEY, _products_adapter)

    def save_products(self, products: List[StoredProduct]) -> None:
        self._save(USER_PRODUCTS_KEY, _products_adapter, products)

    def get_product(self, product_id: str) -> Optional[StoredProduct]:
        return next((p for p in self.list_products() if p.id == product_id), None)

    def upsert_product(self, stored: StoredProduct) -> None:
        products = self.list_products()
        for i, p in enumerate(products):
            if p.id == stored.id:
                products[i] = stored
                break
        else:
            products.append(stored)
        self.save_products(products)

    # ---------- suppliers ----------

    def list_suppliers(self) -> List[Supplier]:
        return self._load(USER_SUPPLIERS_KEY, _suppliers_adapter)

    def save_suppliers(self, suppliers: List[Supplier]) -> None:
        self._save(USER_SUPPLIERS_KEY, _suppliers_adapter, suppliers)

    # ---------- hydration ----------

    def to_product(self, stored: StoredProduct) -> Product:
        """Overlay a stored record onto the default passport values."""
        defaults = default_product_values(stored.id)
        product_name = stored.product_name or defaults.product_name
        image_url = stored.image_url or defaults.image_url
        update: Dict[str, Any] = {
            "product_name": product_name,
            "gtin": stored.gtin or "",
            "category": stored.category or defaults.category,
            "status": stored.status or defaults.status,
            "compliance": stored.compliance or defaults.compliance,
            "last_updated": stored.last_updated or defaults.last_updated,
            "manufacturer": stored.manufacturer or defaults.manufacturer,
            "model_number": stored.model_number or defaults.model_number,
            "description": stored.description or defaults.description,
            "image_url": image_url,
            "image_hint": defaults.image_hint if is_placeholder_image(stored.image_url) else (product_name or "product image"),
            "materials": stored.materials or defaults.materials,
            "sustainability_claims": stored.sustainability_claims or defaults.sustainability_claims,
            "energy_label": stored.energy_label or defaults.energy_label,
            "specifications": parse_specifications(stored.specifications, stored.id),
            "battery_chemistry": stored.battery_chemistry,
            "state_of_health": stored.state_of_health,
            "carbon_footprint_manufacturing": stored.carbon_footprint_manufacturing,
            "recycled_content_percentage": stored.recycled_content_percentage,
            "is_dpp_blockchain_anchored": stored.is_dpp_blockchain_anchored,
            "dpp_anchor_transaction_hash": stored.dpp_anchor_transaction_hash,
            "supply_chain_links": list(stored.supply_chain_links),
            "origins": dict(stored.origins),
        }
        for optional in ("lifecycle_events", "compliance_data", "lifecycle_phases",
                         "current_lifecycle_phase_index", "overall_compliance"):
            value = getattr(stored, optional)
            if value is not None:
                update[optional] = value
        return defaults.model_copy(update=update, deep=True)
