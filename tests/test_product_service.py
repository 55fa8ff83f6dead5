import random

import pytest

from dpp_backend.config import settings
from dpp_backend.models import Origin, ProductFormData
from dpp_backend.services.mock_data import MOCK_PRODUCTS
from dpp_backend.services.product_service import (
    InvalidSupplyChainLinkError,
    LifecycleEndError,
    ProductNotEditableError,
    ProductNotFoundError,
    ProductService,
)
from dpp_backend.services.storage import InMemoryStore, ProductRepository


@pytest.fixture(autouse=True)
def mock_backend(monkeypatch):
    monkeypatch.setattr(settings, "AI_BACKEND", "mock")


@pytest.fixture
def service():
    return ProductService(ProductRepository(InMemoryStore()), rng=random.Random(7))


def _create(service, **fields):
    form = ProductFormData(product_name="Eco Kettle", category="Appliances", **fields)
    return service.create_product(form, {"product_name": Origin.AI_EXTRACTED})


def test_list_contains_demo_and_user_products(service):
    created = _create(service)
    ids = [p["productId"] for p in service.list_products()]
    assert ids[:2] == ["PROD001", "PROD002"]
    assert created.product_id in ids


def test_unknown_product_raises(service):
    with pytest.raises(ProductNotFoundError):
        service.get_product("NOPE")
    with pytest.raises(ProductNotFoundError):
        service.get_product("USER_PROD_missing")


def test_created_product_is_hydrated(service):
    product = _create(service, materials="Stainless Steel")
    assert product.product_id.startswith("USER_PROD")
    assert product.product_name == "Eco Kettle"
    assert product.materials == "Stainless Steel"
    assert product.manufacturer == "N/A"
    assert product.origins == {"product_name": Origin.AI_EXTRACTED}
    assert service.get_product(product.product_id).product_name == "Eco Kettle"


def test_edit_session_snapshot(service):
    product = _create(service, specifications='{"Power": "2200 W"}')
    snapshot = service.begin_edit(product.product_id)
    assert snapshot.values.product_name == "Eco Kettle"
    assert '"Power": "2200 W"' in snapshot.values.specifications
    assert snapshot.origins == {"product_name": Origin.AI_EXTRACTED}


def test_submit_edit_reconciles_origins(service):
    product = _create(service)
    snapshot = service.begin_edit(product.product_id)

    form = snapshot.values.model_copy(update={"manufacturer": "KettleWorks", "state_of_health": None})
    updated = service.submit_edit(product.product_id, form, snapshot)

    assert updated.manufacturer == "KettleWorks"
    assert updated.origins["product_name"] == Origin.AI_EXTRACTED
    assert updated.origins["manufacturer"] == Origin.MANUAL


def test_submit_edit_compares_against_session_snapshot(service):
    product = _create(service)
    snapshot = service.begin_edit(product.product_id)

    # another writer changes the name after the session began
    service.submit_edit(product.product_id, ProductFormData(product_name="Renamed"))

    # re-submitting the value seen at session start keeps the original tag
    updated = service.submit_edit(product.product_id, ProductFormData(product_name="Eco Kettle"), snapshot)
    assert updated.product_name == "Eco Kettle"
    assert updated.origins["product_name"] == Origin.AI_EXTRACTED


def test_clearing_a_field_marks_it_manual(service):
    product = _create(service, description="Boils water fast")
    snapshot = service.begin_edit(product.product_id)
    updated = service.submit_edit(product.product_id, ProductFormData(description=""), snapshot)
    assert updated.description == "No description provided."
    assert updated.origins["description"] == Origin.MANUAL


def test_demo_products_are_read_only_for_edits(service):
    with pytest.raises(ProductNotEditableError):
        service.submit_edit("PROD001", ProductFormData(product_name="Hacked"))


def test_edit_updates_completeness(service):
    product = _create(service)
    before = service.get_completeness(product.product_id).overall_score
    service.submit_edit(product.product_id, ProductFormData(gtin="04012345678901", manufacturer="KettleWorks"))
    after = service.get_completeness(product.product_id).overall_score
    assert after > before


def test_generate_image_tags_origin(service):
    product = _create(service)
    updated = service.generate_image(product.product_id)
    assert updated.image_url.startswith("data:image/svg+xml;base64,")
    assert updated.origins["image_url"] == Origin.AI_EXTRACTED
    assert service.get_product(product.product_id).origins["image_url"] == Origin.AI_EXTRACTED


def test_apply_claims_joins_and_tags(service):
    updated = service.apply_claims("PROD001", ["Recyclable", "  ", "Low energy"])
    assert updated.sustainability_claims == "Recyclable, Low energy"
    assert updated.origins["sustainability_claims"] == Origin.AI_EXTRACTED


def test_demo_changes_do_not_touch_module_data(service):
    service.apply_claims("PROD001", ["Recyclable"])
    assert MOCK_PRODUCTS[0].sustainability_claims != "Recyclable"


def test_suggest_claims_uses_product_data(service):
    claims = service.suggest_claims("PROD001")
    assert "Made with recycled materials" in claims


def test_compliance_check_uses_next_stage(service):
    out = service.simulate_compliance_check("PROD001")
    assert out.new_lifecycle_stage_name == "Retail & Sale"


def test_advance_until_final_stage(service):
    product = service.advance_lifecycle_stage("PROD001")
    assert product.current_lifecycle_phase_index == 3
    assert product.lifecycle_phases[2].status == "completed"
    assert product.lifecycle_phases[3].status == "in_progress"
    assert product.lifecycle_events[-1].type == "Stage Advanced (Simulated)"

    service.advance_lifecycle_stage("PROD001")
    service.advance_lifecycle_stage("PROD001")
    with pytest.raises(LifecycleEndError):
        service.advance_lifecycle_stage("PROD001")
    with pytest.raises(LifecycleEndError):
        service.simulate_compliance_check("PROD001")


def test_advance_into_flagged_final_stage(service):
    product = service.get_product("PROD002")
    assert product.current_lifecycle_phase_index == 1
    for _ in range(4):
        product = service.advance_lifecycle_stage("PROD002")
    assert product.lifecycle_phases[5].status == "in_progress"


def test_advance_user_product_persists(service):
    product = _create(service)
    service.advance_lifecycle_stage(product.product_id)
    reloaded = service.get_product(product.product_id)
    assert reloaded.current_lifecycle_phase_index == 1
    assert reloaded.lifecycle_phases[1].status == "in_progress"


def test_sync_eprel_updates_overall_compliance(service):
    product, result = service.sync_eprel("PROD001")
    assert result.eprel_id.startswith("EPREL-")
    assert product.overall_compliance.eprel.status == "compliant"
    assert product.overall_compliance.eprel.entry_id == result.eprel_id

    user = _create(service)
    product, result = service.sync_eprel(user.product_id)
    assert product.overall_compliance.eprel.status == "not_applicable"


def test_verify_document(service):
    service.rng = random.Random()
    service.rng.random = lambda: 0.9
    product, success = service.verify_document("PROD002", "Battery Regulation (EU 2023/1542)")
    assert success
    assert product.compliance_data["Battery Regulation (EU 2023/1542)"].is_verified is True

    service.rng.random = lambda: 0.1
    product, success = service.verify_document("PROD002", "Battery Regulation (EU 2023/1542)")
    assert not success
    assert product.compliance_data["Battery Regulation (EU 2023/1542)"].is_verified is False


def test_verify_unknown_regulation(service):
    with pytest.raises(ProductNotFoundError):
        service.verify_document("PROD001", "Nope")


def test_supply_chain_links(service):
    product = service.link_supplier("PROD001", "SUP005", "Organic Cotton Gaskets", "  ")
    assert product.supply_chain_links[-1].supplied_item == "Organic Cotton Gaskets"
    assert product.supply_chain_links[-1].notes is None

    product = service.update_supplier_link("PROD001", "SUP005", "Organic Cotton Gaskets", "Cotton Seals", "Batch 4")
    assert product.supply_chain_links[-1].supplied_item == "Cotton Seals"
    assert product.supply_chain_links[-1].notes == "Batch 4"

    product = service.unlink_supplier("PROD001", "SUP005", "Cotton Seals")
    assert all(link.supplier_id != "SUP005" for link in product.supply_chain_links)


def test_invalid_supply_chain_links(service):
    with pytest.raises(InvalidSupplyChainLinkError):
        service.link_supplier("PROD001", "SUP001", "   ")
    with pytest.raises(InvalidSupplyChainLinkError):
        service.link_supplier("PROD001", "SUP999", "Steel")
    with pytest.raises(InvalidSupplyChainLinkError):
        service.update_supplier_link("PROD001", "SUP001", "Recycled Steel Panels", "")


def test_user_suppliers_override_demo_ones(service):
    from dpp_backend.models import Supplier

    service.repository.save_suppliers([
        Supplier(id="SUP001", name="GreenSteel Europe"),
        Supplier(id="SUP100", name="Porto Spinning Mills"),
    ])
    suppliers = {s.id: s.name for s in service.list_suppliers()}
    assert suppliers["SUP001"] == "GreenSteel Europe"
    assert suppliers["SUP100"] == "Porto Spinning Mills"
    assert len(suppliers) == 6


def test_null_clears_battery_value(service):
    product = _create(service, state_of_health=80)
    product = service.submit_edit(product.product_id, ProductFormData(category="General"))
    sections = [s.section_name for s in service.get_completeness(product.product_id).sections]
    assert "Battery" in sections

    snapshot = service.begin_edit(product.product_id)
    updated = service.submit_edit(product.product_id, ProductFormData(state_of_health=None), snapshot)
    assert updated.state_of_health is None
    assert updated.origins["state_of_health"] == Origin.MANUAL
    sections = [s.section_name for s in service.get_completeness(product.product_id).sections]
    assert "Battery" not in sections


def test_omitted_fields_keep_stored_values(service):
    product = _create(service, state_of_health=80, materials="Steel")
    updated = service.submit_edit(product.product_id, ProductFormData(product_name="Kettle Pro"))
    assert updated.product_name == "Kettle Pro"
    assert updated.state_of_health == 80
    assert updated.materials == "Steel"
