import json
import logging

import pytest

from dpp_backend.models import Origin, StoredProduct, Supplier
from dpp_backend.services import storage
from dpp_backend.services.completeness import parse_specifications
from dpp_backend.services.storage import (
    USER_PRODUCTS_KEY,
    InMemoryStore,
    JsonFileStore,
    ProductRepository,
)


def test_parse_specifications_text_and_mapping():
    assert parse_specifications('{"Weight": "480 gsm"}') == {"Weight": "480 gsm"}
    assert parse_specifications({"Lumens": 800}) == {"Lumens": "800"}
    assert parse_specifications("") == {}
    assert parse_specifications(None) == {}


def test_malformed_specifications_log_and_fall_back(caplog):
    with caplog.at_level(logging.WARNING):
        assert parse_specifications("{not json", "USER_PROD1") == {}
        assert parse_specifications("[1, 2]", "USER_PROD1") == {}
    assert "USER_PROD1" in caplog.text


def test_upsert_replaces_by_id():
    repo = ProductRepository(InMemoryStore())
    repo.upsert_product(StoredProduct(id="USER_PROD1", product_name="A"))
    repo.upsert_product(StoredProduct(id="USER_PROD2", product_name="B"))
    repo.upsert_product(StoredProduct(id="USER_PROD1", product_name="A2"))

    products = repo.list_products()
    assert [p.id for p in products] == ["USER_PROD1", "USER_PROD2"]
    assert repo.get_product("USER_PROD1").product_name == "A2"
    assert repo.get_product("USER_PROD9") is None


def test_records_are_stored_with_camel_case_keys():
    store = InMemoryStore()
    repo = ProductRepository(store)
    repo.upsert_product(StoredProduct(id="USER_PROD1", product_name="A", origins={"product_name": Origin.AI_EXTRACTED}))
    raw = json.loads(store.get(USER_PRODUCTS_KEY))
    assert raw[0]["productName"] == "A"
    assert raw[0]["origins"] == {"product_name": "AI_EXTRACTED"}


def test_unreadable_store_value_reads_as_empty(caplog):
    repo = ProductRepository(InMemoryStore({USER_PRODUCTS_KEY: '{"oops": 1}'}))
    with caplog.at_level(logging.WARNING):
        assert repo.list_products() == []
    assert USER_PRODUCTS_KEY in caplog.text


def test_hydration_fills_defaults():
    repo = ProductRepository(InMemoryStore())
    product = repo.to_product(StoredProduct(id="USER_PROD42", product_name="", specifications="{broken"))
    assert product.product_id == "USER_PROD42"
    assert product.product_name == "User Added Product"
    assert product.category == "General"
    assert product.manufacturer == "N/A"
    assert product.specifications == {}
    assert "?text=P42" in product.image_url
    assert len(product.lifecycle_phases) == 2
    assert product.current_lifecycle_phase_index == 0


def test_hydration_keeps_stored_values():
    repo = ProductRepository(InMemoryStore())
    stored = StoredProduct(
        id="USER_PROD7",
        product_name="Hoodie",
        category="Textiles",
        image_url="https://cdn.example.com/hoodie.png",
        specifications='{"Sizes": "XS-XXL"}',
        state_of_health=0,
        current_lifecycle_phase_index=1,
    )
    product = repo.to_product(stored)
    assert product.product_name == "Hoodie"
    assert product.image_url == "https://cdn.example.com/hoodie.png"
    assert product.image_hint == "Hoodie"
    assert product.specifications == {"Sizes": "XS-XXL"}
    assert product.state_of_health == 0
    assert product.current_lifecycle_phase_index == 1


def test_json_file_store_round_trip(tmp_path):
    repo = ProductRepository(JsonFileStore(tmp_path / "data"))
    repo.save_suppliers([Supplier(id="SUP100", name="Porto Spinning Mills")])
    assert (tmp_path / "data" / "user_suppliers.json").exists()

    reopened = ProductRepository(JsonFileStore(tmp_path / "data"))
    assert [s.name for s in reopened.list_suppliers()] == ["Porto Spinning Mills"]
    assert reopened.list_products() == []


def test_json_file_store_leaves_no_temp_file(tmp_path):
    store = JsonFileStore(tmp_path)
    store.set(USER_PRODUCTS_KEY, "[]")
    store.set(USER_PRODUCTS_KEY, '[{"id": "USER_PROD1"}]')
    assert store.get(USER_PRODUCTS_KEY) == '[{"id": "USER_PROD1"}]'
    assert sorted(p.name for p in tmp_path.iterdir()) == ["user_products.json"]


def test_failed_write_keeps_previous_list(tmp_path, monkeypatch):
    repo = ProductRepository(JsonFileStore(tmp_path))
    repo.upsert_product(StoredProduct(id="USER_PROD1", product_name="A"))
    repo.upsert_product(StoredProduct(id="USER_PROD2", product_name="B"))

    def fail_replace(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(storage.os, "replace", fail_replace)
    with pytest.raises(OSError):
        repo.upsert_product(StoredProduct(id="USER_PROD3", product_name="C"))
    monkeypatch.undo()

    assert [p.id for p in repo.list_products()] == ["USER_PROD1", "USER_PROD2"]
