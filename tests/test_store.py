import pytest

from shopify_settings_app.errors import ShopNotFound
from shopify_settings_app.store import InMemoryShopStore


def test_upsert_creates_shop_with_empty_settings():
    store = InMemoryShopStore()
    record = store.upsert_shop("a.myshopify.com", "read_products")
    assert record.shop_id == "a.myshopify.com"
    assert record.scope == "read_products"
    assert record.settings.product_id is None
    assert "a.myshopify.com" in store


def test_upsert_replaces_existing_settings():
    store = InMemoryShopStore()
    store.upsert_shop("a.myshopify.com", "read_products")
    store.set_product_id("a.myshopify.com", "123")
    store.upsert_shop("a.myshopify.com", "read_products,write_products")
    record = store.get_shop("a.myshopify.com")
    assert record.scope == "read_products,write_products"
    assert record.settings.product_id is None


def test_get_unknown_shop_returns_none():
    assert InMemoryShopStore().get_shop("nope.myshopify.com") is None


def test_set_product_id_overwrites():
    store = InMemoryShopStore()
    store.upsert_shop("a.myshopify.com", "")
    store.set_product_id("a.myshopify.com", "1")
    store.set_product_id("a.myshopify.com", "2")
    assert store.get_shop("a.myshopify.com").settings.product_id == "2"


def test_set_product_id_unknown_shop_raises():
    with pytest.raises(ShopNotFound):
        InMemoryShopStore().set_product_id("nope.myshopify.com", "1")


def test_remove_shop():
    store = InMemoryShopStore()
    store.upsert_shop("a.myshopify.com", "")
    assert store.remove_shop("a.myshopify.com") is True
    assert store.remove_shop("a.myshopify.com") is False
    assert "a.myshopify.com" not in store
    assert len(store) == 0


def test_returned_records_do_not_alias_stored_state():
    store = InMemoryShopStore()
    store.upsert_shop("a.myshopify.com", "")
    record = store.get_shop("a.myshopify.com")
    record.settings.product_id = "999"
    assert store.get_shop("a.myshopify.com").settings.product_id is None
