"""Mock Shopify client for sandbox mode."""

import re
from typing import Any, Dict, List, Optional, Tuple
import httpx

from .models.shop_models import ShopSession
from .storage import BaseSessionStorage, offline_session_id
from .store import BaseShopStore

_PRODUCT_PATH = re.compile(r"/products/(?P<product_id>[^/]+)\.json$")


def sample_product(product_id: str = "123", title: str = "Mock T-Shirt") -> Dict[str, Any]:
    """Product object shaped like the Admin REST API response."""
    return {
        "id": int(product_id) if product_id.isdigit() else product_id,
        "title": title,
        "body_html": "<p>Soft cotton t-shirt</p>",
        "vendor": "MockBrand",
        "product_type": "Apparel",
        "handle": "mock-t-shirt",
        "status": "active",
        "image": {"id": 1, "src": "https://example.com/img1.jpg", "alt": "Front"},
        "variants": [
            {"id": 1, "title": "Red / Small", "sku": "RS", "price": "29.99"}
        ],
    }


class MockShopifyClient:
    """
    Mock Shopify client that answers Admin API calls with sample data.

    Every request is recorded in `calls` as (method, url, kwargs).
    """

    def __init__(
        self,
        products: Optional[Dict[str, Dict[str, Any]]] = None,
        access_token: str = "shpat_mock",
        scope: str = "read_products",
    ):
        self.products = products if products is not None else {"123": sample_product("123")}
        self.access_token = access_token
        self.scope = scope
        self.fail_products = False
        self.fail_webhooks = False
        self.calls: List[Tuple[str, str, Dict[str, Any]]] = []

    def add_product(self, product_id: str, title: str = "Mock Product") -> Dict[str, Any]:
        product = sample_product(product_id, title)
        self.products[product_id] = product
        return product

    async def request(self, method: str, url: str, **kwargs) -> httpx.Response:
        self.calls.append((method, url, kwargs))
        request = httpx.Request(method, url)

        if url.endswith("/admin/oauth/access_token"):
            return httpx.Response(200, json={"access_token": self.access_token, "scope": self.scope}, request=request)

        if url.endswith("/webhooks.json"):
            if self.fail_webhooks:
                return httpx.Response(422, json={"errors": {"address": ["is invalid"]}}, request=request)
            webhook = dict(kwargs.get("json", {}).get("webhook", {}))
            webhook["id"] = len(self.calls)
            return httpx.Response(201, json={"webhook": webhook}, request=request)

        match = _PRODUCT_PATH.search(url)
        if match:
            if self.fail_products:
                return httpx.Response(503, json={"errors": "Service unavailable"}, request=request)
            product = self.products.get(match.group("product_id"))
            if product is None:
                return httpx.Response(404, json={"errors": "Not Found"}, request=request)
            return httpx.Response(200, json={"product": product}, request=request)

        return httpx.Response(404, json={"errors": "Not Found"}, request=request)

    async def aclose(self) -> None:
        return None


def install_sandbox_shop(
    store: BaseShopStore,
    sessions: BaseSessionStorage,
    shop: str,
    access_token: str = "shpat_mock",
    scope: str = "read_products",
) -> ShopSession:
    """Install a shop the way OAuth would, without the consent screen."""
    session = ShopSession(id=offline_session_id(shop), shop=shop, access_token=access_token, scope=scope)
    sessions.store_session(session)
    store.upsert_shop(shop, scope)
    return session
