import time

import httpx
import jwt
import pytest

from shopify_settings_app.app import create_app
from shopify_settings_app.config import AppConfig
from shopify_settings_app.mock_client import MockShopifyClient
from shopify_settings_app.models.shop_models import ShopSession
from shopify_settings_app.storage import InMemorySessionStorage, offline_session_id
from shopify_settings_app.store import InMemoryShopStore

SHOP = "mystore.myshopify.com"
API_KEY = "test_api_key"
API_SECRET = "test_api_secret_0123456789abcdef0123"


def make_config():
    return AppConfig(
        shopify={
            "api_key": API_KEY,
            "api_secret": API_SECRET,
            "scopes": ["read_products"],
            "host": "https://app.example.com",
            "api_version": "2024-01",
        },
        log_file=None,
    )


@pytest.fixture
def config():
    return make_config()


@pytest.fixture
def store():
    return InMemoryShopStore()


@pytest.fixture
def sessions():
    return InMemorySessionStorage()


@pytest.fixture
def mock_client():
    return MockShopifyClient()


@pytest.fixture
def installed(store, sessions):
    """Install SHOP as OAuth would and return its session."""
    session = ShopSession(id=offline_session_id(SHOP), shop=SHOP, access_token="shpat_test", scope="read_products")
    sessions.store_session(session)
    store.upsert_shop(SHOP, "read_products")
    return session


@pytest.fixture
def make_token():
    def _make_token(shop=SHOP, secret=API_SECRET, audience=API_KEY, expires_in=60):
        now = int(time.time())
        claims = {
            "iss": f"https://{shop}/admin",
            "dest": f"https://{shop}",
            "aud": audience,
            "sub": "42",
            "iat": now,
            "nbf": now - 5,
            "exp": now + expires_in,
        }
        return jwt.encode(claims, secret, algorithm="HS256")
    return _make_token


@pytest.fixture
def app(config, store, sessions, mock_client):
    return create_app(config, store=store, sessions=sessions, client=mock_client)


@pytest.fixture
def http_client(app):
    transport = httpx.ASGITransport(app=app)
    return httpx.AsyncClient(transport=transport, base_url="http://test")
