from urllib.parse import parse_qs, urlparse

import pytest

from shopify_settings_app.oauth import STATE_COOKIE, compute_query_hmac, is_valid_shop_domain
from shopify_settings_app.storage import offline_session_id

from conftest import API_KEY, API_SECRET, SHOP


def callback_params(state="state123", shop=SHOP, secret=API_SECRET):
    params = {"code": "authcode", "host": "aG9zdA", "shop": shop, "state": state, "timestamp": "1700000000"}
    params["hmac"] = compute_query_hmac(params.items(), secret)
    return params


def test_is_valid_shop_domain():
    assert is_valid_shop_domain(SHOP)
    assert not is_valid_shop_domain("evil.com")
    assert not is_valid_shop_domain("")
    assert not is_valid_shop_domain(None)


@pytest.mark.asyncio
async def test_begin_auth_redirects_to_consent_screen(http_client):
    async with http_client as client:
        response = await client.get("/auth", params={"shop": SHOP})
    assert response.status_code == 302
    location = urlparse(response.headers["location"])
    query = parse_qs(location.query)
    assert location.netloc == SHOP
    assert location.path == "/admin/oauth/authorize"
    assert query["client_id"] == [API_KEY]
    assert query["scope"] == ["read_products"]
    assert query["redirect_uri"] == ["https://app.example.com/auth/callback"]
    assert STATE_COOKIE in response.headers["set-cookie"]


@pytest.mark.asyncio
async def test_begin_auth_rejects_invalid_shop(http_client):
    async with http_client as client:
        response = await client.get("/auth", params={"shop": "evil.com"})
        missing = await client.get("/auth")
    assert response.status_code == 400
    assert missing.status_code == 400


@pytest.mark.asyncio
async def test_callback_installs_shop(http_client, mock_client, store, sessions):
    async with http_client as client:
        response = await client.get(
            "/auth/callback",
            params=callback_params(),
            headers={"Cookie": f"{STATE_COOKIE}=state123"},
        )
    assert response.status_code == 302
    location = urlparse(response.headers["location"])
    assert location.path == "/"
    assert parse_qs(location.query) == {"shop": [SHOP], "host": ["aG9zdA"]}

    record = store.get_shop(SHOP)
    assert record.scope == "read_products"
    assert record.settings.product_id is None
    assert sessions.load_session(offline_session_id(SHOP)).access_token == "shpat_mock"

    webhook_calls = [kwargs for method, url, kwargs in mock_client.calls if url.endswith("/webhooks.json")]
    assert webhook_calls[0]["json"]["webhook"]["topic"] == "app/uninstalled"
    assert webhook_calls[0]["json"]["webhook"]["address"] == "https://app.example.com/webhooks"


@pytest.mark.asyncio
async def test_callback_survives_webhook_registration_failure(http_client, mock_client, store):
    mock_client.fail_webhooks = True
    async with http_client as client:
        response = await client.get(
            "/auth/callback",
            params=callback_params(),
            headers={"Cookie": f"{STATE_COOKIE}=state123"},
        )
    assert response.status_code == 302
    assert store.get_shop(SHOP) is not None


@pytest.mark.asyncio
async def test_callback_rejects_bad_hmac(http_client, store):
    async with http_client as client:
        response = await client.get(
            "/auth/callback",
            params=callback_params(secret="wrong_secret_0123456789abcdef0123"),
            headers={"Cookie": f"{STATE_COOKIE}=state123"},
        )
    assert response.status_code == 400
    assert store.get_shop(SHOP) is None


@pytest.mark.asyncio
async def test_callback_rejects_state_mismatch(http_client, store):
    async with http_client as client:
        response = await client.get(
            "/auth/callback",
            params=callback_params(state="other"),
            headers={"Cookie": f"{STATE_COOKIE}=state123"},
        )
    assert response.status_code == 400
    assert store.get_shop(SHOP) is None


@pytest.mark.asyncio
async def test_reinstall_resets_settings(http_client, store, installed):
    store.set_product_id(SHOP, "123")
    async with http_client as client:
        await client.get(
            "/auth/callback",
            params=callback_params(),
            headers={"Cookie": f"{STATE_COOKIE}=state123"},
        )
    assert store.get_shop(SHOP).settings.product_id is None


def test_query_hmac_escapes_reserved_characters():
    import hashlib
    import hmac

    params = [("shop", SHOP), ("state", "a&b=c%d"), ("x&y", "1")]
    message = f"shop={SHOP}&state=a%26b=c%25d&x%26y=1"
    expected = hmac.new(API_SECRET.encode(), message.encode(), hashlib.sha256).hexdigest()
    assert compute_query_hmac(params, API_SECRET) == expected


@pytest.mark.asyncio
async def test_callback_accepts_values_with_reserved_characters(http_client, store):
    import hashlib
    import hmac

    params = {"code": "authcode", "host": "h&o=s%t", "shop": SHOP, "state": "state123", "timestamp": "1700000000"}
    message = f"code=authcode&host=h%26o=s%25t&shop={SHOP}&state=state123&timestamp=1700000000"
    params["hmac"] = hmac.new(API_SECRET.encode(), message.encode(), hashlib.sha256).hexdigest()
    async with http_client as client:
        response = await client.get(
            "/auth/callback",
            params=params,
            headers={"Cookie": f"{STATE_COOKIE}=state123"},
        )
    assert response.status_code == 302
    assert store.get_shop(SHOP) is not None
