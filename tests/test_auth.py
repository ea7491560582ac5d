import pytest
from starlette.requests import Request

from shopify_settings_app.auth import AuthGate, Proceed, Redirect, SessionResolver, auth_redirect_url

from conftest import SHOP


def make_request(token=None, query=b""):
    headers = []
    if token:
        headers.append((b"authorization", f"Bearer {token}".encode()))
    return Request({"type": "http", "method": "GET", "path": "/settings", "headers": headers, "query_string": query})


def make_gate(config, store, sessions):
    return AuthGate(SessionResolver(config, sessions), store)


def test_auth_redirect_url():
    assert auth_redirect_url(SHOP) == f"/auth?shop={SHOP}"
    assert auth_redirect_url(None) == "/auth"


@pytest.mark.asyncio
async def test_no_token_redirects_using_shop_query(config, store, sessions):
    gate = make_gate(config, store, sessions)
    decision = await gate.check(make_request(query=f"shop={SHOP}".encode()))
    assert decision == Redirect(f"/auth?shop={SHOP}")


@pytest.mark.asyncio
async def test_no_token_and_no_shop_redirects_to_bare_auth(config, store, sessions):
    decision = await make_gate(config, store, sessions).check(make_request())
    assert decision == Redirect("/auth")


@pytest.mark.asyncio
async def test_valid_token_without_grant_redirects(config, store, sessions, make_token):
    decision = await make_gate(config, store, sessions).check(make_request(make_token()))
    assert decision == Redirect(f"/auth?shop={SHOP}")


@pytest.mark.asyncio
async def test_session_for_uninstalled_shop_redirects(config, store, sessions, installed, make_token):
    store.remove_shop(SHOP)
    decision = await make_gate(config, store, sessions).check(make_request(make_token()))
    assert decision == Redirect(f"/auth?shop={SHOP}")


@pytest.mark.asyncio
async def test_known_shop_proceeds(config, store, sessions, installed, make_token):
    decision = await make_gate(config, store, sessions).check(make_request(make_token()))
    assert isinstance(decision, Proceed)
    assert decision.session.shop == SHOP
    assert decision.session.access_token == "shpat_test"


@pytest.mark.asyncio
async def test_bad_signature_is_not_a_session(config, store, sessions, installed, make_token):
    token = make_token(secret="some_other_secret_0123456789abcdef")
    decision = await make_gate(config, store, sessions).check(make_request(token))
    assert decision == Redirect(f"/auth?shop={SHOP}")


@pytest.mark.asyncio
async def test_wrong_audience_or_expired_token_is_rejected(config, sessions, installed, make_token):
    resolver = SessionResolver(config, sessions)
    assert await resolver.resolve(make_request(make_token(audience="another_app"))) is None
    assert await resolver.resolve(make_request(make_token(expires_in=-60))) is None


@pytest.mark.asyncio
async def test_non_bearer_header_is_ignored(config, sessions, installed):
    request = Request({
        "type": "http",
        "method": "GET",
        "path": "/settings",
        "headers": [(b"authorization", b"Basic dXNlcjpwYXNz")],
        "query_string": b"",
    })
    assert await SessionResolver(config, sessions).resolve(request) is None
