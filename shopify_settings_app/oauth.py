"""OAuth install flow for the embedded app."""

import hashlib
import hmac
import logging
import re
from typing import Iterable, Optional, Tuple
from urllib.parse import urlencode
from uuid import uuid4

from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import RedirectResponse

from .config import AppConfig
from .errors import UpstreamError
from .models.shop_models import ShopSession
from .shopify_client import ShopifyAdminClient
from .storage import BaseSessionStorage, offline_session_id
from .store import BaseShopStore

logger = logging.getLogger("shopify_settings_app")

STATE_COOKIE = "shopify_oauth_state"
_SHOP_DOMAIN = re.compile(r"^[a-zA-Z0-9][a-zA-Z0-9\-]*\.myshopify\.com$")


def is_valid_shop_domain(shop: Optional[str]) -> bool:
    return bool(shop) and bool(_SHOP_DOMAIN.match(shop))


def _escape_query_part(value: str, reserved: str) -> str:
    return "".join(f"%{ord(char):02X}" if char in reserved else char for char in value)


def compute_query_hmac(query_items: Iterable[Tuple[str, str]], secret: str) -> str:
    """
    HMAC-SHA256 hex digest of the sorted query string, excluding `hmac` itself.

    Shopify signs decoded values with `%` and `&` re-escaped, and keys with
    `%`, `&` and `=` re-escaped.
    """
    message = "&".join(
        f"{_escape_query_part(key, '%&=')}={_escape_query_part(value, '%&')}"
        for key, value in sorted(query_items)
        if key not in ("hmac", "signature")
    )
    return hmac.new(secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha256).hexdigest()


def verify_query_hmac(query_items: Iterable[Tuple[str, str]], secret: str) -> bool:
    items = list(query_items)
    supplied = dict(items).get("hmac")
    if not supplied:
        return False
    return hmac.compare_digest(compute_query_hmac(items, secret).encode("utf-8"), supplied.encode("utf-8"))


class OAuthHandler:
    """
    Run the install handshake and the after-auth steps.

    After a successful code exchange the offline grant is stored, the shop
    is (re)installed with empty settings and subscribed to APP_UNINSTALLED.
    """

    def __init__(
        self,
        config: AppConfig,
        store: BaseShopStore,
        sessions: BaseSessionStorage,
        client: ShopifyAdminClient,
    ):
        self.config = config
        self.store = store
        self.sessions = sessions
        self.client = client

    def authorize_url(self, shop: str, state: str) -> str:
        query = urlencode(
            {
                "client_id": self.config.shopify.api_key,
                "scope": ",".join(self.config.shopify.scopes),
                "redirect_uri": f"{self.config.shopify.base_url}/auth/callback",
                "state": state,
            }
        )
        return f"https://{shop}/admin/oauth/authorize?{query}"

    async def after_auth(self, shop: str, access_token: str, scope: str) -> ShopSession:
        session = ShopSession(id=offline_session_id(shop), shop=shop, access_token=access_token, scope=scope)
        self.sessions.store_session(session)
        self.store.upsert_shop(shop, scope)
        logger.info("shop_installed", extra={"shop": shop, "scope": scope})

        registered = await self.client.register_webhook(
            shop,
            access_token,
            topic="APP_UNINSTALLED",
            address=f"{self.config.shopify.base_url}{self.config.webhook_path}",
        )
        if not registered:
            logger.warning("Failed to register APP_UNINSTALLED webhook", extra={"shop": shop})
        return session

    def get_router(self) -> APIRouter:
        """Create a FastAPI router for /auth and /auth/callback."""
        router = APIRouter(tags=["auth"])

        @router.get("/auth")
        async def begin_auth(shop: Optional[str] = None):
            """Redirect the merchant to the Shopify consent screen."""
            if not is_valid_shop_domain(shop):
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing or invalid shop parameter")
            state = uuid4().hex
            response = RedirectResponse(url=self.authorize_url(shop, state), status_code=302)
            response.set_cookie(STATE_COOKIE, state, httponly=True, secure=True, samesite="none")
            return response

        @router.get("/auth/callback")
        async def auth_callback(request: Request):
            """Complete the handshake and send the merchant into the app."""
            query_items = list(request.query_params.multi_items())
            if not verify_query_hmac(query_items, self.config.shopify.api_secret):
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid OAuth HMAC")

            shop = request.query_params.get("shop")
            code = request.query_params.get("code")
            state = request.query_params.get("state")
            if not is_valid_shop_domain(shop) or not code or not state:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Missing required OAuth callback params: shop, code, state",
                )

            expected_state = request.cookies.get(STATE_COOKIE)
            if not expected_state or not hmac.compare_digest(expected_state.encode("utf-8"), state.encode("utf-8")):
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid OAuth state")

            try:
                access_token, scope = await self.client.exchange_code(shop, code)
            except UpstreamError as e:
                logger.error("oauth_exchange_failed", extra={"shop": shop, "error": str(e)})
                raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e)) from e

            await self.after_auth(shop, access_token, scope)

            host = request.query_params.get("host", "")
            response = RedirectResponse(url=f"/?{urlencode({'shop': shop, 'host': host})}", status_code=302)
            response.delete_cookie(STATE_COOKIE)
            return response

        return router
