"""Session resolution and the gate in front of authenticated endpoints."""

import logging
from dataclasses import dataclass
from typing import Optional, Union
from urllib.parse import urlencode, urlparse

import jwt
from jwt import InvalidTokenError
from fastapi import Request

from .config import AppConfig
from .models.shop_models import ShopSession
from .storage import BaseSessionStorage, offline_session_id
from .store import BaseShopStore

logger = logging.getLogger("shopify_settings_app")


def auth_redirect_url(shop: Optional[str]) -> str:
    """URL that restarts OAuth for a shop."""
    if not shop:
        return "/auth"
    return f"/auth?{urlencode({'shop': shop})}"


def _shop_from_dest(dest: Optional[str]) -> Optional[str]:
    if not dest:
        return None
    return urlparse(dest).netloc or None


def bearer_token(request: Request) -> Optional[str]:
    """Return the bearer token of a request, if any."""
    auth_header = request.headers.get("Authorization", "")
    try:
        auth_scheme, raw_token = auth_header.split(" ", 1)
    except ValueError:
        return None
    if auth_scheme.lower() != "bearer" or not raw_token.strip():
        return None
    return raw_token.strip()


class SessionResolver:
    """
    Resolve the current shop session from an App Bridge session token.

    The embedded UI sends `Authorization: Bearer <token>`, an HS256 JWT
    signed with the app secret whose `dest` claim names the shop. The shop's
    offline grant is then loaded from session storage.
    """

    def __init__(self, config: AppConfig, sessions: BaseSessionStorage):
        self.config = config
        self.sessions = sessions

    def decode_token(self, token: str) -> dict:
        """Verify and decode a session token. Raises jwt.InvalidTokenError."""
        return jwt.decode(
            token,
            self.config.shopify.api_secret,
            algorithms=["HS256"],
            audience=self.config.shopify.api_key,
            leeway=5,
        )

    def shop_hint(self, request: Request) -> Optional[str]:
        """
        Best guess of the shop a request is for, without verifying anything.

        Only used to build the OAuth redirect.
        """
        token = bearer_token(request)
        if token:
            try:
                claims = jwt.decode(token, options={"verify_signature": False})
            except InvalidTokenError:
                claims = {}
            shop = _shop_from_dest(claims.get("dest"))
            if shop:
                return shop
        return request.query_params.get("shop") or None

    async def resolve(self, request: Request) -> Optional[ShopSession]:
        """Return the session for a request, or None if it has none."""
        token = bearer_token(request)
        if not token:
            return None
        try:
            claims = self.decode_token(token)
        except InvalidTokenError as e:
            logger.info("session_token_rejected", extra={"reason": str(e)})
            return None
        shop = _shop_from_dest(claims.get("dest"))
        if not shop:
            return None
        return self.sessions.load_session(offline_session_id(shop))


@dataclass(frozen=True)
class Redirect:
    """Send the client through OAuth."""
    location: str


@dataclass(frozen=True)
class Proceed:
    """Serve the request for this session."""
    session: ShopSession


AuthDecision = Union[Redirect, Proceed]


class AuthGate:
    """
    Decide whether a request may be served.

    | session resolved? | shop installed? | decision            |
    |-------------------|-----------------|---------------------|
    | no                | -               | Redirect to /auth   |
    | yes               | no              | Redirect to /auth   |
    | yes               | yes             | Proceed(session)    |
    """

    def __init__(self, resolver: SessionResolver, store: BaseShopStore):
        self.resolver = resolver
        self.store = store

    async def check(self, request: Request) -> AuthDecision:
        session = await self.resolver.resolve(request)
        if session is None:
            return Redirect(auth_redirect_url(self.resolver.shop_hint(request)))
        if self.store.get_shop(session.shop) is None:
            return Redirect(auth_redirect_url(session.shop))
        return Proceed(session)
