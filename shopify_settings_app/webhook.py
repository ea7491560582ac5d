"""Webhook handler for Shopify events."""

import base64
import hashlib
import hmac
import json
import logging
from typing import Any, Callable, Dict

from fastapi import APIRouter, Request

from .shopify_client import to_topic_constant
from .storage import BaseSessionStorage, offline_session_id
from .store import BaseShopStore

logger = logging.getLogger("shopify_settings_app")


class WebhookHandler:
    """
    Handle Shopify webhooks.

    APP_UNINSTALLED forgets the shop and its access grant. Other topics are
    dispatched to handlers registered with `on()`.
    """

    def __init__(
        self,
        store: BaseShopStore,
        sessions: BaseSessionStorage,
        api_secret: str,
    ):
        """
        Initialize webhook handler.

        Args:
            store: Shop store
            sessions: Session storage holding the shops' access grants
            api_secret: App secret used to verify webhook signatures
        """
        self.store = store
        self.sessions = sessions
        self.api_secret = api_secret
        self._handlers: Dict[str, list] = {}
        self.on("APP_UNINSTALLED")(self._on_app_uninstalled)

    def verify_webhook(self, data: bytes, hmac_header: str) -> bool:
        """
        Verify Shopify webhook signature.

        Args:
            data: Raw request body
            hmac_header: Base64 HMAC header from Shopify

        Returns:
            True if signature is valid
        """
        if not self.api_secret or not hmac_header:
            return False

        digest = hmac.new(self.api_secret.encode("utf-8"), data, hashlib.sha256).digest()
        computed_hmac = base64.b64encode(digest)
        return hmac.compare_digest(computed_hmac, hmac_header.encode("utf-8"))

    def on(self, topic: str):
        """
        Decorator to register webhook event handlers.

        Handlers are called with (shop, payload).

        Example:
            @webhook_handler.on('products/update')
            async def handle_product_update(shop, product_data):
                ...
        """
        def decorator(func: Callable):
            self._handlers.setdefault(to_topic_constant(topic), []).append(func)
            return func
        return decorator

    async def _on_app_uninstalled(self, shop: str, _data: Dict[str, Any]) -> None:
        removed = self.store.remove_shop(shop)
        self.sessions.delete_session(offline_session_id(shop))
        logger.info("shop_uninstalled", extra={"shop": shop, "removed": removed})

    async def handle_webhook(self, topic: str, shop: str, data: Dict[str, Any]) -> bool:
        """
        Call the handlers registered for a topic.

        Returns:
            True if at least one handler ran
        """
        handlers = self._handlers.get(to_topic_constant(topic), [])
        for handler in handlers:
            await handler(shop, data)
        return bool(handlers)

    async def process(self, request: Request) -> Dict[str, str]:
        """
        Process one webhook request.

        Failures are logged and never raised: Shopify gets a 200 either way.
        """
        hmac_header = request.headers.get("X-Shopify-Hmac-Sha256", "")
        topic = request.headers.get("X-Shopify-Topic", "")
        shop = request.headers.get("X-Shopify-Shop-Domain", "")
        body = await request.body()

        if not self.verify_webhook(body, hmac_header):
            logger.warning("Failed to process webhook: invalid signature", extra={"topic": topic, "shop": shop})
            return {"status": "ignored"}
        if not topic or not shop:
            logger.warning("Failed to process webhook: missing topic or shop header")
            return {"status": "ignored"}

        try:
            data = json.loads(body) if body else {}
            handled = await self.handle_webhook(topic, shop, data)
        except Exception as e:
            logger.error(f"Failed to process webhook: {e}", extra={"topic": topic, "shop": shop})
            return {"status": "ignored"}

        logger.info("Webhook processed, returned status code 200", extra={"topic": topic, "shop": shop})
        return {"status": "success" if handled else "ignored"}

    def get_router(self, path: str = "/webhooks") -> APIRouter:
        """Create a FastAPI router with the webhook endpoint."""
        router = APIRouter(tags=["webhooks"])

        @router.post(path)
        async def shopify_webhook(request: Request):
            """Endpoint to receive Shopify webhooks."""
            return await self.process(request)

        return router
