"""FastAPI application wiring."""

import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from .auth import AuthGate, SessionResolver, auth_redirect_url
from .config import AppConfig
from .oauth import OAuthHandler
from .router import get_settings_router
from .service import SettingsService
from .shopify_client import ShopifyAdminClient
from .storage import BaseSessionStorage, InMemorySessionStorage
from .store import BaseShopStore, InMemoryShopStore
from .telemetry import get_request_duration_histogram
from .ui import PageRenderer, render_index
from .webhook import WebhookHandler


def create_app(
    config: AppConfig,
    store: Optional[BaseShopStore] = None,
    sessions: Optional[BaseSessionStorage] = None,
    client: Optional[Any] = None,
    renderer: Optional[PageRenderer] = None,
) -> FastAPI:
    """
    Create the embedded app.

    Args:
        config: App configuration
        store: Shop store (in-memory if omitted)
        sessions: Session storage (in-memory if omitted)
        client: Optional HTTP client for the Admin API (e.g., MockShopifyClient)
        renderer: Optional page renderer for the catch-all route

    Returns:
        FastAPI app ready to run
    """
    logging.basicConfig(filename=config.log_file, level=config.log_level)

    shop_store: BaseShopStore = store if store is not None else InMemoryShopStore()
    session_storage: BaseSessionStorage = sessions if sessions is not None else InMemorySessionStorage()
    admin_client = ShopifyAdminClient(config, client=client)
    render = renderer or render_index

    service = SettingsService(shop_store, admin_client)
    gate = AuthGate(SessionResolver(config, session_storage), shop_store)
    oauth = OAuthHandler(config, shop_store, session_storage, admin_client)
    webhooks = WebhookHandler(shop_store, session_storage, api_secret=config.shopify.api_secret)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        yield
        await admin_client.close()

    app = FastAPI(title="Shopify Settings App", lifespan=lifespan)
    app.state.config = config
    app.state.store = shop_store
    app.state.sessions = session_storage
    app.state.webhooks = webhooks

    app.include_router(webhooks.get_router(config.webhook_path))
    app.include_router(oauth.get_router())
    app.include_router(
        get_settings_router(
            service,
            gate,
            duration_histogram=get_request_duration_histogram(export=config.export_metrics),
        )
    )

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    # Registered last: everything else the embedded UI asks for.
    @app.get("/{path:path}")
    async def index(path: str, shop: Optional[str] = None):
        """Serve the admin page to installed shops, send others through OAuth."""
        if not shop or shop_store.get_shop(shop) is None:
            return RedirectResponse(url=auth_redirect_url(shop), status_code=302)
        return render(config, shop)

    return app
