"""Shopify Admin API client: product lookups, webhook registration and OAuth code exchange."""

import logging
from typing import Any, Dict, Optional, Tuple
import httpx

from .config import AppConfig
from .errors import UpstreamError

logger = logging.getLogger("shopify_settings_app")


def to_topic_constant(topic: str) -> str:
    """Normalize a webhook topic to its constant form ('app/uninstalled' -> 'APP_UNINSTALLED')."""
    return topic.strip().replace("/", "_").upper()


def to_rest_topic(topic: str) -> str:
    """Convert a topic constant to the REST form ('APP_UNINSTALLED' -> 'app/uninstalled')."""
    if "/" in topic:
        return topic.lower()
    resource, _, event = topic.lower().rpartition("_")
    return f"{resource}/{event}"


class ShopifyAdminClient:
    """
    Thin async client for the Shopify Admin REST API.

    One instance serves every installed shop: the shop domain and access
    token are passed per call. Calls are not retried and responses are not
    cached.
    """

    def __init__(self, config: AppConfig, client: Optional[Any] = None):
        """
        Initialize the client.

        Args:
            config: App configuration
            client: Optional HTTP client (e.g., MockShopifyClient)
        """
        self.config = config

        if client is not None:
            self.client = client
            self._owns_client = False
        else:
            self.client = httpx.AsyncClient(
                headers={"Content-Type": "application/json"},
                timeout=30.0
            )
            self._owns_client = True

    async def close(self):
        """Close HTTP client."""
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def _admin_url(self, shop: str, path: str) -> str:
        return f"https://{shop}/admin/api/{self.config.shopify.api_version}/{path}"

    async def _request(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        """
        Make a request and return the decoded JSON body.

        Raises:
            UpstreamError: on transport errors, non-2xx responses or non-JSON bodies
        """
        try:
            response = await self.client.request(method, url, **kwargs)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            raise UpstreamError(f"Shopify returned {status_code} for {method} {url}", status_code=status_code) from e
        except httpx.RequestError as e:
            raise UpstreamError(f"Request to Shopify failed: {e}") from e
        except ValueError as e:
            raise UpstreamError(f"Invalid JSON from Shopify for {method} {url}") from e

    async def fetch_product(self, shop: str, access_token: str, product_id: str) -> Dict[str, Any]:
        """
        Fetch a single product.

        Args:
            shop: Shop domain
            access_token: Shop access token
            product_id: Numeric product id

        Returns:
            The raw product object
        """
        data = await self._request(
            "GET",
            self._admin_url(shop, f"products/{product_id}.json"),
            headers={"X-Shopify-Access-Token": access_token},
        )
        product = data.get("product") if isinstance(data, dict) else None
        if not product:
            raise UpstreamError(f"Product {product_id} missing from Shopify response")
        return product

    async def register_webhook(self, shop: str, access_token: str, topic: str, address: str) -> bool:
        """
        Subscribe a shop to a webhook topic.

        Returns:
            True if Shopify accepted the subscription
        """
        payload = {"webhook": {"topic": to_rest_topic(topic), "address": address, "format": "json"}}
        try:
            await self._request(
                "POST",
                self._admin_url(shop, "webhooks.json"),
                headers={"X-Shopify-Access-Token": access_token},
                json=payload,
            )
        except UpstreamError as e:
            logger.warning(f"Failed to register {to_topic_constant(topic)} webhook: {e}")
            return False
        return True

    async def exchange_code(self, shop: str, code: str) -> Tuple[str, str]:
        """
        Exchange an OAuth authorization code for an offline access token.

        Returns:
            (access_token, granted scope)
        """
        data = await self._request(
            "POST",
            f"https://{shop}/admin/oauth/access_token",
            json={
                "client_id": self.config.shopify.api_key,
                "client_secret": self.config.shopify.api_secret,
                "code": code,
            },
        )
        access_token = data.get("access_token")
        if not access_token:
            raise UpstreamError("Shopify did not return an access token")
        return access_token, data.get("scope", "")
