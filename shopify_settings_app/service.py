"""Settings service: read and write the selected product of a shop."""

import logging
import re

from pydantic import ValidationError

from .errors import AuthenticationRequired, MalformedInput, UpstreamError
from .models.settings_models import EnrichedProduct, SettingsResponse, SettingsStatus
from .models.shop_models import ShopSession
from .shopify_client import ShopifyAdminClient
from .store import BaseShopStore

logger = logging.getLogger("shopify_settings_app")

_NUMERIC_ID = re.compile(r"^[0-9]+$")


def parse_product_reference(reference: str) -> str:
    """
    Extract the numeric product id from a product reference.

    The product picker hands out global ids such as
    'gid://shopify/Product/123'; only the last path segment is the id.
    A bare numeric id is returned unchanged.

    Raises:
        MalformedInput: if the last segment is not a number
    """
    if not isinstance(reference, str):
        raise MalformedInput("Product reference must be a string")
    product_id = reference.strip().split("/")[-1]
    if not _NUMERIC_ID.match(product_id):
        raise MalformedInput(f"Invalid product reference: {reference!r}")
    return product_id


class SettingsService:
    """
    Read and write per-shop settings.

    The store only holds the product id; product details are fetched from
    Shopify on every read.
    """

    def __init__(self, store: BaseShopStore, catalog: ShopifyAdminClient):
        self.store = store
        self.catalog = catalog

    async def _enrich(self, session: ShopSession, product_id: str) -> SettingsResponse:
        product = await self.catalog.fetch_product(session.shop, session.access_token, product_id)
        try:
            enriched = EnrichedProduct.model_validate(product)
        except ValidationError as e:
            raise UpstreamError(f"Unexpected product data for {product_id}") from e
        return SettingsResponse(status=SettingsStatus.OK, data=enriched)

    async def get_settings(self, session: ShopSession) -> SettingsResponse:
        """
        Get the settings of the session's shop.

        Raises:
            AuthenticationRequired: if the shop is not installed
            UpstreamError: if the product lookup fails
        """
        shop = self.store.get_shop(session.shop)
        if shop is None:
            raise AuthenticationRequired(session.shop)

        product_id = shop.settings.product_id
        if not product_id:
            return SettingsResponse(status=SettingsStatus.EMPTY)

        logger.info("settings_read", extra={"shop": session.shop, "product_id": product_id})
        return await self._enrich(session, product_id)

    async def set_settings(self, session: ShopSession, product_reference: str) -> SettingsResponse:
        """
        Select a product for the session's shop and return it enriched.

        The new id is stored before the lookup, so it stays selected even if
        the lookup fails.

        Raises:
            MalformedInput: if the reference has no numeric id
            AuthenticationRequired: if the shop is not installed
            UpstreamError: if the product lookup fails
        """
        product_id = parse_product_reference(product_reference)

        if self.store.get_shop(session.shop) is None:
            raise AuthenticationRequired(session.shop)

        self.store.set_product_id(session.shop, product_id)
        logger.info("settings_updated", extra={"shop": session.shop, "product_id": product_id})
        return await self._enrich(session, product_id)
