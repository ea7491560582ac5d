"""Shop store: installed shops and their selected product."""

from abc import ABC, abstractmethod
from typing import Optional

from .errors import ShopNotFound
from .models.shop_models import ShopRecord, SettingsRecord


class BaseShopStore(ABC):
    """Abstract shop store interface."""

    @abstractmethod
    def upsert_shop(self, shop_id: str, scope: str) -> ShopRecord:
        """Create or replace a shop record with empty settings."""

    @abstractmethod
    def get_shop(self, shop_id: str) -> Optional[ShopRecord]:
        """Get a shop record, or None if the shop is not installed."""

    @abstractmethod
    def set_product_id(self, shop_id: str, product_id: str) -> ShopRecord:
        """Replace the selected product of an installed shop."""

    @abstractmethod
    def remove_shop(self, shop_id: str) -> bool:
        """Forget a shop. Returns True if a record was removed."""

    def __contains__(self, shop_id: object) -> bool:
        return isinstance(shop_id, str) and self.get_shop(shop_id) is not None


class InMemoryShopStore(BaseShopStore):
    """
    Process-local shop store.

    Shops are lost on restart and have to go through OAuth again.
    """

    def __init__(self):
        self._shops: dict[str, ShopRecord] = {}

    def upsert_shop(self, shop_id: str, scope: str) -> ShopRecord:
        record = ShopRecord(shop_id=shop_id, scope=scope, settings=SettingsRecord())
        self._shops[shop_id] = record
        return record.model_copy(deep=True)

    def get_shop(self, shop_id: str) -> Optional[ShopRecord]:
        record = self._shops.get(shop_id)
        if record is None:
            return None
        return record.model_copy(deep=True)

    def set_product_id(self, shop_id: str, product_id: str) -> ShopRecord:
        record = self._shops.get(shop_id)
        if record is None:
            raise ShopNotFound(shop_id)
        updated = record.model_copy(update={"settings": SettingsRecord(product_id=product_id)})
        self._shops[shop_id] = updated
        return updated.model_copy(deep=True)

    def remove_shop(self, shop_id: str) -> bool:
        return self._shops.pop(shop_id, None) is not None

    def __len__(self) -> int:
        return len(self._shops)
