"""Data models for shops, sessions and settings."""

from .shop_models import (
    ShopRecord,
    SettingsRecord,
    ShopSession,
)
from .settings_models import (
    SettingsStatus,
    SettingsResponse,
    SetSettingsRequest,
    EnrichedProduct,
    ProductImage,
)

__all__ = [
    "ShopRecord",
    "SettingsRecord",
    "ShopSession",
    "SettingsStatus",
    "SettingsResponse",
    "SetSettingsRequest",
    "EnrichedProduct",
    "ProductImage",
]
