"""Pydantic models for installed shops and their access grants."""

from typing import Optional
from pydantic import BaseModel, Field, ConfigDict


class SettingsRecord(BaseModel):
    """Per-shop settings. A missing product id means nothing is selected yet."""
    product_id: Optional[str] = Field(None, alias="productId")

    model_config = ConfigDict(populate_by_name=True)


class ShopRecord(BaseModel):
    """An installed shop."""
    shop_id: str
    scope: str = ""
    settings: SettingsRecord = Field(default_factory=SettingsRecord)


class ShopSession(BaseModel):
    """Access grant obtained through OAuth for a shop."""
    id: str
    shop: str
    access_token: str
    scope: str = ""
    is_online: bool = False
