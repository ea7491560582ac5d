"""Pydantic models for the settings endpoints."""

from enum import Enum
from typing import Optional, Union
from pydantic import BaseModel, Field, ConfigDict


class SettingsStatus(str, Enum):
    EMPTY = "EMPTY_SETTINGS"
    OK = "OK_SETTINGS"


class ProductImage(BaseModel):
    """Product image as returned by the Admin REST API."""
    id: Optional[Union[int, str]] = None
    src: Optional[str] = None
    alt: Optional[str] = None

    model_config = ConfigDict(extra="allow")


class EnrichedProduct(BaseModel):
    """
    Live product data for the stored product id.

    Only the fields the admin page renders are declared; everything else the
    catalog returns is kept as extra fields.
    """
    id: Union[int, str]
    title: str
    handle: Optional[str] = None
    image: Optional[ProductImage] = None

    model_config = ConfigDict(extra="allow")


class SettingsResponse(BaseModel):
    """Body of GET and POST /settings."""
    status: SettingsStatus
    data: Optional[EnrichedProduct] = None


class SetSettingsRequest(BaseModel):
    """Body of POST /settings."""
    product_id: str = Field(..., alias="productId", min_length=1)

    model_config = ConfigDict(populate_by_name=True)
