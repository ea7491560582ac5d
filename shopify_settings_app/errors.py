"""Exceptions raised by the settings app."""

from typing import Optional


class AuthenticationRequired(Exception):
    """Raised when a shop has no usable session or is not installed."""

    def __init__(self, shop: Optional[str] = None):
        self.shop = shop
        super().__init__(f"Authentication required for shop {shop!r}")


class UpstreamError(Exception):
    """Raised when a call to the Shopify Admin API fails."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class MalformedInput(ValueError):
    """Raised when a request payload or product reference cannot be parsed."""


class ShopNotFound(KeyError):
    """Raised when a store operation targets an unknown shop."""
