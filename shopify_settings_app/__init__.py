"""
Shopify product settings app

An embedded admin app that lets a merchant pick one product, remembers
the choice per shop and serves it back with live product data.
"""

__version__ = "0.1.0"

from .app import create_app
from .config import AppConfig, ShopifyAppConfig
from .service import SettingsService, parse_product_reference
from .store import BaseShopStore, InMemoryShopStore
from .mock_client import MockShopifyClient

__all__ = [
    "create_app",
    "AppConfig",
    "ShopifyAppConfig",
    "SettingsService",
    "parse_product_reference",
    "BaseShopStore",
    "InMemoryShopStore",
    "MockShopifyClient",
]
