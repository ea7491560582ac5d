"""Configuration management for the Shopify settings app."""

import os
from typing import Optional
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ConfigDict


class ShopifyAppConfig(BaseModel):
    """Shopify app credentials and API configuration."""
    api_key: str = Field(..., description="App API key (client id)")
    api_secret: str = Field(..., min_length=1, description="App API secret, also signs session tokens and webhooks")
    scopes: list[str] = Field(default_factory=lambda: ["read_products"], description="OAuth scopes to request")
    host: str = Field(..., description="Public app URL (e.g., 'https://myapp.example.com')")
    api_version: str = Field("2024-01", description="Shopify Admin API version")

    @property
    def host_name(self) -> str:
        """Host without scheme, as used when building callback addresses."""
        return self.host.replace("https://", "").replace("http://", "").rstrip("/")

    @property
    def base_url(self) -> str:
        return self.host.rstrip("/")


class AppConfig(BaseModel):
    """Main configuration for the settings app."""
    shopify: ShopifyAppConfig
    port: int = Field(8081, gt=0, description="Port the server binds to")
    log_file: Optional[str] = Field("settings_app.log", description="Log file path (None logs to stderr)")
    log_level: str = Field("INFO", description="Logging level name")
    webhook_path: str = Field("/webhooks", description="Path receiving Shopify webhooks")
    export_metrics: bool = Field(False, description="Print request metrics to the console")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "shopify": {
                    "api_key": "your_api_key",
                    "api_secret": "your_api_secret",
                    "scopes": ["read_products"],
                    "host": "https://myapp.example.com",
                    "api_version": "2024-01"
                },
                "port": 8081,
                "log_file": "settings_app.log",
                "log_level": "INFO"
            }
        }
    )

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "AppConfig":
        """
        Build configuration from environment variables.

        A `.env` file is loaded first when present; variables already set in
        the environment win.

        Args:
            env_file: Optional explicit path to a dotenv file
        """
        load_dotenv(env_file)
        scopes = [s.strip() for s in os.environ.get("SCOPES", "read_products").split(",") if s.strip()]
        shopify = ShopifyAppConfig(
            api_key=os.environ.get("SHOPIFY_API_KEY", ""),
            api_secret=os.environ.get("SHOPIFY_API_SECRET", ""),
            scopes=scopes,
            host=os.environ.get("HOST", ""),
            api_version=os.environ.get("SHOPIFY_API_VERSION", "2024-01"),
        )
        return cls(
            shopify=shopify,
            port=int(os.environ.get("PORT") or 8081),
            log_file=os.environ.get("LOG_FILE", "settings_app.log") or None,
            log_level=os.environ.get("LOG_LEVEL", "INFO"),
        )
