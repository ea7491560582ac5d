"""Run the app against mock Admin API data, with an already installed shop."""

from shopify_settings_app import AppConfig, InMemoryShopStore, MockShopifyClient, create_app
from shopify_settings_app.mock_client import install_sandbox_shop
from shopify_settings_app.storage import InMemorySessionStorage

config = AppConfig(
    shopify={
        "api_key": "your_api_key",
        "api_secret": "your_api_secret",
        "host": "https://localhost:8081",
    },
    log_file=None,
)

store = InMemoryShopStore()
sessions = InMemorySessionStorage()
install_sandbox_shop(store, sessions, "mystore.myshopify.com")

client = MockShopifyClient()
client.add_product("456", "Thank-you Card")

app = create_app(config, store=store, sessions=sessions, client=client)

# Session tokens for GET/POST /settings are HS256 JWTs signed with api_secret,
# with aud=api_key and dest=https://mystore.myshopify.com.
# Run: uvicorn examples.sandbox_app:app --port 8081 --reload
