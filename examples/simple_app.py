from shopify_settings_app import AppConfig, create_app

# Reads SHOPIFY_API_KEY, SHOPIFY_API_SECRET, SCOPES and HOST (and a .env file if present)
config = AppConfig.from_env()

app = create_app(config)

# Run: uvicorn examples.simple_app:app --port 8081 --reload
