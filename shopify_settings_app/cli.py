"""Command-line interface for the Shopify settings app."""

import json
from pathlib import Path
from typing import List, Optional
import typer
from rich.console import Console
from rich.table import Table

from .config import AppConfig
from .errors import MalformedInput
from .service import parse_product_reference

app = typer.Typer(
    name="shopify-settings",
    help="Shopify product settings app CLI"
)
console = Console()


def load_config(config_path: Optional[str]) -> AppConfig:
    """Load configuration from a JSON file, or from the environment when no path is given."""
    if config_path is None:
        return AppConfig.from_env()

    config_file = Path(config_path)
    if not config_file.exists():
        console.print(f"[red]Error: Config file not found: {config_path}[/red]")
        raise typer.Exit(1)

    with open(config_file) as f:
        config_data = json.load(f)

    return AppConfig(**config_data)


@app.command()
def init(
    output: str = typer.Option("config.json", help="Output configuration file path")
):
    """Initialize a new configuration file with example values."""
    example_config = {
        "shopify": {
            "api_key": "your_api_key_here",
            "api_secret": "your_api_secret_here",
            "scopes": ["read_products"],
            "host": "https://your-app.example.com",
            "api_version": "2024-01"
        },
        "port": 8081,
        "log_file": "settings_app.log",
        "log_level": "INFO",
        "webhook_path": "/webhooks",
        "export_metrics": False
    }

    output_path = Path(output)
    with open(output_path, 'w') as f:
        json.dump(example_config, f, indent=2)

    console.print(f"[green]✓[/green] Configuration file created: {output}")
    console.print("\n[yellow]⚠ Please edit the file and add your app credentials![/yellow]")


@app.command()
def validate(
    config: Optional[str] = typer.Option(None, help="Configuration file path (environment if omitted)"),
):
    """Validate configuration."""
    try:
        cfg = load_config(config)
    except typer.Exit:
        raise
    except Exception as e:
        console.print(f"[red]✗ Configuration error:[/red] {str(e)}")
        raise typer.Exit(1)

    missing = [
        name for name, value in (
            ("api_key", cfg.shopify.api_key),
            ("api_secret", cfg.shopify.api_secret),
            ("host", cfg.shopify.host),
        )
        if not value
    ]
    if missing:
        console.print(f"[red]✗ Configuration error:[/red] missing {', '.join(missing)}")
        raise typer.Exit(1)

    table = Table(title="Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Host", cfg.shopify.host_name)
    table.add_row("Scopes", ", ".join(cfg.shopify.scopes))
    table.add_row("API version", cfg.shopify.api_version)
    table.add_row("Port", str(cfg.port))
    table.add_row("Webhook path", cfg.webhook_path)

    console.print("[green]✓[/green] Configuration is valid!")
    console.print(table)


@app.command("parse-ref")
def parse_ref(
    reference: str = typer.Argument(..., help="Product reference, e.g. gid://shopify/Product/123"),
):
    """Print the product id a product reference resolves to."""
    try:
        console.print(parse_product_reference(reference))
    except MalformedInput as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


def build_app(cfg: AppConfig, sandbox: bool = False, shops: Optional[List[str]] = None):
    """Create the app; in sandbox mode Admin API calls are mocked and `shops` are pre-installed."""
    from .app import create_app
    from .mock_client import MockShopifyClient, install_sandbox_shop
    from .storage import InMemorySessionStorage
    from .store import InMemoryShopStore

    if not sandbox:
        return create_app(cfg)

    store = InMemoryShopStore()
    sessions = InMemorySessionStorage()
    for shop in shops or []:
        install_sandbox_shop(store, sessions, shop)
    return create_app(cfg, store=store, sessions=sessions, client=MockShopifyClient())


@app.command()
def serve(
    config: Optional[str] = typer.Option(None, help="Configuration file path (environment if omitted)"),
    host: str = typer.Option("0.0.0.0", help="Host to bind to"),
    port: Optional[int] = typer.Option(None, help="Port to bind to (defaults to the configured port)"),
    sandbox: bool = typer.Option(False, help="Answer Admin API calls with mock data"),
    shop: Optional[List[str]] = typer.Option(None, help="Shop to pre-install in sandbox mode (repeatable)"),
):
    """Start the app server."""
    import uvicorn

    cfg = load_config(config)
    web_app = build_app(cfg, sandbox=sandbox, shops=shop)
    bind_port = port or cfg.port

    console.print(f"[green]> Ready on http://{host}:{bind_port}[/green]")
    if sandbox:
        console.print("[yellow]Sandbox mode: Admin API calls return mock data[/yellow]")
        for installed in shop or []:
            console.print(f"[yellow]Installed shop: {installed}[/yellow]")

    uvicorn.run(web_app, host=host, port=bind_port)


if __name__ == "__main__":
    app()
