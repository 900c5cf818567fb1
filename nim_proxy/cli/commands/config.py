"""Configuration commands for the nimp CLI."""

import typer
from rich.console import Console
from rich.table import Table

from nim_proxy.core.config import Config, ConfigError
from nim_proxy.core.config.schema import ConfigSchema
from nim_proxy.core.config.validation import validate_all

app = typer.Typer(help="Configuration management")


@app.command()
def show() -> None:
    """Show the effective configuration (secrets masked)."""
    console = Console()
    try:
        config = Config.from_env()
    except ConfigError as e:
        console.print(f"[red]❌ {e}[/red]")
        raise typer.Exit(code=1)

    table = Table(title="NIM Proxy Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    for key, value in config.to_dict().items():
        table.add_row(key, "<unlimited>" if value is None else str(value))
    console.print(table)


@app.command()
def validate() -> None:
    """Validate every environment variable the proxy reads."""
    console = Console()
    errors = validate_all()
    if errors:
        for error in errors:
            console.print(f"[red]❌ {error}[/red]")
        raise typer.Exit(code=1)

    console.print("[green]✅ Configuration is valid[/green]")
    if not Config.from_env().is_api_key_configured():
        console.print("[yellow]⚠ NVIDIA_API_KEY is not set[/yellow]")


@app.command()
def env() -> None:
    """List the supported environment variables."""
    console = Console()
    table = Table(title="Environment Variables")
    table.add_column("Name", style="cyan")
    table.add_column("Default", style="green")
    table.add_column("Description")
    for row in ConfigSchema.describe():
        default = "<secret>" if row["secret"] and row["default"] else str(row["default"])
        table.add_row(row["name"], default, row["description"])
    console.print(table)
