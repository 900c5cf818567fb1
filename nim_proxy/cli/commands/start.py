"""Start command for the nimp CLI."""

import typer
import uvicorn
from rich.console import Console
from rich.table import Table

from nim_proxy.core.config import Config
from nim_proxy.core.logging import configure_root_logging


def start(
    host: str = typer.Option(None, "--host", help="Override host"),
    port: int = typer.Option(None, "--port", help="Override port"),
    reload: bool = typer.Option(False, "--reload", help="Enable auto-reload for development"),
) -> None:
    """Start the proxy server."""
    console = Console()
    config = Config.from_env()

    server_host = host or config.host
    server_port = port or config.port

    table = Table(title="NIM Proxy Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Server URL", f"http://{server_host}:{server_port}")
    table.add_row("NVIDIA Base URL", config.nvidia_base_url)
    table.add_row("API Key", config.api_key_hash)
    table.add_row("Request Timeout", f"{config.request_timeout}s")

    console.print(table)

    if not config.is_api_key_configured():
        console.print("[yellow]⚠ NVIDIA_API_KEY is not set; completions will fail[/yellow]")

    log_level = configure_root_logging(config.log_level)
    uvicorn.run(
        "nim_proxy.main:app_factory",
        factory=True,
        host=server_host,
        port=server_port,
        reload=reload,
        log_level=log_level.lower(),
    )
