"""Health check commands for the nimp CLI."""

import httpx
import typer
from rich.console import Console

from nim_proxy.core.config import Config

app = typer.Typer(help="Health checks")


@app.command()
def check(
    url: str = typer.Option(None, "--url", help="Proxy base URL (default: from HOST/PORT)"),
    timeout: float = typer.Option(5.0, "--timeout", help="Request timeout in seconds"),
) -> None:
    """Query a running proxy's /health endpoint."""
    console = Console()
    if url is None:
        config = Config.from_env()
        host = "localhost" if config.host == "0.0.0.0" else config.host
        url = f"http://{host}:{config.port}"

    try:
        response = httpx.get(f"{url.rstrip('/')}/health", timeout=timeout)
        response.raise_for_status()
        data = response.json()
    except httpx.HTTPError as e:
        console.print(f"[red]❌ Proxy at {url} is not healthy: {e}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]✅ {data.get('status')}[/green] at {data.get('timestamp')} ({url})")
