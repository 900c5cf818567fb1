"""Main CLI entry point for nim-proxy."""

import typer
from rich.console import Console

from nim_proxy.cli.commands import config, health, start

app = typer.Typer(
    name="nimp",
    help="NIM Proxy CLI - run and inspect the OpenAI-compatible NVIDIA NIM proxy",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.command(name="start", help="Start the proxy server")(start.start)
app.add_typer(config.app, name="config", help="Configuration management")
app.add_typer(health.app, name="health", help="Health checks")


@app.command()
def version() -> None:
    """Show version information."""
    from nim_proxy import __version__

    console = Console()
    console.print(f"[bold cyan]nimp[/bold cyan] version [green]{__version__}[/green]")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """NIM Proxy CLI."""
    if verbose:
        from nim_proxy.core.logging import configure_root_logging

        configure_root_logging("DEBUG")


if __name__ == "__main__":
    app()
