"""CLI entry point for the storefront server."""

from typing import Optional

import typer
from rich.console import Console

from .. import __version__

app = typer.Typer(
    name="storefront",
    help="Storefront server - HTTP backend for the storefront client",
    no_args_is_help=True,
    add_completion=False,
)

console = Console()


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        console.print(f"storefront-server {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
):
    """Storefront server."""


@app.command()
def serve(
    host: Optional[str] = typer.Option(
        None,
        "--host",
        help="Address to bind (overrides HOST)",
    ),
    port: Optional[int] = typer.Option(
        None,
        "--port",
        "-p",
        help="Port to listen on (overrides PORT)",
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="trace, debug, info, warn or error (overrides LOG_LEVEL)",
    ),
    log_format: Optional[str] = typer.Option(
        None,
        "--log-format",
        help="kv, json or pretty (overrides LOG_FORMAT)",
    ),
    access_log: Optional[bool] = typer.Option(
        None,
        "--access-log/--no-access-log",
        help="Log every request (overrides ACCESS_LOG)",
    ),
):
    """Start the server."""
    from .cmd import serve as serve_module

    serve_module.serve_command(
        host=host,
        port=port,
        log_level=log_level,
        log_format=log_format,
        access_log=access_log,
    )


@app.command("check-config")
def check_config():
    """Validate the environment and print the resolved settings."""
    from .cmd.check_config import check_config_command

    check_config_command()


if __name__ == "__main__":
    app()
