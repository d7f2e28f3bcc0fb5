"""Check-config command - validate the environment and show the settings."""

from __future__ import annotations

import os
from collections.abc import Mapping

import typer
from rich.console import Console
from rich.table import Table

from ...core.config import Settings
from ...core.errors import ConfigurationError
from ...runtime.exit import EX_CONFIG

console = Console()


def check_config_command(env: Mapping[str, str] | None = None) -> Settings:
    try:
        settings = Settings.from_env(dict(os.environ if env is None else env))
    except ConfigurationError as exc:
        console.print("[red]Configuration is invalid[/red]")
        for name, message in exc.problems:
            console.print(f"  [bold]{name}[/bold]: {message}")
        raise typer.Exit(EX_CONFIG) from exc

    table = Table(title="Storefront settings")
    table.add_column("Variable")
    table.add_column("Value")
    for name, field in Settings.model_fields.items():
        table.add_row(field.alias or name, str(getattr(settings, name)))
    console.print(table)
    return settings
