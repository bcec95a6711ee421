"""Info command: lifemap info."""

from __future__ import annotations

import platform
import sys

import click
from rich import box
from rich.table import Table

from lifemap.cli.main import console
from lifemap.config import get_settings
from lifemap.core.config import LLMConfig, redact_api_key


def _get_version() -> str:
    """Get the lifemap package version from metadata."""
    from importlib.metadata import PackageNotFoundError, version

    try:
        return version("lifemap")
    except PackageNotFoundError:
        return "unknown"


def _get_platform_info() -> str:
    return f"{platform.system()} {platform.machine()}"


@click.command()
def info():
    """Display Lifemap system information and configuration."""
    settings = get_settings()
    llm = LLMConfig.from_settings(settings)

    table = Table(box=box.ROUNDED, show_header=False, padding=(0, 2))
    table.add_column("Key", style="bold")
    table.add_column("Value")

    table.add_row("Version", _get_version())
    table.add_row("Python", sys.version.split("\n")[0])
    table.add_row("Platform", _get_platform_info())
    table.add_row("Storage", str(settings.storage_dir))
    table.add_row("Database", str(settings.db_path) if settings.db_path.exists() else "[dim]not created[/dim]")
    table.add_row("Owner", settings.owner)
    table.add_row("LLM", f"{llm.model} ({llm.provider})")
    table.add_row("API key", redact_api_key(llm.resolve_api_key()) or "[yellow]not set[/yellow]")
    table.add_row("Temporal window", f"{settings.temporal_window_minutes} min")
    table.add_row("Node cap", str(settings.node_cap))

    console.print(table)
