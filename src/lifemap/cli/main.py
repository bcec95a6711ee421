"""Lifemap CLI: main entry point and shared utilities."""

from __future__ import annotations

import logging
import sys
from typing import NoReturn

import click
from rich.console import Console

from lifemap.config import Settings, get_settings
from lifemap.dimensions import Dimension, dimension_color

console = Console()


def setup_logging(verbose: int) -> None:
    """Configure root logging for the CLI run."""
    level = logging.DEBUG if verbose > 1 else logging.INFO if verbose == 1 else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def fail(message: str) -> NoReturn:
    """Print an error and exit with status 1."""
    console.print(f"[red]Error:[/red] {message}")
    sys.exit(1)


def dimension_label(dimension: Dimension | str | None) -> str:
    """Dimension name colored with its registry color."""
    if dimension is None:
        return "[dim]-[/dim]"
    name = dimension.value if isinstance(dimension, Dimension) else dimension
    return f"[{dimension_color(dimension)}]{name}[/{dimension_color(dimension)}]"


def open_store() -> Settings:
    """Settings for this run, with the database created if needed."""
    from lifemap.db.engine import init_database

    settings = get_settings()
    settings.ensure_storage_dir()
    init_database(settings)
    return settings


def build_classifier(settings: Settings, offline: bool, import_logger=None):
    """Batch classifier over the LLM oracle, or the keyword oracle when offline.

    Raises:
        ConfigError: No API key is configured for the LLM provider.
    """
    from lifemap.classify.batch import BatchClassifier
    from lifemap.classify.oracle import KeywordOracle, LLMOracle

    if offline:
        oracle = KeywordOracle()
        batch_delay = 0.0
    else:
        from lifemap.core.config import LLMConfig
        from lifemap.llm.client import LLMClient

        oracle = LLMOracle(LLMClient(LLMConfig.from_settings(settings)))
        batch_delay = settings.classify_batch_delay

    return BatchClassifier(
        oracle,
        batch_size=settings.classify_batch_size,
        batch_delay=batch_delay,
        rate_limit_delay=settings.rate_limit_delay,
        max_retries=settings.rate_limit_retries,
        import_logger=import_logger,
    )


def owner_option(fn):
    """Shared --owner option; defaults to LIFEMAP_OWNER."""
    return click.option("--owner", default=None, help="Owner id (default: LIFEMAP_OWNER or 'me')")(fn)


def resolve_owner(owner: str | None) -> str:
    return owner or get_settings().owner


def load_owner_data(owner: str | None):
    """Open the store and read everything the analytics need for one owner."""
    from lifemap.db.engine import get_session
    from lifemap.services.analytics import OwnerData

    settings = open_store()
    with get_session(settings) as session:
        data = OwnerData.load(session, resolve_owner(owner))
    return settings, data


@click.group()
@click.option("-v", "--verbose", count=True, help="Verbosity: -v info logging, -vv debug")
@click.pass_context
def main(ctx: click.Context, verbose: int):
    """Lifemap: turn an activity log into a life map."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    setup_logging(verbose)


def cli():
    """Entrypoint that loads .env before running the CLI."""
    from dotenv import load_dotenv

    load_dotenv()
    main()


# Import subcommand modules to register commands
from lifemap.cli.analytics_commands import analytics, trajectory, trend  # noqa: E402
from lifemap.cli.graph_commands import connections, graph  # noqa: E402
from lifemap.cli.import_commands import import_history, import_journal  # noqa: E402
from lifemap.cli.info_commands import info  # noqa: E402
from lifemap.cli.journal_commands import classify_tags, log_entry, map_tag  # noqa: E402

# Register commands
main.add_command(import_history, name="import")
main.add_command(import_journal, name="import-journal")
main.add_command(log_entry, name="log")
main.add_command(map_tag, name="map")
main.add_command(classify_tags, name="classify-tags")
main.add_command(connections)
main.add_command(graph)
main.add_command(trajectory)
main.add_command(trend)
main.add_command(analytics)
main.add_command(info)
