"""Journal and mapping commands: lifemap log, lifemap map, lifemap classify-tags."""

from __future__ import annotations

import click
from rich import box
from rich.table import Table

from lifemap.cli.main import (
    build_classifier,
    console,
    dimension_label,
    fail,
    open_store,
    owner_option,
    resolve_owner,
)
from lifemap.core.errors import LifemapError
from lifemap.core.models import parse_timestamp
from lifemap.core.result import Err
from lifemap.dimensions import SCORING_DIMENSIONS, TAG_TYPE_CONFIG, Dimension, TagType

DIMENSION_CHOICES = [d.value for d in SCORING_DIMENSIONS] + [Dimension.UNASSIGNED.value]
TYPE_CHOICES = [t.value for t in TagType]


@click.command()
@click.argument("text")
@click.option("--tag", "-t", "tags", multiple=True, help="Tag for this entry (repeatable)")
@click.option("--date", default=None, help="ISO timestamp (default: now)")
@owner_option
def log_entry(text: str, tags: tuple[str, ...], date: str | None, owner: str | None):
    """Log a journal entry with tags."""
    from lifemap.services.events import create_journal_entry

    timestamp = parse_timestamp(date) if date else None
    if date and timestamp is None:
        fail(f"Could not parse date: {date!r}")

    settings = open_store()
    saved = create_journal_entry(resolve_owner(owner), text, tags, timestamp=timestamp, settings=settings)

    tag_list = ", ".join(f"#{t}" for t in saved.event.tags) or "[dim]no tags[/dim]"
    console.print(f"[green]Logged[/green] {saved.event.id} {tag_list}")
    if isinstance(saved.connections, Err):
        console.print(f"[yellow]Tag connections not recorded:[/yellow] {saved.connections.error}")
    elif saved.connections.value:
        console.print(f"[dim]{len(saved.connections.value)} connection(s) updated[/dim]")


@click.command()
@click.argument("tag")
@click.option("--dimension", "-d", type=click.Choice(DIMENSION_CHOICES, case_sensitive=False), default=None)
@click.option("--type", "tag_type", type=click.Choice(TYPE_CHOICES, case_sensitive=False), default=None)
@owner_option
def map_tag(tag: str, dimension: str | None, tag_type: str | None, owner: str | None):
    """Set the dimension and/or type of a tag."""
    from lifemap.db.engine import get_session
    from lifemap.services.mappings import save_mapping

    if dimension is None and tag_type is None:
        fail("Give --dimension and/or --type")

    settings = open_store()
    try:
        with get_session(settings) as session:
            mapping = save_mapping(
                session,
                resolve_owner(owner),
                tag,
                dimension=Dimension.parse(dimension),
                type=TagType.parse(tag_type) if tag_type else None,
            )
    except ValueError as e:
        fail(str(e))

    console.print(
        f"[green]Mapped[/green] #{tag.strip().lower()} -> "
        f"{dimension_label(mapping.dimension)} ({mapping.type.value}, {TAG_TYPE_CONFIG[mapping.type].shape})"
    )


@click.command()
@click.option("--offline", is_flag=True, help="Classify with keyword seeds instead of the LLM")
@owner_option
def classify_tags(offline: bool, owner: str | None):
    """Ask the classifier for a category for every unclassified journal tag."""
    from lifemap.services.imports import classify_tags as run_classify

    settings = open_store()
    try:
        categories = run_classify(resolve_owner(owner), build_classifier(settings, offline), settings=settings)
    except LifemapError as e:
        fail(str(e))

    if not categories:
        console.print("[dim]Every tag already has a category.[/dim]")
        return

    table = Table(title="Classified Tags", box=box.ROUNDED)
    table.add_column("Tag", style="bold")
    table.add_column("Category")
    for tag, category in sorted(categories.items()):
        table.add_row(f"#{tag}", dimension_label(category))
    console.print(table)
