"""Import commands: lifemap import, lifemap import-journal."""

from __future__ import annotations

import click
from rich import box
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn, TimeElapsedColumn
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
from lifemap.core.logging import ImportLogger, Verbosity
from lifemap.keywords import top_tags


@click.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--offline", is_flag=True, help="Classify with keyword seeds instead of the LLM")
@owner_option
@click.pass_context
def import_history(ctx: click.Context, file: str, offline: bool, owner: str | None):
    """Import a watch-history export (Google Takeout watch-history.json).

    Titles are classified into life dimensions in batches, stored, and
    their keywords recorded as tag connections. Re-importing the same file
    only adds what is missing.
    """
    from lifemap.services.imports import import_watch_history
    from lifemap.sources.watch_history import create_watch_history_source

    settings = open_store()
    owner_id = resolve_owner(owner)
    verbosity = Verbosity(min(ctx.obj.get("verbose", 0) if ctx.obj else 0, Verbosity.DEBUG))
    import_logger = ImportLogger(verbosity=verbosity, logs_dir=settings.logs_dir, console=console)

    try:
        classifier = build_classifier(settings, offline, import_logger=import_logger)
        with Progress(
            TextColumn("[bold]Classifying[/bold]"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=console,
            transient=True,
        ) as progress:
            task = progress.add_task("classify", total=None)

            def on_progress(update) -> None:
                progress.update(task, total=update.total, completed=update.processed)

            result = import_watch_history(
                create_watch_history_source(file),
                owner_id,
                classifier,
                settings=settings,
                import_logger=import_logger,
                on_progress=on_progress,
            )
    except LifemapError as e:
        fail(str(e))
    finally:
        import_logger.close()

    table = Table(title="Import Summary", box=box.ROUNDED)
    table.add_column("Processed", justify="right")
    table.add_column("New", justify="right", style="green")
    table.add_column("Skipped", justify="right", style="dim")
    table.add_column("Pair updates", justify="right", style="cyan")
    table.add_row(str(result.processed), str(result.new), str(result.skipped), str(result.pairs))
    console.print(table)

    if result.categories:
        parts = [f"{dimension_label(dim)} {count}" for dim, count in result.categories.most_common()]
        console.print("[bold]Categories:[/bold] " + ", ".join(parts))
    if result.keywords:
        keywords = ", ".join(f"#{tag} ({count})" for tag, count in top_tags(result.keywords, limit=10))
        console.print(f"[bold]Top keywords:[/bold] {keywords}")
    if result.connection_errors:
        console.print(f"[yellow]{result.connection_errors} item(s) stored without tag connections[/yellow]")
    if result.cancelled:
        console.print("[yellow]Import was interrupted; run it again to finish.[/yellow]")
    if import_logger.log_path:
        console.print(f"[dim]Log: {import_logger.log_path}[/dim]")


@click.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@owner_option
def import_journal(file: str, owner: str | None):
    """Import journal entries from a JSON file."""
    from lifemap.services.imports import import_journal as run_import
    from lifemap.sources.journal import create_journal_source

    settings = open_store()
    try:
        result = run_import(create_journal_source(file), resolve_owner(owner), settings=settings)
    except LifemapError as e:
        fail(str(e))

    console.print(
        f"[green]Imported[/green] {result.new} entr{'y' if result.new == 1 else 'ies'} "
        f"({result.skipped} already present, {result.pairs} pair updates)"
    )
