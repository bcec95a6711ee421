"""Graph commands: lifemap connections, lifemap graph."""

from __future__ import annotations

import json
from pathlib import Path

import click
from rich import box
from rich.table import Table

from lifemap.cli.main import console, load_owner_data, owner_option


@click.command()
@click.argument("tag", required=False)
@click.option("--min-weight", default=1, type=int, help="Only connections at least this strong")
@click.option("--limit", default=25, type=int, help="Rows to show")
@owner_option
def connections(tag: str | None, min_weight: int, limit: int, owner: str | None):
    """Show tag connections, or the connections of one TAG."""
    _, data = load_owner_data(owner)
    aggregator = data.aggregator()

    if tag:
        links = [link for link in aggregator.connections_of(tag) if link.weight >= min_weight]
        if not links:
            console.print(f"[dim]No connections for #{tag.strip().lower()}[/dim]")
            return
        table = Table(title=f"Connections of #{tag.strip().lower()}", box=box.ROUNDED)
        table.add_column("Tag", style="bold")
        table.add_column("Weight", justify="right", style="cyan")
        for link in links[:limit]:
            table.add_row(f"#{link.tag}", str(link.weight))
        console.print(table)
        return

    stats = aggregator.network_stats(min_weight)
    if stats.total_connections == 0:
        console.print("[dim]No connections yet. Log entries with two or more tags.[/dim]")
        return

    table = Table(title="Strongest Connections", box=box.ROUNDED)
    table.add_column("Source", style="bold")
    table.add_column("Target", style="bold")
    table.add_column("Weight", justify="right", style="cyan")
    for conn in aggregator.all_connections(min_weight)[:limit]:
        table.add_row(f"#{conn.source}", f"#{conn.target}", str(conn.weight))
    console.print(table)
    console.print(
        f"[bold]Tags:[/bold] {stats.unique_tags}  "
        f"[bold]Connections:[/bold] {stats.total_connections}  "
        f"[bold]Average weight:[/bold] {stats.average_weight:.2f}"
    )


@click.command()
@click.option("--min-frequency", default=None, type=int, help="Minimum tag frequency (default: LIFEMAP_MIN_NODE_FREQUENCY)")
@click.option("--cap", default=None, type=int, help="Node budget (default: LIFEMAP_NODE_CAP)")
@click.option("--min-weight", default=1, type=int, help="Minimum co-occurrence weight for tag edges")
@click.option("--out", "-o", type=click.Path(dir_okay=False), default=None, help="Write graph JSON here")
@owner_option
def graph(min_frequency: int | None, cap: int | None, min_weight: int, out: str | None, owner: str | None):
    """Build the life-map graph and write it as {nodes, edges} JSON."""
    from lifemap.services.analytics import owner_graph

    settings, data = load_owner_data(owner)
    result = owner_graph(data, settings, min_frequency=min_frequency, cap=cap, min_weight=min_weight)
    payload = json.dumps(result.to_dict(), indent=2)

    if out:
        Path(out).write_text(payload, encoding="utf-8")
        console.print(
            f"[green]Wrote[/green] {out}: {len(result.nodes)} nodes, {len(result.edges)} edges"
        )
    else:
        click.echo(payload)
