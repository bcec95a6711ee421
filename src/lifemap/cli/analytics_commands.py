"""Analytics commands: lifemap trajectory, lifemap trend, lifemap analytics."""

from __future__ import annotations

import click
from rich import box
from rich.panel import Panel
from rich.table import Table

from lifemap.cli.main import console, dimension_label, load_owner_data, owner_option
from lifemap.dimensions import SCORING_DIMENSIONS

DIRECTION_ARROWS = {"increasing": "[green]+[/green]", "decreasing": "[red]-[/red]", "stable": "[dim]=[/dim]"}


@click.command()
@click.option("--days", default=30, type=int, help="Trailing window in days")
@owner_option
def trajectory(days: int, owner: str | None):
    """Where your energy went over the last DAYS days."""
    from lifemap.services.analytics import owner_trajectory

    _, data = load_owner_data(owner)
    snapshot = owner_trajectory(data, days)
    if not snapshot.has_data:
        console.print(f"[dim]{snapshot.message}[/dim]")
        return

    table = Table(title=f"Trajectory (last {days} days, {snapshot.total_events} events)", box=box.ROUNDED)
    table.add_column("Dimension", style="bold")
    table.add_column("Score", justify="right")
    table.add_column("Share", justify="right", style="cyan")
    for dim in SCORING_DIMENSIONS:
        table.add_row(dimension_label(dim), str(snapshot.weighted_scores[dim]), f"{snapshot.percentages[dim]}%")
    console.print(table)
    console.print(Panel(snapshot.insight, title="Insight", border_style="cyan"))


@click.command()
@owner_option
def trend(owner: str | None):
    """Compare the last 7 days with the last 30."""
    from lifemap.services.analytics import owner_trend

    _, data = load_owner_data(owner)
    result = owner_trend(data)
    if not result.has_trend:
        console.print(f"[dim]{result.message}[/dim]")
        return

    table = Table(title="7-day vs 30-day", box=box.ROUNDED)
    table.add_column("Dimension", style="bold")
    table.add_column("7 days", justify="right")
    table.add_column("30 days", justify="right")
    table.add_column("Change", justify="right")
    for dim in SCORING_DIMENSIONS:
        change = result.changes[dim]
        table.add_row(
            dimension_label(dim),
            f"{result.last_7_days[dim]}%",
            f"{result.last_30_days[dim]}%",
            f"{DIRECTION_ARROWS[change.direction]} {abs(change.value)}",
        )
    console.print(table)
    console.print(
        f"[bold]Current focus:[/bold] {dimension_label(result.current_focus)}  "
        f"[bold]Previous focus:[/bold] {dimension_label(result.previous_focus)}"
    )


@click.command()
@owner_option
def analytics(owner: str | None):
    """Category totals, archetype and monthly trends."""
    from lifemap.services.analytics import owner_dashboard

    _, data = load_owner_data(owner)
    dashboard = owner_dashboard(data)
    summary = dashboard.summary

    console.print(
        Panel(
            f"[bold]Events:[/bold] {summary.total}\n"
            f"[bold]Top category:[/bold] {dimension_label(summary.top_category)} "
            f"({summary.top_category_count}, {summary.top_category_percentage}%)\n"
            f"[bold]Archetype:[/bold] The {dashboard.archetype}",
            title="[bold cyan]Life Map[/bold cyan]",
            border_style="cyan",
        )
    )

    if dashboard.totals:
        totals = Table(title="Totals", box=box.ROUNDED)
        totals.add_column("Dimension", style="bold")
        totals.add_column("Count", justify="right")
        for total in dashboard.totals:
            totals.add_row(dimension_label(total.name), str(total.value))
        console.print(totals)

    if dashboard.trends:
        monthly = Table(title="Monthly Trends", box=box.ROUNDED)
        monthly.add_column("Month", style="bold", no_wrap=True)
        for dim in SCORING_DIMENSIONS:
            monthly.add_column(dim.value[:5], justify="right")
        for bucket in dashboard.trends:
            monthly.add_row(bucket.label, *(str(bucket.counts[dim]) for dim in SCORING_DIMENSIONS))
        console.print(monthly)
