"""Per-owner analytics: load once, then run the pure analytics functions."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from lifemap.analytics.cooccurrence import CooccurrenceAggregator, InMemoryConnectionStore
from lifemap.analytics.graph import build_graph
from lifemap.analytics.noise import filter_graph
from lifemap.analytics.trajectory import (
    NoTrend,
    Trajectory,
    TrajectoryTrend,
    score_trajectory,
    trajectory_trend,
)
from lifemap.analytics.trends import (
    CategoryTotal,
    SummaryStats,
    TrendBucket,
    category_totals,
    category_trends,
    dominant_archetype,
    summary_stats,
)
from lifemap.core.models import Connection, Event, Graph, MappingSnapshot
from lifemap.services.connections import list_connections
from lifemap.services.events import list_events
from lifemap.services.mappings import load_mappings

if TYPE_CHECKING:
    from lifemap.config import Settings


@dataclass(frozen=True)
class OwnerData:
    """Everything the analytics need for one owner, read in one session."""

    owner_id: str
    events: tuple[Event, ...]
    mappings: MappingSnapshot
    connections: tuple[Connection, ...]

    @classmethod
    def load(cls, session: Session, owner_id: str) -> OwnerData:
        return cls(
            owner_id=owner_id,
            events=tuple(list_events(session, owner_id)),
            mappings=load_mappings(session, owner_id),
            connections=tuple(list_connections(session, owner_id)),
        )

    def aggregator(self) -> CooccurrenceAggregator:
        """Read-only view of the loaded connections."""
        return CooccurrenceAggregator(InMemoryConnectionStore(list(self.connections)))


@dataclass(frozen=True)
class Dashboard:
    totals: list[CategoryTotal]
    archetype: str
    summary: SummaryStats
    trends: list[TrendBucket]


def owner_graph(
    data: OwnerData,
    settings: "Settings",
    min_frequency: int | None = None,
    cap: int | None = None,
    min_weight: int = 1,
) -> Graph:
    graph = build_graph(
        data.events,
        mappings=data.mappings,
        connections=data.connections,
        window=timedelta(minutes=settings.temporal_window_minutes),
        min_weight=min_weight,
    )
    return filter_graph(
        graph,
        settings.min_node_frequency if min_frequency is None else min_frequency,
        settings.node_cap if cap is None else cap,
    )


def owner_trajectory(data: OwnerData, days: int = 30, now: datetime | None = None) -> Trajectory:
    return score_trajectory(data.events, days, mappings=data.mappings, now=now)


def owner_trend(data: OwnerData, now: datetime | None = None) -> TrajectoryTrend | NoTrend:
    return trajectory_trend(data.events, mappings=data.mappings, now=now)


def owner_dashboard(data: OwnerData) -> Dashboard:
    totals = category_totals(data.events, mappings=data.mappings)
    return Dashboard(
        totals=totals,
        archetype=dominant_archetype(totals),
        summary=summary_stats(data.events, mappings=data.mappings),
        trends=category_trends(data.events, mappings=data.mappings),
    )
