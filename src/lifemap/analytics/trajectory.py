"""Trajectory scoring: where has the user's energy gone over the last N days?

Dimension lookup is an explicit ordered resolver so callers (and tests) can
see which tier produced each answer:

1. ``override``  - the user's TagMapping (explicit dimension, else the
   category the oracle stored on it)
2. ``assigned``  - the category an imported item already carries
3. ``keyword``   - the registry's keyword seeds
4. ``default``   - Unassigned, which is excluded from scoring
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Union

from lifemap.core.models import EMPTY_MAPPINGS, Event, MappingSnapshot, ensure_utc
from lifemap.dimensions import SCORING_DIMENSIONS, Dimension, dimension_for_keyword
from lifemap.tags import normalize_tag

NO_DATA_MESSAGE = "No data available. Start logging to see your trajectory."
NO_TREND_MESSAGE = "Not enough data to calculate trends."


class ResolutionSource(str, Enum):
    OVERRIDE = "override"
    ASSIGNED = "assigned"
    KEYWORD = "keyword"
    DEFAULT = "default"


@dataclass(frozen=True)
class Resolution:
    source: ResolutionSource
    value: Dimension

    @property
    def is_scored(self) -> bool:
        return self.value is not Dimension.UNASSIGNED


def resolve_dimension(
    key: str,
    mappings: MappingSnapshot = EMPTY_MAPPINGS,
    assigned: Dimension | None = None,
) -> Resolution:
    """Resolve a tag (or item title) to a dimension, reporting the tier used."""
    mapping = mappings.get(key)
    if mapping is not None:
        if mapping.dimension is not None and mapping.dimension is not Dimension.UNASSIGNED:
            return Resolution(ResolutionSource.OVERRIDE, mapping.dimension)
        if mapping.category is not Dimension.UNASSIGNED:
            return Resolution(ResolutionSource.OVERRIDE, mapping.category)

    if assigned is not None and assigned is not Dimension.UNASSIGNED:
        return Resolution(ResolutionSource.ASSIGNED, assigned)

    keyword = dimension_for_keyword(normalize_tag(key))
    if keyword is not None:
        return Resolution(ResolutionSource.KEYWORD, keyword)

    return Resolution(ResolutionSource.DEFAULT, Dimension.UNASSIGNED)


def event_resolutions(event: Event, mappings: MappingSnapshot = EMPTY_MAPPINGS) -> list[Resolution]:
    """One resolution per unit of weight an event contributes.

    A journal entry contributes one unit per tag; an imported item contributes
    exactly one unit for its title.
    """
    if event.is_item:
        return [resolve_dimension(event.title, mappings, assigned=event.category)]
    return [resolve_dimension(tag, mappings) for tag in event.tags]


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_percentages(scores: dict[Dimension, int]) -> dict[Dimension, int]:
    """Integer percentages per dimension; all zero when there is no score.

    Rounding may leave the total at 99 or 101; that drift is accepted.
    """
    total = sum(scores.values())
    return {
        dim: round_half_up(100 * score / total) if total > 0 else 0
        for dim, score in scores.items()
    }


def dominant_dimension(percentages: dict[Dimension, int]) -> Dimension | None:
    """Highest rounded percentage, ties going to registry order; None if all zero."""
    if not any(percentages.values()):
        return None
    return max(SCORING_DIMENSIONS, key=lambda dim: percentages.get(dim, 0))


def trajectory_insight(percentages: dict[Dimension, int], dominant: Dimension | None) -> str:
    score = percentages.get(dominant, 0) if dominant is not None else 0
    if score > 50:
        return f"You're heavily focused on {dominant}. Consider balancing other dimensions."
    if score > 30:
        return f"{dominant} is your primary focus. You're building momentum here."
    return "Your energy is well-distributed across dimensions. You're balanced."


@dataclass(frozen=True)
class NoTrajectory:
    """No events fell inside the window."""

    message: str = NO_DATA_MESSAGE

    @property
    def has_data(self) -> bool:
        return False

    def to_dict(self) -> dict[str, Any]:
        return {"hasData": False, "message": self.message}


@dataclass(frozen=True)
class TrajectorySnapshot:
    total_events: int
    start: datetime
    end: datetime
    weighted_scores: dict[Dimension, int]
    percentages: dict[Dimension, int]
    dominant_dimension: Dimension | None
    insight: str

    @property
    def has_data(self) -> bool:
        return True

    def to_dict(self) -> dict[str, Any]:
        return {
            "hasData": True,
            "totalLogs": self.total_events,
            "dateRange": {"start": self.start.isoformat(), "end": self.end.isoformat()},
            "dimensionScores": {d.value: v for d, v in self.weighted_scores.items()},
            "percentages": {d.value: v for d, v in self.percentages.items()},
            "dominantDimension": self.dominant_dimension.value if self.dominant_dimension else None,
            "trajectory": self.insight,
        }


Trajectory = Union[TrajectorySnapshot, NoTrajectory]


def events_in_window(
    events: Iterable[Event],
    window_days: int,
    now: datetime,
) -> list[Event]:
    """Events with ``now - window_days <= timestamp <= now``."""
    start = now - timedelta(days=window_days)
    return [e for e in events if e.timestamp is not None and start <= e.timestamp <= now]


def score_trajectory(
    events: Iterable[Event],
    window_days: int = 30,
    *,
    mappings: MappingSnapshot = EMPTY_MAPPINGS,
    now: datetime | None = None,
) -> Trajectory:
    """Weighted per-dimension scores and percentages over the trailing window."""
    end = ensure_utc(now) or datetime.now(timezone.utc)
    window = events_in_window(events, window_days, end)
    if not window:
        return NoTrajectory()

    scores: dict[Dimension, int] = {dim: 0 for dim in SCORING_DIMENSIONS}
    for event in window:
        for resolution in event_resolutions(event, mappings):
            if resolution.is_scored:
                scores[resolution.value] += 1

    percentages = compute_percentages(scores)
    dominant = dominant_dimension(percentages)

    return TrajectorySnapshot(
        total_events=len(window),
        start=end - timedelta(days=window_days),
        end=end,
        weighted_scores=scores,
        percentages=percentages,
        dominant_dimension=dominant,
        insight=trajectory_insight(percentages, dominant),
    )


@dataclass(frozen=True)
class DimensionChange:
    value: int
    direction: str  # increasing, decreasing, stable


@dataclass(frozen=True)
class NoTrend:
    message: str = NO_TREND_MESSAGE

    @property
    def has_trend(self) -> bool:
        return False

    def to_dict(self) -> dict[str, Any]:
        return {"hasTrend": False, "message": self.message}


@dataclass(frozen=True)
class TrajectoryTrend:
    last_7_days: dict[Dimension, int]
    last_30_days: dict[Dimension, int]
    changes: dict[Dimension, DimensionChange]
    current_focus: Dimension | None
    previous_focus: Dimension | None

    @property
    def has_trend(self) -> bool:
        return True

    def to_dict(self) -> dict[str, Any]:
        return {
            "hasTrend": True,
            "last7Days": {d.value: v for d, v in self.last_7_days.items()},
            "last30Days": {d.value: v for d, v in self.last_30_days.items()},
            "changes": {
                d.value: {"value": c.value, "direction": c.direction}
                for d, c in self.changes.items()
            },
            "currentFocus": self.current_focus.value if self.current_focus else None,
            "previousFocus": self.previous_focus.value if self.previous_focus else None,
        }


def trajectory_trend(
    events: Iterable[Event],
    *,
    mappings: MappingSnapshot = EMPTY_MAPPINGS,
    now: datetime | None = None,
) -> TrajectoryTrend | NoTrend:
    """Compare the last 7 days against the last 30."""
    events = list(events)
    recent = score_trajectory(events, 7, mappings=mappings, now=now)
    month = score_trajectory(events, 30, mappings=mappings, now=now)
    if not isinstance(recent, TrajectorySnapshot) or not isinstance(month, TrajectorySnapshot):
        return NoTrend()

    changes: dict[Dimension, DimensionChange] = {}
    for dim in SCORING_DIMENSIONS:
        delta = recent.percentages[dim] - month.percentages[dim]
        direction = "increasing" if delta > 0 else "decreasing" if delta < 0 else "stable"
        changes[dim] = DimensionChange(value=delta, direction=direction)

    return TrajectoryTrend(
        last_7_days=recent.percentages,
        last_30_days=month.percentages,
        changes=changes,
        current_focus=recent.dominant_dimension,
        previous_focus=month.dominant_dimension,
    )
