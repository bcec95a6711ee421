"""Monthly dimension trends, grand totals and archetypes."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from lifemap.analytics.trajectory import event_resolutions, round_half_up
from lifemap.core.models import EMPTY_MAPPINGS, Event, MappingSnapshot
from lifemap.dimensions import (
    ARCHETYPES,
    DEFAULT_ARCHETYPE,
    SCORING_DIMENSIONS,
    Dimension,
    dimension_color,
)

_MONTH_NAMES = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def event_dimensions(event: Event, mappings: MappingSnapshot = EMPTY_MAPPINGS) -> list[Dimension]:
    """Distinct scored dimensions of one event, in first-seen order."""
    seen: dict[Dimension, None] = {}
    for resolution in event_resolutions(event, mappings):
        if resolution.is_scored:
            seen.setdefault(resolution.value, None)
    return list(seen)


@dataclass(frozen=True)
class TrendBucket:
    """Per-dimension counts for one calendar month."""

    year: int
    month: int
    label: str
    counts: dict[Dimension, int]

    @property
    def key(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"month": self.label, "key": self.key}
        data.update({dim.value: count for dim, count in self.counts.items()})
        return data


@dataclass(frozen=True)
class CategoryTotal:
    name: Dimension
    value: int
    color: str

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name.value, "value": self.value, "color": self.color}


@dataclass(frozen=True)
class SummaryStats:
    total: int
    top_category: Dimension | None
    top_category_count: int
    top_category_percentage: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalVideos": self.total,
            "topCategory": self.top_category.value if self.top_category else "None",
            "topCategoryCount": self.top_category_count,
            "topCategoryPercentage": self.top_category_percentage,
        }


def category_trends(
    events: Iterable[Event],
    *,
    mappings: MappingSnapshot = EMPTY_MAPPINGS,
) -> list[TrendBucket]:
    """Bucket events by calendar month of their timestamp.

    Each event adds 1 to every distinct dimension it resolves to. Events
    without a timestamp are skipped. Every bucket carries all six scoring
    dimensions, zero or not.

    Returns:
        Buckets in chronological order, labelled like ``"Mar 2024"``.
    """
    buckets: dict[tuple[int, int], Counter[Dimension]] = {}
    for event in events:
        if event.timestamp is None:
            continue
        key = (event.timestamp.year, event.timestamp.month)
        counts = buckets.setdefault(key, Counter())
        for dim in event_dimensions(event, mappings):
            counts[dim] += 1

    result = []
    for (year, month) in sorted(buckets):
        counts = buckets[(year, month)]
        label = f"{_MONTH_NAMES[month - 1]} {year}"
        result.append(
            TrendBucket(
                year=year,
                month=month,
                label=label,
                counts={dim: counts.get(dim, 0) for dim in SCORING_DIMENSIONS},
            )
        )
    return result


def category_totals(
    events: Iterable[Event],
    *,
    mappings: MappingSnapshot = EMPTY_MAPPINGS,
) -> list[CategoryTotal]:
    """Grand totals per dimension in registry order; zero totals are omitted."""
    counts: Counter[Dimension] = Counter()
    for event in events:
        for dim in event_dimensions(event, mappings):
            counts[dim] += 1

    return [
        CategoryTotal(name=dim, value=counts[dim], color=dimension_color(dim))
        for dim in SCORING_DIMENSIONS
        if counts[dim] > 0
    ]


def dominant_archetype(totals: Iterable[CategoryTotal]) -> str:
    """Archetype of the largest total; ties go to the first listed."""
    best: CategoryTotal | None = None
    for total in totals:
        if total.value <= 0:
            continue
        if best is None or total.value > best.value:
            best = total
    if best is None:
        return DEFAULT_ARCHETYPE
    return ARCHETYPES.get(best.name, DEFAULT_ARCHETYPE)


def category_percentages(totals: Iterable[CategoryTotal]) -> dict[Dimension, int]:
    totals = list(totals)
    grand = sum(t.value for t in totals)
    if grand == 0:
        return {}
    return {t.name: round_half_up(100 * t.value / grand) for t in totals}


def summary_stats(
    events: Iterable[Event],
    *,
    mappings: MappingSnapshot = EMPTY_MAPPINGS,
) -> SummaryStats:
    events = list(events)
    totals = category_totals(events, mappings=mappings)
    if not events or not totals:
        return SummaryStats(total=len(events), top_category=None, top_category_count=0, top_category_percentage=0)

    top = totals[0]
    for total in totals[1:]:
        if total.value > top.value:
            top = total
    return SummaryStats(
        total=len(events),
        top_category=top.name,
        top_category_count=top.value,
        top_category_percentage=round_half_up(100 * top.value / len(events)),
    )
