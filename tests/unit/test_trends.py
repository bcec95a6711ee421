"""Tests for monthly trends, totals and archetypes."""

from __future__ import annotations

from datetime import datetime, timezone

from lifemap.analytics.trends import (
    CategoryTotal,
    category_percentages,
    category_totals,
    category_trends,
    dominant_archetype,
    event_dimensions,
    summary_stats,
)
from lifemap.core.models import Event
from lifemap.dimensions import SCORING_DIMENSIONS, Dimension


def _at(year: int, month: int, day: int = 1) -> datetime:
    return datetime(year, month, day, 12, 0, tzinfo=timezone.utc)


def _item(category: Dimension, when: datetime | None) -> Event:
    return Event.item(f"{category.value} video {when}", when, category=category)


class TestEventDimensions:
    def test_distinct_per_event(self):
        """Two Health tags on one entry count Health once."""
        event = Event.journal("x", ["gym", "yoga", "work", "zzz"], timestamp=_at(2024, 3))
        assert event_dimensions(event) == [Dimension.HEALTH, Dimension.CAREER]


class TestCategoryTrends:
    def test_buckets_by_month_in_order(self):
        events = [
            _item(Dimension.HEALTH, _at(2024, 4, 2)),
            _item(Dimension.HEALTH, _at(2024, 3, 5)),
            _item(Dimension.CAREER, _at(2024, 3, 20)),
            _item(Dimension.CAREER, None),
        ]
        buckets = category_trends(events)
        assert [b.label for b in buckets] == ["Mar 2024", "Apr 2024"]
        assert [b.key for b in buckets] == ["2024-03", "2024-04"]
        assert buckets[0].counts[Dimension.HEALTH] == 1
        assert buckets[0].counts[Dimension.CAREER] == 1
        assert set(buckets[1].counts) == set(SCORING_DIMENSIONS)
        assert buckets[1].counts[Dimension.SOCIAL] == 0

    def test_year_boundary(self):
        buckets = category_trends([_item(Dimension.SOCIAL, _at(2024, 1)), _item(Dimension.SOCIAL, _at(2023, 12))])
        assert [b.label for b in buckets] == ["Dec 2023", "Jan 2024"]

    def test_to_dict(self):
        data = category_trends([_item(Dimension.HEALTH, _at(2024, 3))])[0].to_dict()
        assert data["month"] == "Mar 2024"
        assert data["Health"] == 1
        assert data["Career"] == 0


class TestTotalsAndArchetype:
    def test_totals_in_registry_order_without_zeros(self):
        events = [_item(Dimension.HEALTH, _at(2024, 3))] * 2 + [_item(Dimension.CAREER, _at(2024, 3))]
        totals = category_totals(events)
        assert [(t.name, t.value) for t in totals] == [(Dimension.CAREER, 1), (Dimension.HEALTH, 2)]
        assert totals[1].color == "#39FF14"

    def test_warrior(self):
        events = [_item(Dimension.HEALTH, _at(2024, 3))] * 3 + [_item(Dimension.SOCIAL, _at(2024, 3))]
        assert dominant_archetype(category_totals(events)) == "Warrior"

    def test_tie_goes_to_first_listed(self):
        totals = [CategoryTotal(Dimension.CAREER, 2, ""), CategoryTotal(Dimension.HEALTH, 2, "")]
        assert dominant_archetype(totals) == "Builder"

    def test_explorer_when_empty(self):
        assert dominant_archetype([]) == "Explorer"
        assert dominant_archetype([CategoryTotal(Dimension.CAREER, 0, "")]) == "Explorer"

    def test_category_percentages(self):
        totals = [CategoryTotal(Dimension.CAREER, 1, ""), CategoryTotal(Dimension.HEALTH, 3, "")]
        assert category_percentages(totals) == {Dimension.CAREER: 25, Dimension.HEALTH: 75}
        assert category_percentages([]) == {}


class TestSummaryStats:
    def test_summary(self):
        events = [_item(Dimension.HEALTH, _at(2024, 3))] * 3 + [_item(Dimension.CAREER, _at(2024, 3))]
        stats = summary_stats(events)
        assert stats.total == 4
        assert stats.top_category is Dimension.HEALTH
        assert stats.top_category_count == 3
        assert stats.top_category_percentage == 75
        assert stats.to_dict()["topCategory"] == "Health"

    def test_empty(self):
        stats = summary_stats([])
        assert stats.total == 0
        assert stats.top_category is None
        assert stats.to_dict()["topCategory"] == "None"


class TestScenario:
    def test_six_health_four_career_items(self):
        """6 Health and 4 Career items: totals, Warrior, 60/40 split."""
        events = [_item(Dimension.HEALTH, _at(2024, 3, d + 1)) for d in range(6)]
        events += [_item(Dimension.CAREER, _at(2024, 3, d + 10)) for d in range(4)]
        totals = category_totals(events)
        assert {t.name: t.value for t in totals} == {Dimension.HEALTH: 6, Dimension.CAREER: 4}
        assert dominant_archetype(totals) == "Warrior"
        assert category_percentages(totals) == {Dimension.CAREER: 40, Dimension.HEALTH: 60}

    def test_single_career_total_is_builder(self):
        assert dominant_archetype([CategoryTotal(Dimension.CAREER, 5, "")]) == "Builder"
