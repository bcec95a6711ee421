"""Tests for the co-occurrence aggregator."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from lifemap.analytics.cooccurrence import CooccurrenceAggregator, InMemoryConnectionStore
from lifemap.core.errors import StorageError
from lifemap.core.models import Connection
from lifemap.core.result import Err, Ok

T0 = datetime(2024, 3, 1, 8, 0, tzinfo=timezone.utc)
T1 = datetime(2024, 3, 2, 8, 0, tzinfo=timezone.utc)


class FailingStore:
    def apply_pairs(self, pairs, at):
        raise StorageError("disk full")

    def list_connections(self):
        return []


@pytest.fixture
def aggregator() -> CooccurrenceAggregator:
    return CooccurrenceAggregator(InMemoryConnectionStore())


def _weights(aggregator: CooccurrenceAggregator) -> dict[str, int]:
    return {c.id: c.weight for c in aggregator.all_connections()}


class TestRecordCooccurrence:
    def test_gym_friends_coffee_scenario(self, aggregator):
        """Two entries sharing gym: gym<->coffee and gym<->friends each weight 1."""
        aggregator.record_cooccurrence(["gym", "friends"], now=T0)
        aggregator.record_cooccurrence(["gym", "coffee"], now=T1)
        assert _weights(aggregator) == {"friends_gym": 1, "coffee_gym": 1}

        aggregator.record_cooccurrence(["Friends", "GYM"], now=T1)
        assert _weights(aggregator)["friends_gym"] == 2
        assert _weights(aggregator)["coffee_gym"] == 1
        assert [c.id for c in aggregator.all_connections(min_weight=2)] == ["friends_gym"]

    def test_returns_applied_pairs(self, aggregator):
        result = aggregator.record_cooccurrence(["gym", "friends", "coffee"], now=T0)
        assert isinstance(result, Ok)
        assert len(result.value) == 3

    def test_fewer_than_two_tags_is_noop(self, aggregator):
        assert aggregator.record_cooccurrence(["gym"], now=T0) == Ok([])
        assert aggregator.record_cooccurrence(["gym", " GYM"], now=T0) == Ok([])
        assert aggregator.all_connections() == []

    def test_symmetric_keying(self, aggregator):
        """(A, B) and (B, A) accumulate into one connection."""
        aggregator.record_cooccurrence(["b", "a"], now=T0)
        aggregator.record_cooccurrence(["a", "b"], now=T1)
        connections = aggregator.all_connections()
        assert len(connections) == 1
        assert (connections[0].source, connections[0].target, connections[0].weight) == ("a", "b", 2)

    def test_timestamps(self, aggregator):
        aggregator.record_cooccurrence(["a", "b"], now=T0)
        aggregator.record_cooccurrence(["a", "b"], now=T1)
        conn = aggregator.all_connections()[0]
        assert conn.created_at == T0
        assert conn.last_updated == T1

    def test_storage_failure_is_err(self):
        """A store failure is returned, not raised."""
        result = CooccurrenceAggregator(FailingStore()).record_cooccurrence(["a", "b"], now=T0)
        assert isinstance(result, Err)
        assert "disk full" in str(result.error)


class TestQueries:
    @pytest.fixture
    def loaded(self) -> CooccurrenceAggregator:
        store = InMemoryConnectionStore(
            [
                Connection("coffee", "gym", weight=3),
                Connection("friends", "gym", weight=1),
                Connection("coffee", "work", weight=2),
            ]
        )
        return CooccurrenceAggregator(store)

    def test_connections_of_strongest_first(self, loaded):
        links = loaded.connections_of(" GYM ")
        assert [(link.tag, link.weight) for link in links] == [("coffee", 3), ("friends", 1)]

    def test_all_connections_min_weight(self, loaded):
        assert [c.id for c in loaded.all_connections(min_weight=2)] == ["coffee_gym", "coffee_work"]

    def test_network_stats(self, loaded):
        stats = loaded.network_stats()
        assert stats.unique_tags == 4
        assert stats.total_connections == 3
        assert stats.average_weight == pytest.approx(2.0)
        assert stats.strongest.id == "coffee_gym"

    def test_network_stats_empty(self, aggregator):
        stats = aggregator.network_stats()
        assert stats.total_connections == 0
        assert stats.strongest is None


class TestConnection:
    def test_unsorted_endpoints_rejected(self):
        with pytest.raises(ValueError):
            Connection("gym", "coffee")

    def test_self_connection_rejected(self):
        with pytest.raises(ValueError):
            Connection("gym", "gym")

    def test_to_dict(self):
        data = Connection("coffee", "gym", weight=2, created_at=T0, last_updated=T1).to_dict()
        assert data["id"] == "coffee_gym"
        assert data["weight"] == 2
        assert data["createdAt"] == T0.isoformat()
