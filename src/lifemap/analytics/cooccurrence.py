"""Tag co-occurrence aggregation.

Every pair of distinct tags attached to the same event is an undirected
connection whose weight counts how many events used both tags. Weights
only ever grow.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Protocol

from lifemap.core.errors import StorageError
from lifemap.core.models import Connection
from lifemap.core.result import Err, Ok, Result
from lifemap.tags import extract_pairs, normalize_tag

logger = logging.getLogger(__name__)


class ConnectionStore(Protocol):
    """Where connection weights persist.

    ``apply_pairs`` must apply every pair of one call together: either all
    increments land or none do. Failures raise ``StorageError``.
    """

    def apply_pairs(self, pairs: list[tuple[str, str]], at: datetime) -> None: ...

    def list_connections(self) -> list[Connection]: ...


class InMemoryConnectionStore:
    """Dictionary-backed store; each call builds a new dict and swaps it in."""

    def __init__(self, connections: list[Connection] | None = None) -> None:
        self._connections: dict[tuple[str, str], Connection] = {
            (c.source, c.target): c for c in connections or []
        }

    def apply_pairs(self, pairs: list[tuple[str, str]], at: datetime) -> None:
        updated = dict(self._connections)
        for pair in pairs:
            existing = updated.get(pair)
            if existing is None:
                updated[pair] = Connection(
                    source=pair[0],
                    target=pair[1],
                    weight=1,
                    created_at=at,
                    last_updated=at,
                )
            else:
                updated[pair] = replace(existing, weight=existing.weight + 1, last_updated=at)
        self._connections = updated

    def list_connections(self) -> list[Connection]:
        return list(self._connections.values())


@dataclass(frozen=True)
class TagLink:
    """A connection seen from one of its tags."""

    tag: str
    weight: int
    last_updated: datetime | None = None


@dataclass(frozen=True)
class NetworkStats:
    unique_tags: int
    total_connections: int
    average_weight: float
    strongest: Connection | None


class CooccurrenceAggregator:
    """Records tag co-occurrences and answers weight queries."""

    def __init__(self, store: ConnectionStore) -> None:
        self.store = store

    def record_cooccurrence(
        self,
        tags: list[str] | tuple[str, ...],
        now: datetime | None = None,
    ) -> Result[list[tuple[str, str]], StorageError]:
        """Increment the weight of every tag pair in ``tags``.

        Returns the pairs that were applied. Fewer than two distinct tags is a
        no-op. A storage failure comes back as ``Err`` so the caller can log
        it without failing whatever event save triggered the recording.
        """
        pairs = extract_pairs(tags)
        if not pairs:
            return Ok([])

        at = now or datetime.now(timezone.utc)
        try:
            self.store.apply_pairs(pairs, at)
        except StorageError as exc:
            return Err(exc)

        logger.debug(
            "Recorded %d tag connection(s): %s",
            len(pairs),
            ", ".join(f"{a} <-> {b}" for a, b in pairs),
        )
        return Ok(pairs)

    def connections_of(self, tag: str) -> list[TagLink]:
        """All tags connected to ``tag``, strongest first."""
        key = normalize_tag(tag)
        links = [
            TagLink(tag=c.other(key), weight=c.weight, last_updated=c.last_updated)
            for c in self.store.list_connections()
            if key in (c.source, c.target)
        ]
        links.sort(key=lambda link: (-link.weight, link.tag))
        return links

    def all_connections(self, min_weight: int = 1) -> list[Connection]:
        """Every connection with ``weight >= min_weight``, strongest first."""
        connections = [c for c in self.store.list_connections() if c.weight >= min_weight]
        connections.sort(key=lambda c: (-c.weight, c.id))
        return connections

    def network_stats(self, min_weight: int = 1) -> NetworkStats:
        connections = self.all_connections(min_weight)
        if not connections:
            return NetworkStats(unique_tags=0, total_connections=0, average_weight=0.0, strongest=None)

        unique = {c.source for c in connections} | {c.target for c in connections}
        return NetworkStats(
            unique_tags=len(unique),
            total_connections=len(connections),
            average_weight=sum(c.weight for c in connections) / len(connections),
            strongest=connections[0],
        )
