"""Temporal linking: items consumed close together in time form a train of thought."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta

from lifemap.core.models import EdgeKind, GraphEdge, NodeRef

DEFAULT_WINDOW = timedelta(minutes=30)
TEMPORAL_WEIGHT = 2


def link_by_time(
    items: Iterable[tuple[str, datetime | None]],
    window: timedelta = DEFAULT_WINDOW,
) -> list[GraphEdge]:
    """Link every pair of items whose timestamps are within ``window``.

    ``items`` are ``(node_id, timestamp)`` pairs. Items without a timestamp
    are left out of linking. Only strictly positive gaps up to and including
    ``window`` link; the forward scan stops at the first item past the window,
    so the cost is proportional to the number of items times the average
    cluster size.
    """
    timed = sorted(
        ((node_id, ts) for node_id, ts in items if ts is not None),
        key=lambda pair: pair[1],
    )

    edges: list[GraphEdge] = []
    seen: set[frozenset[str]] = set()

    for i, (id_a, time_a) in enumerate(timed):
        for id_b, time_b in timed[i + 1:]:
            gap = time_b - time_a
            if gap > window:
                break
            if gap <= timedelta(0) or id_a == id_b:
                continue

            key = frozenset((id_a, id_b))
            if key in seen:
                continue
            seen.add(key)
            edges.append(
                GraphEdge(
                    source=NodeRef(id_a),
                    target=NodeRef(id_b),
                    weight=TEMPORAL_WEIGHT,
                    kind=EdgeKind.TEMPORAL,
                )
            )

    return edges
