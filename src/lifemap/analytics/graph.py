"""Build the rendering graph from events and stored connections."""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable
from datetime import timedelta

from lifemap.analytics.temporal import DEFAULT_WINDOW, link_by_time
from lifemap.analytics.trajectory import resolve_dimension
from lifemap.core.models import (
    CATEGORY_NODE,
    EMPTY_MAPPINGS,
    ITEM_NODE,
    Connection,
    EdgeKind,
    Event,
    Graph,
    GraphEdge,
    GraphNode,
    MappingSnapshot,
    NodeRef,
)
from lifemap.dimensions import Dimension, TagType

logger = logging.getLogger(__name__)

CATEGORY_SIZE_FACTOR = 10
TAG_SIZE_FACTOR = 2
ITEM_SIZE = 3
TITLE_LIMIT = 50


def category_id(category: Dimension) -> str:
    return category.value.lower()


def truncate_title(title: str, limit: int = TITLE_LIMIT) -> str:
    if len(title) <= limit:
        return title
    return title[:limit] + "..."


def _item_category(event: Event, mappings: MappingSnapshot) -> Dimension:
    return resolve_dimension(event.title, mappings, assigned=event.category).value


def build_graph(
    events: Iterable[Event],
    *,
    mappings: MappingSnapshot = EMPTY_MAPPINGS,
    connections: Iterable[Connection] = (),
    window: timedelta = DEFAULT_WINDOW,
    min_weight: int = 1,
) -> Graph:
    """Merge category hubs, leaves, membership, temporal and co-occurrence edges.

    Node ids are unique and every edge references an output node: endpoints
    without a node get a synthesized minimal leaf. Edges are de-duplicated by
    their unordered endpoint pair, first one wins.
    """
    events = list(events)

    category_counts: Counter[Dimension] = Counter()
    tag_frequency: Counter[str] = Counter()
    tag_category: dict[str, Dimension] = {}
    items: list[tuple[Event, Dimension]] = []

    for event in events:
        if event.is_item:
            category = _item_category(event, mappings)
            items.append((event, category))
            category_counts[category] += 1
            continue
        for tag in event.tags:
            dim = tag_category.get(tag)
            if dim is None:
                dim = resolve_dimension(tag, mappings).value
                tag_category[tag] = dim
            tag_frequency[tag] += 1
            category_counts[dim] += 1

    nodes: dict[str, GraphNode] = {}
    for category, count in category_counts.items():
        node_id = category_id(category)
        nodes[node_id] = GraphNode(
            id=node_id,
            name=category.value,
            category=category.value,
            size=CATEGORY_SIZE_FACTOR * count,
            frequency=count,
            type=CATEGORY_NODE,
            is_main=True,
        )

    edges: list[GraphEdge] = []

    for event, category in items:
        nodes[event.id] = GraphNode(
            id=event.id,
            name=truncate_title(event.title),
            category=category.value,
            size=ITEM_SIZE,
            frequency=1,
            type=ITEM_NODE,
            full_title=event.title,
            time=event.timestamp,
        )
        edges.append(_membership(event.id, category))

    for tag, frequency in tag_frequency.items():
        if tag in nodes:
            # A tag spelled like a category hub merges into the hub
            continue
        category = tag_category[tag]
        mapping = mappings.get(tag)
        nodes[tag] = GraphNode(
            id=tag,
            name=tag,
            category=category.value,
            size=TAG_SIZE_FACTOR * frequency,
            frequency=frequency,
            type=(mapping.type if mapping else TagType.CONCEPT).value,
        )
        edges.append(_membership(tag, category))

    edges.extend(link_by_time(((event.id, event.timestamp) for event, _ in items), window))

    for connection in connections:
        if connection.weight < min_weight:
            continue
        edges.append(
            GraphEdge(
                source=NodeRef(connection.source),
                target=NodeRef(connection.target),
                weight=connection.weight,
                kind=EdgeKind.COOCCURRENCE,
            )
        )

    # One edge per unordered pair; the heavier edge wins, ties keep the first
    by_key: dict[frozenset[str], GraphEdge] = {}
    for edge in edges:
        if edge.source_id == edge.target_id:
            continue
        kept = by_key.get(edge.key)
        if kept is None or edge.weight > kept.weight:
            by_key[edge.key] = edge
    unique_edges = list(by_key.values())
    for edge in unique_edges:
        for endpoint in (edge.source, edge.target):
            if endpoint.id not in nodes:
                nodes[endpoint.id] = _synthesize(endpoint, mappings)

    logger.debug(
        "Built graph: %d nodes (%d categories, %d items, %d tags), %d edges",
        len(nodes),
        len(category_counts),
        len(items),
        len(tag_frequency),
        len(unique_edges),
    )
    return Graph(nodes=tuple(nodes.values()), edges=tuple(unique_edges))


def _membership(leaf_id: str, category: Dimension) -> GraphEdge:
    return GraphEdge(
        source=NodeRef(leaf_id),
        target=NodeRef(category_id(category)),
        weight=1,
        kind=EdgeKind.MEMBERSHIP,
    )


def _synthesize(endpoint: NodeRef | GraphNode, mappings: MappingSnapshot) -> GraphNode:
    if isinstance(endpoint, GraphNode):
        return endpoint
    dim = resolve_dimension(endpoint.id, mappings).value
    mapping = mappings.get(endpoint.id)
    return GraphNode(
        id=endpoint.id,
        name=endpoint.id,
        category=dim.value,
        size=TAG_SIZE_FACTOR,
        frequency=1,
        type=(mapping.type if mapping else TagType.CONCEPT).value,
    )
