"""Lifemap - turn a personal activity log into a life map.

Usage:
    from lifemap import Event, build_graph, filter_graph, score_trajectory

    events = [
        Event.journal("Lifted with Sam", ["gym", "friends"]),
        Event.journal("Morning session", ["gym", "coffee"]),
    ]
    graph = filter_graph(build_graph(events), min_frequency=1)
    snapshot = score_trajectory(events, 30)
"""

from lifemap.analytics.cooccurrence import CooccurrenceAggregator, InMemoryConnectionStore
from lifemap.analytics.graph import build_graph
from lifemap.analytics.noise import filter_graph
from lifemap.analytics.temporal import link_by_time
from lifemap.analytics.trajectory import resolve_dimension, score_trajectory, trajectory_trend
from lifemap.analytics.trends import category_totals, category_trends, dominant_archetype
from lifemap.core.models import Connection, Event, Graph, GraphEdge, GraphNode, MappingSnapshot, TagMapping
from lifemap.dimensions import Dimension, TagType

__all__ = [
    "CooccurrenceAggregator",
    "Connection",
    "Dimension",
    "Event",
    "Graph",
    "GraphEdge",
    "GraphNode",
    "InMemoryConnectionStore",
    "MappingSnapshot",
    "TagMapping",
    "TagType",
    "build_graph",
    "category_totals",
    "category_trends",
    "dominant_archetype",
    "filter_graph",
    "link_by_time",
    "resolve_dimension",
    "score_trajectory",
    "trajectory_trend",
]

__version__ = "0.1.0"
