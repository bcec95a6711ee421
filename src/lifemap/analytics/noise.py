"""Reduce a graph to a displayable node budget."""

from __future__ import annotations

import logging

from lifemap.core.models import Graph, GraphNode

logger = logging.getLogger(__name__)

NODE_CAP = 300


def is_exempt(node: GraphNode) -> bool:
    """Category hubs and item leaves survive every filter."""
    return node.is_main or node.is_item


def filter_graph(graph: Graph, min_frequency: int, cap: int = NODE_CAP) -> Graph:
    """Drop low-frequency nodes, enforce ``cap`` and drop orphaned edges.

    When the kept set is over ``cap`` the highest-frequency non-exempt nodes
    that fit are kept; if exempt nodes alone exceed ``cap`` they are all kept
    anyway. Input node order is preserved, so the result is stable and
    filtering it again with the same arguments changes nothing.
    """
    exempt = [node for node in graph.nodes if is_exempt(node)]
    candidates = [
        node for node in graph.nodes
        if not is_exempt(node) and node.frequency >= min_frequency
    ]

    if len(exempt) + len(candidates) > cap:
        room = max(cap - len(exempt), 0)
        # sorted() is stable, so equal frequencies keep input order
        ranked = sorted(candidates, key=lambda node: -node.frequency)[:room]
        allowed = {node.id for node in ranked}
        candidates = [node for node in candidates if node.id in allowed]

    kept_ids = {node.id for node in exempt} | {node.id for node in candidates}
    nodes = tuple(node for node in graph.nodes if node.id in kept_ids)
    edges = tuple(
        edge for edge in graph.edges
        if edge.source_id in kept_ids and edge.target_id in kept_ids
    )

    logger.debug(
        "Filtered graph: kept %d/%d nodes, %d/%d edges (min_frequency=%d, cap=%d)",
        len(nodes),
        len(graph.nodes),
        len(edges),
        len(graph.edges),
        min_frequency,
        cap,
    )
    return Graph(nodes=nodes, edges=edges)
