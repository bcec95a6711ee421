"""Core data models for Lifemap."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Union
from uuid import uuid4

from lifemap.dimensions import Dimension, TagType
from lifemap.tags import normalize_tag, normalize_tags

logger = logging.getLogger(__name__)


def ensure_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes so all comparisons are aware."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO string, epoch seconds/millis or datetime into aware UTC.

    Values that do not parse, or fall outside the representable range, come
    back as None and the event is treated as untimed.
    """
    if value is None or value == "":
        return None
    try:
        if isinstance(value, datetime):
            return ensure_utc(value)
        if isinstance(value, (int, float)):
            # Millisecond epochs are what browser exports emit
            seconds = value / 1000 if value > 1e11 else value
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        if isinstance(value, str):
            return ensure_utc(datetime.fromisoformat(value.strip().replace("Z", "+00:00")))
    except (OverflowError, OSError, ValueError):
        logger.debug("Unparseable timestamp %r", value)
        return None
    return None


class EventKind(str, Enum):
    JOURNAL = "journal"
    ITEM = "item"


@dataclass(frozen=True)
class Event:
    """One unit of user activity: a journal entry or an imported item.

    Journal entries carry free text plus explicit tags. Imported items carry a
    title, the category the classifier assigned, and keyword tags extracted
    from the title.
    """

    kind: EventKind
    timestamp: datetime | None
    tags: tuple[str, ...] = ()
    text: str = ""
    title: str = ""
    category: Dimension | None = None
    source: str = "journal"
    id: str = field(default_factory=lambda: str(uuid4()))

    @classmethod
    def journal(
        cls,
        text: str,
        tags: list[str] | tuple[str, ...],
        timestamp: datetime | None = None,
        id: str | None = None,
    ) -> Event:
        return cls(
            kind=EventKind.JOURNAL,
            timestamp=ensure_utc(timestamp),
            tags=tuple(normalize_tags(tags)),
            text=text,
            source="journal",
            id=id or str(uuid4()),
        )

    @classmethod
    def item(
        cls,
        title: str,
        timestamp: datetime | None,
        category: Dimension | str | None = None,
        tags: list[str] | tuple[str, ...] = (),
        source: str = "watch-history",
        id: str | None = None,
    ) -> Event:
        dim = Dimension.parse(category) if isinstance(category, str) else category
        return cls(
            kind=EventKind.ITEM,
            timestamp=ensure_utc(timestamp),
            tags=tuple(normalize_tags(tags)),
            title=title,
            category=dim,
            source=source,
            id=id or str(uuid4()),
        )

    @property
    def is_item(self) -> bool:
        return self.kind is EventKind.ITEM

    def with_category(self, category: Dimension) -> Event:
        return replace(self, category=category)


@dataclass(frozen=True)
class TagMapping:
    """A user's classification of one tag.

    ``dimension`` is the user's explicit choice (None means "Unknown");
    ``category`` is what the classification oracle said.
    """

    dimension: Dimension | None = None
    type: TagType = TagType.CONCEPT
    category: Dimension = Dimension.UNASSIGNED

    @classmethod
    def from_value(cls, value: str | dict[str, Any]) -> TagMapping:
        """Accept both the legacy plain-dimension string and the dict form."""
        if isinstance(value, str):
            return cls(dimension=Dimension.parse(value))
        return cls(
            dimension=Dimension.parse(value.get("dimension")),
            type=TagType.parse(value.get("type")),
            category=Dimension.parse(value.get("category")) or Dimension.UNASSIGNED,
        )

    def to_dict(self) -> dict[str, str]:
        return {
            "dimension": self.dimension.value if self.dimension else "Unknown",
            "type": self.type.value,
            "category": self.category.value,
        }


class MappingSnapshot:
    """Immutable tag -> TagMapping view, loaded once and passed around."""

    __slots__ = ("_mappings",)

    def __init__(self, mappings: dict[str, TagMapping] | None = None) -> None:
        normalized = {normalize_tag(tag): m for tag, m in (mappings or {}).items()}
        self._mappings = MappingProxyType(normalized)

    def get(self, tag: str) -> TagMapping | None:
        return self._mappings.get(normalize_tag(tag))

    def with_mapping(self, tag: str, mapping: TagMapping) -> MappingSnapshot:
        """Return a new snapshot with one mapping added or replaced."""
        merged = dict(self._mappings)
        merged[normalize_tag(tag)] = mapping
        return MappingSnapshot(merged)

    def items(self):
        return self._mappings.items()

    def __contains__(self, tag: object) -> bool:
        return isinstance(tag, str) and normalize_tag(tag) in self._mappings

    def __len__(self) -> int:
        return len(self._mappings)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, MappingSnapshot) and dict(self._mappings) == dict(other._mappings)

    def __repr__(self) -> str:
        return f"MappingSnapshot({len(self._mappings)} tags)"


EMPTY_MAPPINGS = MappingSnapshot()


@dataclass(frozen=True)
class Connection:
    """Co-occurrence weight between two tags; ``source < target`` always."""

    source: str
    target: str
    weight: int = 1
    created_at: datetime | None = None
    last_updated: datetime | None = None

    def __post_init__(self) -> None:
        if not self.source < self.target:
            msg = f"Connection endpoints must be sorted and distinct: {self.source!r}, {self.target!r}"
            raise ValueError(msg)

    @property
    def id(self) -> str:
        return f"{self.source}_{self.target}"

    def other(self, tag: str) -> str:
        return self.target if tag == self.source else self.source

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "source": self.source,
            "target": self.target,
            "weight": self.weight,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "lastUpdated": self.last_updated.isoformat() if self.last_updated else None,
        }


# -- Rendering graph --

CATEGORY_NODE = "Category"
ITEM_NODE = "Item"


@dataclass(frozen=True)
class GraphNode:
    """A category hub, a tag leaf or an imported-item leaf."""

    id: str
    name: str
    category: str
    size: int
    frequency: int
    type: str
    is_main: bool = False
    full_title: str | None = None
    time: datetime | None = None

    @property
    def is_item(self) -> bool:
        return self.type == ITEM_NODE

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "val": self.size,
            "frequency": self.frequency,
            "type": self.type,
            "isMainNode": self.is_main,
        }
        if self.full_title is not None:
            data["fullTitle"] = self.full_title
        if self.time is not None:
            data["time"] = self.time.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GraphNode:
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", data["id"])),
            category=str(data.get("category") or Dimension.UNASSIGNED.value),
            size=int(data.get("val", data.get("size", 1))),
            frequency=int(data.get("frequency") or 0),
            type=str(data.get("type", TagType.CONCEPT.value)),
            is_main=bool(data.get("isMainNode", data.get("type") == CATEGORY_NODE)),
            full_title=data.get("fullTitle"),
            time=parse_timestamp(data.get("time")),
        )


@dataclass(frozen=True)
class NodeRef:
    """An edge endpoint known only by id."""

    id: str


Endpoint = Union[NodeRef, GraphNode]


def endpoint_id(endpoint: Endpoint) -> str:
    """The id of an edge endpoint, whichever form it arrived in."""
    return endpoint.id


class EdgeKind(str, Enum):
    MEMBERSHIP = "membership"
    TEMPORAL = "temporal"
    COOCCURRENCE = "cooccurrence"


@dataclass(frozen=True)
class GraphEdge:
    source: Endpoint
    target: Endpoint
    weight: int
    kind: EdgeKind

    @property
    def source_id(self) -> str:
        return endpoint_id(self.source)

    @property
    def target_id(self) -> str:
        return endpoint_id(self.target)

    @property
    def key(self) -> frozenset[str]:
        """Unordered identity: an edge and its reverse share a key."""
        return frozenset((self.source_id, self.target_id))

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source_id,
            "target": self.target_id,
            "weight": self.weight,
            "value": self.weight,
            "type": self.kind.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GraphEdge:
        weight = int(data.get("weight", data.get("value", 1)))
        return cls(
            source=_parse_endpoint(data["source"]),
            target=_parse_endpoint(data["target"]),
            weight=weight,
            kind=EdgeKind(data.get("type", EdgeKind.MEMBERSHIP.value)),
        )


def _parse_endpoint(value: Any) -> Endpoint:
    # Layout engines replace endpoint ids with node objects in place
    if isinstance(value, dict):
        return GraphNode.from_dict(value) if "name" in value else NodeRef(str(value["id"]))
    return NodeRef(str(value))


@dataclass(frozen=True)
class Graph:
    """Plain nodes + edges payload consumed by the layout engine."""

    nodes: tuple[GraphNode, ...] = ()
    edges: tuple[GraphEdge, ...] = ()

    def node_ids(self) -> set[str]:
        return {node.id for node in self.nodes}

    def get_node(self, node_id: str) -> GraphNode | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def to_dict(self) -> dict[str, list[dict[str, Any]]]:
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "edges": [edge.to_dict() for edge in self.edges],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Graph:
        edges = data.get("edges", data.get("links", []))
        return cls(
            nodes=tuple(GraphNode.from_dict(n) for n in data.get("nodes", [])),
            edges=tuple(GraphEdge.from_dict(e) for e in edges),
        )
