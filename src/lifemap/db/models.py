"""Database models for Lifemap.

- EventRow: journal entries and imported items
- TagMappingRow: a user's dimension/type/category choice for one tag
- ConnectionRow: co-occurrence weight of one sorted tag pair
"""

import json
from datetime import datetime
from typing import Any, ClassVar

from sqlalchemy import DateTime, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import func

from lifemap.core.models import Connection, Event, EventKind, TagMapping, ensure_utc
from lifemap.dimensions import Dimension, TagType


class LifemapBase(DeclarativeBase):
    """Base class for Lifemap models."""

    type_annotation_map: ClassVar[dict[type, Any]] = {}


class EventRow(LifemapBase):
    """One stored event.

    ``event_id`` doubles as the materialization key: imported items get a
    deterministic id from (source, time, title digest), so importing the
    same export twice finds the rows already present.
    """

    __tablename__ = "events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner_id: Mapped[str] = mapped_column(String(128), nullable=False)
    event_id: Mapped[str] = mapped_column(String(512), nullable=False)
    kind: Mapped[str] = mapped_column(String(16), nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False, default="")
    title: Mapped[str] = mapped_column(Text, nullable=False, default="")
    tags_json: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    category: Mapped[str | None] = mapped_column(String(32), nullable=True)
    source: Mapped[str] = mapped_column(String(64), nullable=False, default="journal")
    occurred_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint("owner_id", "event_id", name="uq_events_owner_event"),
        Index("idx_events_owner_time", "owner_id", "occurred_at"),
        Index("idx_events_owner_kind", "owner_id", "kind"),
    )

    @property
    def tags(self) -> list[str]:
        return json.loads(self.tags_json)  # type: ignore[no-any-return]

    @tags.setter
    def tags(self, value: list[str] | tuple[str, ...]) -> None:
        self.tags_json = json.dumps(list(value))

    @classmethod
    def from_event(cls, owner_id: str, event: Event) -> "EventRow":
        row = cls(
            owner_id=owner_id,
            event_id=event.id,
            kind=event.kind.value,
            text=event.text,
            title=event.title,
            category=event.category.value if event.category else None,
            source=event.source,
            # SQLite DateTime columns are naive; everything stored is UTC
            occurred_at=event.timestamp.replace(tzinfo=None) if event.timestamp else None,
        )
        row.tags = event.tags
        return row

    def to_event(self) -> Event:
        return Event(
            kind=EventKind(self.kind),
            timestamp=ensure_utc(self.occurred_at),
            tags=tuple(self.tags),
            text=self.text,
            title=self.title,
            category=Dimension.parse(self.category),
            source=self.source,
            id=self.event_id,
        )


class TagMappingRow(LifemapBase):
    __tablename__ = "tag_mappings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner_id: Mapped[str] = mapped_column(String(128), nullable=False)
    tag: Mapped[str] = mapped_column(String(256), nullable=False)
    dimension: Mapped[str | None] = mapped_column(String(32), nullable=True)
    type: Mapped[str] = mapped_column(String(16), nullable=False, default=TagType.CONCEPT.value)
    category: Mapped[str] = mapped_column(
        String(32), nullable=False, default=Dimension.UNASSIGNED.value
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (UniqueConstraint("owner_id", "tag", name="uq_tag_mappings_owner_tag"),)

    def to_mapping(self) -> TagMapping:
        return TagMapping(
            dimension=Dimension.parse(self.dimension),
            type=TagType.parse(self.type),
            category=Dimension.parse(self.category) or Dimension.UNASSIGNED,
        )


class ConnectionRow(LifemapBase):
    """Co-occurrence weight; ``source < target`` is enforced by the writer."""

    __tablename__ = "tag_connections"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner_id: Mapped[str] = mapped_column(String(128), nullable=False)
    source: Mapped[str] = mapped_column(String(256), nullable=False)
    target: Mapped[str] = mapped_column(String(256), nullable=False)
    weight: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    last_updated: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    __table_args__ = (
        UniqueConstraint("owner_id", "source", "target", name="uq_connections_owner_pair"),
        Index("idx_connections_owner_weight", "owner_id", "weight"),
    )

    def to_connection(self) -> Connection:
        return Connection(
            source=self.source,
            target=self.target,
            weight=self.weight,
            created_at=ensure_utc(self.created_at),
            last_updated=ensure_utc(self.last_updated),
        )
