"""Event storage: journal entries and imported items."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from lifemap.analytics.cooccurrence import CooccurrenceAggregator
from lifemap.core.errors import StorageError
from lifemap.core.models import Event, EventKind, ensure_utc
from lifemap.core.result import Err, Ok, Result
from lifemap.db.engine import get_session
from lifemap.db.models import EventRow
from lifemap.services.connections import SqlConnectionStore
from lifemap.tags import normalize_tags

if TYPE_CHECKING:
    from lifemap.config import Settings

logger = logging.getLogger(__name__)

MAX_BATCH_WRITES = 500


@dataclass
class SavedEvent:
    """A stored event plus the outcome of its co-occurrence recording."""

    event: Event
    connections: Result[list[tuple[str, str]], StorageError]


def record_event_connections(
    event: Event,
    owner_id: str,
    settings: "Settings | None" = None,
) -> Result[list[tuple[str, str]], StorageError]:
    """Best-effort co-occurrence recording for an already-saved event."""
    aggregator = CooccurrenceAggregator(SqlConnectionStore(owner_id, settings))
    result = aggregator.record_cooccurrence(event.tags, now=datetime.now(timezone.utc))
    if isinstance(result, Err):
        logger.warning("Event %s saved but tag connections were not recorded: %s", event.id, result.error)
    return result


def get_event(session: Session, owner_id: str, event_id: str) -> Event | None:
    stmt = select(EventRow).where(EventRow.owner_id == owner_id, EventRow.event_id == event_id)
    row = session.scalar(stmt)
    return row.to_event() if row else None


def list_events(
    session: Session,
    owner_id: str,
    kind: EventKind | None = None,
    since: datetime | None = None,
) -> list[Event]:
    """Events of an owner, oldest first; untimed events come last."""
    stmt = select(EventRow).where(EventRow.owner_id == owner_id)
    if kind is not None:
        stmt = stmt.where(EventRow.kind == kind.value)
    if since is not None:
        stmt = stmt.where(EventRow.occurred_at >= ensure_utc(since).replace(tzinfo=None))
    stmt = stmt.order_by(EventRow.occurred_at.is_(None), EventRow.occurred_at, EventRow.id)
    return [row.to_event() for row in session.scalars(stmt)]


def existing_event_ids(session: Session, owner_id: str, event_ids: Sequence[str]) -> set[str]:
    """Which of ``event_ids`` are already stored for this owner."""
    found: set[str] = set()
    # Stay well under SQLite's bound-parameter limit
    for start in range(0, len(event_ids), MAX_BATCH_WRITES):
        chunk = list(event_ids[start:start + MAX_BATCH_WRITES])
        stmt = select(EventRow.event_id).where(
            EventRow.owner_id == owner_id,
            EventRow.event_id.in_(chunk),
        )
        found.update(session.scalars(stmt))
    return found


def create_journal_entry(
    owner_id: str,
    text: str,
    tags: Sequence[str],
    timestamp: datetime | None = None,
    settings: "Settings | None" = None,
) -> SavedEvent:
    """Save a journal entry, then record its tag co-occurrences.

    The entry is committed first; a failure while recording connections is
    logged and reported in the result but never undoes the save.
    """
    event = Event.journal(text, tags, timestamp=timestamp or datetime.now(timezone.utc))
    with get_session(settings) as session:
        session.add(EventRow.from_event(owner_id, event))

    logger.debug("Saved journal entry %s with %d tag(s)", event.id, len(event.tags))
    return SavedEvent(event=event, connections=record_event_connections(event, owner_id, settings))


def update_journal_entry(
    owner_id: str,
    event_id: str,
    text: str | None = None,
    tags: Sequence[str] | None = None,
    settings: "Settings | None" = None,
) -> SavedEvent | None:
    """Edit a journal entry in place; returns None when it does not exist.

    New tags are recorded as fresh co-occurrences. Weight contributed by the
    old tag set is not retracted.
    """
    with get_session(settings) as session:
        stmt = select(EventRow).where(
            EventRow.owner_id == owner_id,
            EventRow.event_id == event_id,
            EventRow.kind == EventKind.JOURNAL.value,
        )
        row = session.scalar(stmt)
        if row is None:
            return None
        if text is not None:
            row.text = text
        if tags is not None:
            row.tags = normalize_tags(tags)
        event = row.to_event()

    if tags is None:
        return SavedEvent(event=event, connections=Ok([]))
    return SavedEvent(event=event, connections=record_event_connections(event, owner_id, settings))


def delete_event(session: Session, owner_id: str, event_id: str) -> bool:
    """Delete one event. Connection weights it contributed stay."""
    stmt = delete(EventRow).where(EventRow.owner_id == owner_id, EventRow.event_id == event_id)
    return session.execute(stmt).rowcount > 0


@dataclass
class ItemSaveResult:
    inserted: list[Event] = field(default_factory=list)
    skipped: int = 0
    chunks: int = 0
    cancelled: bool = False


def save_imported_items(
    owner_id: str,
    items: Sequence[Event],
    settings: "Settings | None" = None,
    chunk_size: int = MAX_BATCH_WRITES,
    should_stop: Callable[[], bool] | None = None,
    on_chunk: Callable[[int, int, list[Event]], None] | None = None,
) -> ItemSaveResult:
    """Store imported items in sequential chunks of at most ``chunk_size``.

    Each chunk is one transaction. Items whose id is already stored (or that
    repeat within this call) are skipped, so re-running an interrupted import
    only adds what is missing. ``on_chunk(number, total, inserted)`` runs
    after each committed chunk.
    """
    chunk_size = max(1, min(chunk_size, MAX_BATCH_WRITES))
    chunks = [items[i:i + chunk_size] for i in range(0, len(items), chunk_size)]
    result = ItemSaveResult()
    seen: set[str] = set()

    for number, chunk in enumerate(chunks, start=1):
        if should_stop is not None and should_stop():
            result.cancelled = True
            break

        inserted: list[Event] = []
        with get_session(settings) as session:
            present = existing_event_ids(session, owner_id, [item.id for item in chunk])
            for item in chunk:
                if item.id in present or item.id in seen:
                    result.skipped += 1
                    continue
                seen.add(item.id)
                session.add(EventRow.from_event(owner_id, item))
                inserted.append(item)

        result.inserted.extend(inserted)
        result.chunks += 1
        logger.debug("Stored chunk %d/%d: %d new item(s)", number, len(chunks), len(inserted))
        if on_chunk is not None:
            on_chunk(number, len(chunks), inserted)

    return result
