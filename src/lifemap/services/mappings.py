"""Tag mapping reads and writes."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from lifemap.core.models import EventKind, MappingSnapshot, TagMapping
from lifemap.db.models import EventRow, TagMappingRow
from lifemap.dimensions import Dimension, TagType
from lifemap.tags import normalize_tag


def load_mappings(session: Session, owner_id: str) -> MappingSnapshot:
    """Load every mapping of an owner into an immutable snapshot."""
    stmt = select(TagMappingRow).where(TagMappingRow.owner_id == owner_id)
    return MappingSnapshot({row.tag: row.to_mapping() for row in session.scalars(stmt)})


def _get_or_create(session: Session, owner_id: str, tag: str) -> TagMappingRow:
    stmt = select(TagMappingRow).where(
        TagMappingRow.owner_id == owner_id,
        TagMappingRow.tag == tag,
    )
    row = session.scalar(stmt)
    if row is None:
        row = TagMappingRow(
            owner_id=owner_id,
            tag=tag,
            dimension=None,
            type=TagType.CONCEPT.value,
            category=Dimension.UNASSIGNED.value,
        )
        session.add(row)
    return row


def save_mapping(
    session: Session,
    owner_id: str,
    tag: str,
    dimension: Dimension | None = None,
    type: TagType | None = None,
    category: Dimension | None = None,
) -> TagMapping:
    """Create or update one tag's mapping; only the given fields change.

    Raises:
        ValueError: ``tag`` normalizes to the empty string.
    """
    key = normalize_tag(tag)
    if not key:
        msg = "Tag must not be empty"
        raise ValueError(msg)

    row = _get_or_create(session, owner_id, key)
    if dimension is not None:
        row.dimension = dimension.value
    if type is not None:
        row.type = type.value
    if category is not None:
        row.category = category.value
    session.flush()
    return row.to_mapping()


def save_categories(session: Session, owner_id: str, categories: dict[str, Dimension]) -> int:
    """Store oracle categories for many tags; returns how many were written."""
    written = 0
    for tag, category in categories.items():
        key = normalize_tag(tag)
        if not key:
            continue
        _get_or_create(session, owner_id, key).category = category.value
        written += 1
    session.flush()
    return written


def unclassified_tags(session: Session, owner_id: str) -> list[str]:
    """Journal tags with neither a user dimension nor an oracle category."""
    mappings = load_mappings(session, owner_id)
    stmt = select(EventRow).where(
        EventRow.owner_id == owner_id,
        EventRow.kind == EventKind.JOURNAL.value,
    )
    seen: dict[str, None] = {}
    for row in session.scalars(stmt):
        for tag in row.tags:
            mapping = mappings.get(tag)
            if mapping is None or (
                mapping.dimension is None and mapping.category is Dimension.UNASSIGNED
            ):
                seen.setdefault(tag, None)
    return sorted(seen)
