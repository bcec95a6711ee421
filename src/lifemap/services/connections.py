"""SQLite-backed connection store."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lifemap.core.errors import StorageError
from lifemap.core.models import Connection
from lifemap.db.engine import get_session
from lifemap.db.models import ConnectionRow

if TYPE_CHECKING:
    from lifemap.config import Settings

logger = logging.getLogger(__name__)


def list_connections(session: Session, owner_id: str) -> list[Connection]:
    stmt = select(ConnectionRow).where(ConnectionRow.owner_id == owner_id)
    return [row.to_connection() for row in session.scalars(stmt)]


class SqlConnectionStore:
    """Connection store for one owner.

    Each ``apply_pairs`` call runs in its own transaction, separate from
    whatever saved the triggering event, and uses
    ``INSERT ... ON CONFLICT DO UPDATE SET weight = weight + 1`` so the
    increment is atomic in the database rather than read-modify-write.
    """

    def __init__(self, owner_id: str, settings: "Settings | None" = None) -> None:
        self.owner_id = owner_id
        self.settings = settings

    def apply_pairs(self, pairs: list[tuple[str, str]], at: datetime) -> None:
        naive_at = at.replace(tzinfo=None)
        try:
            with get_session(self.settings) as session:
                for source, target in pairs:
                    stmt = insert(ConnectionRow).values(
                        owner_id=self.owner_id,
                        source=source,
                        target=target,
                        weight=1,
                        created_at=naive_at,
                        last_updated=naive_at,
                    )
                    stmt = stmt.on_conflict_do_update(
                        index_elements=["owner_id", "source", "target"],
                        set_={
                            "weight": ConnectionRow.weight + 1,
                            "last_updated": naive_at,
                        },
                    )
                    session.execute(stmt)
        except SQLAlchemyError as exc:
            msg = f"Failed to record {len(pairs)} tag connection(s): {exc}"
            raise StorageError(msg) from exc

    def list_connections(self) -> list[Connection]:
        try:
            with get_session(self.settings) as session:
                return list_connections(session, self.owner_id)
        except SQLAlchemyError as exc:
            msg = f"Failed to load tag connections: {exc}"
            raise StorageError(msg) from exc
