"""Database engine setup for Lifemap.

A single SQLite database holds events, tag mappings and tag connections.
"""

from collections.abc import Generator
from contextlib import contextmanager
from typing import TYPE_CHECKING

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker

if TYPE_CHECKING:
    from lifemap.config import Settings

# Lazy engine initialization - engine created on first use
_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def _enable_foreign_keys(dbapi_conn: object, connection_record: object) -> None:
    """Enable foreign key constraints for SQLite connections."""
    cursor = dbapi_conn.cursor()  # type: ignore[union-attr]
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _create_engine_for_db(db_url: str) -> Engine:
    """Create a SQLite engine with proper configuration."""
    engine = create_engine(
        db_url,
        echo=False,
        pool_pre_ping=True,
    )
    event.listen(engine, "connect", _enable_foreign_keys)
    return engine


def get_engine(settings: "Settings | None" = None) -> Engine:
    """Get or create the engine."""
    global _engine
    if _engine is None:
        if settings is None:
            from lifemap.config import get_settings

            settings = get_settings()
        settings.ensure_storage_dir()
        _engine = _create_engine_for_db(settings.db_url)
    return _engine


def get_session_factory(settings: "Settings | None" = None) -> sessionmaker[Session]:
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(bind=get_engine(settings), expire_on_commit=False)
    return _session_factory


@contextmanager
def get_session(settings: "Settings | None" = None) -> Generator[Session, None, None]:
    """Yield a session that commits on success and rolls back on error."""
    factory = get_session_factory(settings)
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_database(settings: "Settings | None" = None) -> None:
    """Create all tables (idempotent)."""
    from lifemap.db.models import LifemapBase

    LifemapBase.metadata.create_all(get_engine(settings))


def reset_engine() -> None:
    """Reset the engine cache (useful for testing)."""
    global _engine, _session_factory

    if _engine is not None:
        _engine.dispose()
        _engine = None
    _session_factory = None
