"""Database models and engine for Lifemap.

One SQLite database (lifemap.db) holds events, tag mappings and tag
connections for every owner.
"""

from lifemap.db.engine import get_engine, get_session, init_database, reset_engine
from lifemap.db.models import ConnectionRow, EventRow, LifemapBase, TagMappingRow

__all__ = [
    "ConnectionRow",
    "EventRow",
    "LifemapBase",
    "TagMappingRow",
    "get_engine",
    "get_session",
    "init_database",
    "reset_engine",
]
