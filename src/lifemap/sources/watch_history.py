"""Watch-history export parser.

Accepted shapes (Google Takeout and hand-made exports):

    [{"title": "Watched Some Video", "time": "2024-03-01T12:00:00Z"}, ...]
    {"videos": [...]}
    {"history": [...]}

Title keys are tried in order ``title``, ``name``, ``titleUrl``; time keys
``time``, ``time_accessed``, ``timestamp``, ``date``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

from lifemap.core.errors import ImportFormatError
from lifemap.core.models import Event, parse_timestamp
from lifemap.keywords import extract_keywords
from lifemap.sources.base import Source, expand_path, first_present, item_key

logger = logging.getLogger(__name__)

TITLE_KEYS = ("title", "name", "titleUrl")
TIME_KEYS = ("time", "time_accessed", "timestamp", "date")
TAKEOUT_PREFIX = "Watched "


def unwrap_records(data: Any) -> list[Any]:
    """Find the record list inside a parsed export.

    Raises:
        ImportFormatError: The JSON is none of the accepted shapes.
    """
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        for key in ("videos", "history"):
            if isinstance(data.get(key), list):
                return data[key]
    msg = "Unrecognized JSON structure. Expected an array of videos."
    raise ImportFormatError(msg)


def clean_title(raw: Any) -> str:
    title = str(raw).strip()
    if title.startswith(TAKEOUT_PREFIX):
        title = title[len(TAKEOUT_PREFIX):].strip()
    return title


def items_from_records(records: list[Any], source: str = "watch-history") -> list[Event]:
    """Normalize raw records into uncategorized item Events.

    Records that are not objects or carry no title are skipped.
    """
    events: list[Event] = []
    skipped = 0
    for record in records:
        if not isinstance(record, dict):
            skipped += 1
            continue
        raw_title = first_present(record, TITLE_KEYS)
        title = clean_title(raw_title) if raw_title else ""
        if not title:
            skipped += 1
            continue
        timestamp = parse_timestamp(first_present(record, TIME_KEYS))
        events.append(
            Event.item(
                title=title,
                timestamp=timestamp,
                tags=extract_keywords(title),
                source=source,
                id=item_key(source, title, timestamp),
            )
        )

    if skipped:
        logger.info("Skipped %d record(s) without a usable title", skipped)
    return events


@dataclass
class WatchHistorySource(Source):
    """Parser for watch-history JSON exports."""

    format: str = "watch-history"

    def parse(self) -> Iterator[Event]:
        records = unwrap_records(self.load_json())
        yield from items_from_records(records, source=self.format)


def create_watch_history_source(file: str, name: str = "watch-history") -> WatchHistorySource:
    """Factory function to create a watch-history source.

    Args:
        file: Path to the export JSON file.
        name: Name recorded on the import run.

    Returns:
        Configured WatchHistorySource.
    """
    return WatchHistorySource(name=name, file_path=expand_path(file))
