"""Journal export parser.

Expects a list of entries, or ``{"entries": [...]}``:

    [{"text": "Lifted with Sam", "tags": ["gym", "friends"], "date": "2024-03-01"}]

``text_entry`` is accepted for ``text`` and ``time`` for ``date``.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

from lifemap.core.errors import ImportFormatError
from lifemap.core.models import Event, parse_timestamp
from lifemap.sources.base import Source, expand_path, first_present, item_key
from lifemap.tags import normalize_tags


def entries_from_data(data: Any) -> list[Event]:
    """Validate and convert a parsed journal export.

    Raises:
        ImportFormatError: The export is not a list of entry objects, or an
            entry has a non-list ``tags`` field.
    """
    if isinstance(data, dict) and isinstance(data.get("entries"), list):
        data = data["entries"]
    if not isinstance(data, list):
        msg = "Unrecognized journal structure. Expected an array of entries."
        raise ImportFormatError(msg)

    events: list[Event] = []
    for index, entry in enumerate(data):
        if not isinstance(entry, dict):
            msg = f"Journal entry {index} is not an object"
            raise ImportFormatError(msg)
        tags = entry.get("tags", [])
        if not isinstance(tags, list):
            msg = f"Journal entry {index} has non-list tags"
            raise ImportFormatError(msg)
        text = str(first_present(entry, ("text", "text_entry")) or "")
        timestamp = parse_timestamp(first_present(entry, ("date", "time")))
        tags = [str(t) for t in tags]
        if entry.get("id"):
            entry_id = str(entry["id"])
        else:
            # Entries sharing text and date still differ by tags
            keyed = text + "\x1f" + ",".join(sorted(normalize_tags(tags)))
            entry_id = item_key("journal", keyed, timestamp)
        events.append(Event.journal(text, tags, timestamp=timestamp, id=entry_id))
    return events


@dataclass
class JournalSource(Source):
    """Parser for journal JSON exports."""

    format: str = "journal"

    def parse(self) -> Iterator[Event]:
        yield from entries_from_data(self.load_json())


def create_journal_source(file: str, name: str = "journal") -> JournalSource:
    return JournalSource(name=name, file_path=expand_path(file))
