"""Abstract base class for import sources."""

from __future__ import annotations

import hashlib
import json
from abc import ABC, abstractmethod
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

from lifemap.core.errors import ImportFormatError
from lifemap.core.models import Event


@dataclass
class Source(ABC):
    """Abstract base class for import sources.

    Sources read an export file and yield Events. Shape problems raise
    ``ImportFormatError`` before the first event is yielded, so a malformed
    file is rejected as a whole.
    """

    name: str
    file_path: Path
    format: str

    @abstractmethod
    def parse(self) -> Iterator[Event]:
        """Parse the source file and yield Events."""
        ...

    def validate(self) -> None:
        """Validate that the source file exists and is readable."""
        if not self.file_path.exists():
            msg = f"Source file not found: {self.file_path}"
            raise FileNotFoundError(msg)
        if not self.file_path.is_file():
            msg = f"Source path is not a file: {self.file_path}"
            raise ValueError(msg)

    def load_json(self) -> Any:
        self.validate()
        with open(self.file_path, encoding="utf-8") as f:
            try:
                return json.load(f)
            except json.JSONDecodeError as exc:
                msg = f"{self.file_path} is not valid JSON: {exc}"
                raise ImportFormatError(msg) from exc


def first_present(record: dict[str, Any], keys: tuple[str, ...]) -> Any:
    """Value of the first key in ``keys`` that holds something truthy."""
    for key in keys:
        value = record.get(key)
        if value:
            return value
    return None


def item_key(source: str, title: str, timestamp: datetime | None) -> str:
    """Deterministic id for an imported item.

    The same title watched at the same time from the same source always maps
    to the same key, which is what makes re-imports idempotent.
    """
    digest = hashlib.sha256(title.encode("utf-8")).hexdigest()[:16]
    when = timestamp.isoformat() if timestamp else "untimed"
    return f"{source}:{when}:{digest}"


def expand_path(path: str | Path) -> Path:
    """Expand user home directory and resolve path."""
    return Path(path).expanduser().resolve()
