"""Pytest fixtures for Lifemap tests."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from lifemap.core.errors import RateLimitedError
from lifemap.dimensions import DEFAULT_CATEGORY, Dimension

if TYPE_CHECKING:
    from lifemap.config import Settings

NOW = datetime(2024, 3, 31, 12, 0, tzinfo=timezone.utc)


@dataclass
class MockOracle:
    """Deterministic oracle: labels come from ``labels`` by substring, else Entertainment.

    ``rate_limits`` makes the first N calls raise RateLimitedError.
    """

    labels: dict[str, Dimension] = field(default_factory=dict)
    rate_limits: int = 0
    retry_after: float | None = None
    calls: list[list[str]] = field(default_factory=list)

    def classify(self, texts, allowed) -> list[Dimension]:
        self.calls.append(list(texts))
        if self.rate_limits > 0:
            self.rate_limits -= 1
            raise RateLimitedError("429 Too Many Requests", retry_after=self.retry_after)
        result = []
        for text in texts:
            label = DEFAULT_CATEGORY
            for needle, dim in self.labels.items():
                if needle.lower() in text.lower():
                    label = dim
                    break
            result.append(label)
        return result


class FakeSleep:
    """Records requested sleeps instead of sleeping."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def mock_oracle() -> MockOracle:
    return MockOracle(
        labels={
            "python": Dimension.CAREER,
            "workout": Dimension.HEALTH,
            "history": Dimension.INTELLECTUAL,
            "meditation": Dimension.SPIRITUAL,
        }
    )


@pytest.fixture
def fake_sleep() -> FakeSleep:
    return FakeSleep()


@pytest.fixture
def test_storage_dir(tmp_path: Path) -> Path:
    """Create a temporary storage directory."""
    storage = tmp_path / ".lifemap"
    storage.mkdir(parents=True)
    return storage


@pytest.fixture
def test_settings(test_storage_dir: Path, monkeypatch) -> "Settings":
    """Settings pointing at the temporary storage, also visible through the env."""
    from lifemap.config import Settings, reset_settings

    monkeypatch.setenv("LIFEMAP_STORAGE_DIR", str(test_storage_dir))
    monkeypatch.setenv("LIFEMAP_OWNER", "tester")
    monkeypatch.delenv("LIFEMAP_LLM_API_KEY", raising=False)
    reset_settings()
    return Settings(storage_dir=test_storage_dir, owner="tester", write_batch_size=2)


@pytest.fixture
def initialized_db(test_settings: "Settings") -> "Settings":
    """Initialize the database and return settings."""
    from lifemap.config import reset_settings
    from lifemap.db.engine import init_database, reset_engine

    reset_settings()
    reset_engine()
    init_database(test_settings)
    yield test_settings
    reset_engine()
    reset_settings()


@pytest.fixture
def watch_history_file(tmp_path: Path) -> Path:
    """A small Takeout-style watch-history export."""
    start = datetime(2024, 3, 30, 9, 0, tzinfo=timezone.utc)
    records = [
        {"title": "Watched Python Decorators Explained", "time": start.isoformat()},
        {"title": "Watched Python Asyncio Deep Dive", "time": (start + timedelta(minutes=5)).isoformat()},
        {"title": "Watched Full Body Workout Routine", "time": (start + timedelta(minutes=50)).isoformat()},
        {"title": "Watched Roman History Documentary", "time": (start + timedelta(days=1)).isoformat()},
        {"time": start.isoformat()},
        "not a record",
    ]
    path = tmp_path / "watch-history.json"
    path.write_text(json.dumps(records))
    return path


@pytest.fixture
def journal_file(tmp_path: Path) -> Path:
    """A journal export with co-occurring tags."""
    data = {
        "entries": [
            {"text": "Lifted with Sam", "tags": ["gym", "friends"], "date": "2024-03-28T08:00:00Z"},
            {"text": "Morning session", "tags": ["gym", "coffee"], "date": "2024-03-29T07:30:00Z"},
            {"text": "Brunch", "tags": ["Friends", "coffee", " gym "], "date": "2024-03-30T11:00:00Z"},
        ]
    }
    path = tmp_path / "journal.json"
    path.write_text(json.dumps(data))
    return path
