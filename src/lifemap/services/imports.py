"""Import pipelines: parse, classify, store, then record co-occurrences."""

from __future__ import annotations

import logging
import time
from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from lifemap.classify.batch import BatchClassifier, BatchProgress
from lifemap.core.errors import StorageError
from lifemap.core.logging import ImportLogger
from lifemap.core.models import Event
from lifemap.core.result import Err, Ok
from lifemap.db.engine import get_session
from lifemap.dimensions import Dimension
from lifemap.keywords import tag_frequency
from lifemap.services.events import (
    existing_event_ids,
    record_event_connections,
    save_imported_items,
)
from lifemap.services.mappings import save_categories, unclassified_tags
from lifemap.sources.base import Source

if TYPE_CHECKING:
    from lifemap.config import Settings

logger = logging.getLogger(__name__)


@dataclass
class ImportResult:
    """What an import run did."""

    processed: int = 0
    new: int = 0
    skipped: int = 0
    pairs: int = 0
    connection_errors: int = 0
    cancelled: bool = False
    categories: Counter[Dimension] = field(default_factory=Counter)
    keywords: Counter[str] = field(default_factory=Counter)


def _record_connections(
    items: list[Event],
    owner_id: str,
    settings: "Settings | None",
    result: ImportResult,
    import_logger: ImportLogger | None,
) -> None:
    for item in items:
        outcome = record_event_connections(item, owner_id, settings)
        if isinstance(outcome, Ok):
            result.pairs += len(outcome.value)
            if import_logger:
                import_logger.pairs_recorded("store", len(outcome.value))
        elif isinstance(outcome, Err):
            result.connection_errors += 1
            if import_logger:
                import_logger.error("store", str(outcome.error))


def import_watch_history(
    source: Source,
    owner_id: str,
    classifier: BatchClassifier,
    settings: "Settings | None" = None,
    import_logger: ImportLogger | None = None,
    should_stop: Callable[[], bool] | None = None,
    on_progress: Callable[[BatchProgress], None] | None = None,
) -> ImportResult:
    """Import a watch-history export.

    Parsing happens in full before anything else, so an unrecognized file
    raises ``ImportFormatError`` with nothing stored. Items already in the
    store are skipped before classification. Only items inserted by this run
    contribute co-occurrence weight, which keeps re-imports idempotent.

    Raises:
        ImportFormatError: The export has an unrecognized shape.
        ClassificationError: The oracle failed after retries. Nothing from
            the failing run has been stored at that point.
    """
    from lifemap.config import get_settings

    settings = settings or get_settings()
    started = time.time()
    items = list(source.parse())
    result = ImportResult(processed=len(items))
    if import_logger:
        import_logger.run_start(source.name, owner_id)

    with get_session(settings) as session:
        present = existing_event_ids(session, owner_id, [item.id for item in items])
    fresh = [item for item in items if item.id not in present]
    result.skipped = len(items) - len(fresh)
    logger.info("Parsed %d item(s): %d new, %d already stored", len(items), len(fresh), result.skipped)

    if import_logger:
        import_logger.stage_start("classify", len(fresh))
    run = classifier.classify([item.title for item in fresh], should_stop=should_stop, on_progress=on_progress)
    if import_logger:
        import_logger.stage_finish("classify")
    classified = [item.with_category(label) for item, label in zip(fresh, run.labels)]
    result.cancelled = run.cancelled

    if import_logger:
        import_logger.stage_start("store", len(classified))

    def store_chunk(number: int, total: int, inserted: list[Event]) -> None:
        _record_connections(inserted, owner_id, settings, result, import_logger)
        if import_logger:
            import_logger.batch_done("store", number, total, len(inserted))

    saved = save_imported_items(
        owner_id,
        classified,
        settings=settings,
        chunk_size=settings.write_batch_size,
        should_stop=should_stop,
        on_chunk=store_chunk,
    )
    if import_logger:
        import_logger.stage_finish("store")

    result.new = len(saved.inserted)
    result.skipped += saved.skipped
    result.cancelled = result.cancelled or saved.cancelled
    result.categories.update(item.category for item in saved.inserted if item.category)
    result.keywords = tag_frequency(item.tags for item in saved.inserted)

    if import_logger:
        import_logger.run_finish(time.time() - started, cancelled=result.cancelled)
    logger.info(
        "Import finished: %d new, %d skipped, %d pair update(s)%s",
        result.new,
        result.skipped,
        result.pairs,
        " (cancelled)" if result.cancelled else "",
    )
    return result


def import_journal(
    source: Source,
    owner_id: str,
    settings: "Settings | None" = None,
) -> ImportResult:
    """Import journal entries; re-importing the same file adds nothing."""
    from lifemap.config import get_settings

    settings = settings or get_settings()
    entries = list(source.parse())
    result = ImportResult(processed=len(entries))

    saved = save_imported_items(owner_id, entries, settings=settings, chunk_size=settings.write_batch_size)
    result.new = len(saved.inserted)
    result.skipped = saved.skipped
    _record_connections(saved.inserted, owner_id, settings, result, None)
    return result


def classify_tags(
    owner_id: str,
    classifier: BatchClassifier,
    settings: "Settings | None" = None,
    should_stop: Callable[[], bool] | None = None,
) -> dict[str, Dimension]:
    """Ask the oracle for a category for every unclassified journal tag.

    Categories are stored on the tag mappings; explicit user dimensions are
    left untouched.

    Raises:
        ClassificationError: The oracle failed after retries.
        StorageError: The categories could not be saved.
    """
    with get_session(settings) as session:
        tags = unclassified_tags(session, owner_id)
    if not tags:
        return {}

    run = classifier.classify(tags, should_stop=should_stop)
    categories = dict(zip(tags, run.labels))
    try:
        with get_session(settings) as session:
            save_categories(session, owner_id, categories)
    except SQLAlchemyError as exc:
        msg = f"Failed to store {len(categories)} tag categories: {exc}"
        raise StorageError(msg) from exc
    return categories
