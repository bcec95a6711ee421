"""Import sources for export formats."""

from lifemap.sources.base import Source
from lifemap.sources.journal import JournalSource
from lifemap.sources.watch_history import WatchHistorySource
