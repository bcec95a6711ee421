"""Lifemap error types."""

from __future__ import annotations


class LifemapError(Exception):
    """Base exception for Lifemap."""

    pass


class ConfigError(LifemapError):
    """Missing or invalid configuration (API keys, providers)."""

    pass


class ImportFormatError(LifemapError):
    """Export file has a shape the importer does not recognize.

    Raised before anything is stored, so a rejected import leaves no
    partial state behind.
    """

    pass


class ClassificationError(LifemapError):
    """The classification oracle failed or returned an unusable response.

    Recoverable: the caller can report it and retry the import later.
    """

    pass


class RateLimitedError(ClassificationError):
    """The oracle provider signalled a rate limit (HTTP 429)."""

    def __init__(self, message: str, retry_after: float | None = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class StorageError(LifemapError):
    """Error reading from or writing to the local store."""

    pass
