"""Tag normalization and pair extraction."""

from __future__ import annotations

from collections.abc import Iterable
from itertools import combinations


def normalize_tag(raw: str) -> str:
    """Trim and lower-case a raw tag.

    Whitespace-only input yields ``""``; callers must drop it before it
    reaches aggregation.
    """
    return raw.strip().lower()


def normalize_tags(raws: Iterable[str]) -> list[str]:
    """Normalize, drop empties and de-duplicate, keeping first-seen order."""
    seen: dict[str, None] = {}
    for raw in raws:
        tag = normalize_tag(raw)
        if tag:
            seen.setdefault(tag, None)
    return list(seen)


def sorted_pair(tag1: str, tag2: str) -> tuple[str, str]:
    """Order a pair so that ``(A, B)`` and ``(B, A)`` share one key."""
    a, b = normalize_tag(tag1), normalize_tag(tag2)
    return (a, b) if a <= b else (b, a)


def connection_id(tag1: str, tag2: str) -> str:
    """Storage id for a tag pair, e.g. ``coffee_gym``."""
    first, second = sorted_pair(tag1, tag2)
    return f"{first}_{second}"


def extract_pairs(tags: Iterable[str]) -> list[tuple[str, str]]:
    """All unordered pairs of distinct normalized tags, each sorted.

    k distinct tags yield exactly k*(k-1)/2 pairs; duplicates within one
    event contribute neither a self-pair nor extra weight.
    """
    unique = normalize_tags(tags)
    return [sorted_pair(a, b) for a, b in combinations(unique, 2)]
