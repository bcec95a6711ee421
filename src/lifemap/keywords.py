"""Keyword tags for imported titles.

Imported items have no explicit tags, so a handful of keywords are pulled
from each title. They feed co-occurrence the same way journal tags do.
"""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Iterable

MAX_KEYWORDS = 5
MIN_KEYWORD_LENGTH = 3

ENGLISH_STOP_WORDS = frozenset(
    """
    a about above after again against all am an and any are as at be because
    been before being below between both but by can could did do does doing
    down during each few for from further had has have having he her here hers
    herself him himself his i if in into is it its itself just me more most my
    myself no nor not now of off on once only or other our ours ourselves out
    over own same she should so some such than that the their theirs them
    themselves then there these they this those through to too under until up
    very was we were which while who whom will with would you your yours
    yourself yourselves get got make made one two really much many ever
    """.split()
)

# Words that show up in nearly every watch-history title and say nothing
TITLE_STOP_WORDS = frozenset(
    """
    video tutorial guide introduction intro part episode ep full complete
    course lesson how what why when where learn learning explained explanation
    ultimate best top official new latest review reaction vs versus
    compilation highlights clip live stream vlog daily weekly monthly year
    years day days hour hours minute minutes
    """.split()
)

_WORD_RE = re.compile(r"[A-Za-z][A-Za-z0-9'&+-]*")


def _clean(word: str) -> str:
    return re.sub(r"[^a-z0-9]", "", word.lower())


def extract_keywords(title: str, limit: int = MAX_KEYWORDS) -> list[str]:
    """Up to ``limit`` lower-case keywords from a title.

    Candidates skip stop words, pure digits and anything shorter than three
    characters. Capitalized words rank higher (they are usually topics or
    names), then longer words; ties keep title order.
    """
    if not title:
        return []

    scored: dict[str, int] = {}
    for raw in _WORD_RE.findall(title):
        keyword = _clean(raw)
        if (
            len(keyword) < MIN_KEYWORD_LENGTH
            or keyword.isdigit()
            or keyword in ENGLISH_STOP_WORDS
            or keyword in TITLE_STOP_WORDS
            or keyword in scored
        ):
            continue
        scored[keyword] = (2 if raw[0].isupper() else 0) + len(keyword)

    ranked = sorted(scored, key=lambda k: -scored[k])
    return ranked[:limit]


def tag_frequency(tag_lists: Iterable[Iterable[str]]) -> Counter[str]:
    """How many items carry each tag."""
    counts: Counter[str] = Counter()
    for tags in tag_lists:
        counts.update({tag.lower() for tag in tags})
    return counts


def top_tags(frequency: Counter[str], limit: int = 20) -> list[tuple[str, int]]:
    """Most common tags, count descending then tag name."""
    return sorted(frequency.items(), key=lambda kv: (-kv[1], kv[0]))[:limit]
