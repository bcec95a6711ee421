"""Classification oracles: text in, one dimension label per text out."""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Sequence
from typing import Any, Protocol

from lifemap.core.errors import ClassificationError
from lifemap.dimensions import (
    DEFAULT_CATEGORY,
    DIMENSION_CONFIG,
    SCORING_DIMENSIONS,
    Dimension,
    dimension_for_keyword,
)
from lifemap.llm.client import LLMClient

logger = logging.getLogger(__name__)


class Oracle(Protocol):
    """Labels a batch of texts.

    Must return exactly one label per input text, each drawn from
    ``allowed``. Raises ``RateLimitedError`` on a provider rate limit and
    ``ClassificationError`` on any other failure.
    """

    def classify(self, texts: Sequence[str], allowed: Sequence[Dimension]) -> list[Dimension]: ...


def coerce_label(value: Any, allowed: Sequence[Dimension]) -> Dimension:
    """Map a raw oracle answer onto an allowed label, defaulting to Entertainment."""
    dim = Dimension.parse(value) if isinstance(value, str) else None
    if dim is None or dim not in allowed:
        if value is not None:
            logger.debug("Coercing unknown label %r to %s", value, DEFAULT_CATEGORY)
        return DEFAULT_CATEGORY
    return dim


def strip_code_fence(text: str) -> str:
    """Remove a ```json ... ``` wrapper the model may put around its answer."""
    text = text.strip()
    if text.startswith("```"):
        text = re.sub(r"^```[a-zA-Z]*\n?", "", text)
        text = re.sub(r"\n?```$", "", text)
    return text.strip()


def parse_labels(raw: str, texts: Sequence[str], allowed: Sequence[Dimension]) -> list[Dimension]:
    """Parse an oracle JSON answer into one label per text.

    Accepted answers:
        - ``[{"index": 1, "category": "Career"}, ...]`` (1-based indexes)
        - ``["Career", "Health", ...]`` (positional)
        - ``{"text": "Career", ...}`` (keyed by the input text)

    Missing or unknown labels become Entertainment.

    Raises:
        ClassificationError: The answer is not JSON of one of those shapes.
    """
    try:
        data = json.loads(strip_code_fence(raw))
    except json.JSONDecodeError as exc:
        msg = f"Oracle returned invalid JSON: {exc}"
        raise ClassificationError(msg) from exc

    answers: dict[int, Any] = {}
    if isinstance(data, list):
        for position, entry in enumerate(data):
            if isinstance(entry, dict):
                try:
                    index = int(entry.get("index", position + 1)) - 1
                except (TypeError, ValueError):
                    continue
                answers[index] = entry.get("category")
            else:
                answers[position] = entry
    elif isinstance(data, dict):
        lowered = {str(k).strip().lower(): v for k, v in data.items()}
        for position, text in enumerate(texts):
            answers[position] = lowered.get(text.strip().lower())
    else:
        msg = f"Oracle returned unexpected JSON type: {type(data).__name__}"
        raise ClassificationError(msg)

    return [coerce_label(answers.get(i), allowed) for i in range(len(texts))]


def build_prompt(texts: Sequence[str], allowed: Sequence[Dimension]) -> str:
    numbered = "\n".join(f"{i}. {text}" for i, text in enumerate(texts, start=1))
    categories = "\n".join(
        f"- {dim.value}: {DIMENSION_CONFIG[dim].description}" for dim in allowed
    )
    return (
        "You are categorizing items from a personal activity log into life dimensions.\n\n"
        f"Here are {len(texts)} items:\n{numbered}\n\n"
        f"Categorize each item into exactly ONE of these categories:\n{categories}\n\n"
        "Return ONLY a JSON array where each element has: "
        '{"index": number, "category": string}.\n'
        f"Index must match the number in the list above (1-{len(texts)}).\n\n"
        "Return the JSON array now:"
    )


class LLMOracle:
    """Oracle backed by a chat-completion model."""

    def __init__(self, client: LLMClient) -> None:
        self.client = client

    def classify(self, texts: Sequence[str], allowed: Sequence[Dimension] = SCORING_DIMENSIONS) -> list[Dimension]:
        if not texts:
            return []
        response = self.client.complete(
            [{"role": "user", "content": build_prompt(texts, allowed)}],
        )
        logger.debug(
            "Oracle answered %d item(s) with %d tokens",
            len(texts),
            response.total_tokens,
        )
        return parse_labels(response.content, texts, allowed)


_WORD_RE = re.compile(r"[a-z0-9]+")


class KeywordOracle:
    """Offline oracle: first keyword seed found in the text wins."""

    def classify(self, texts: Sequence[str], allowed: Sequence[Dimension] = SCORING_DIMENSIONS) -> list[Dimension]:
        labels = []
        for text in texts:
            label = DEFAULT_CATEGORY
            for word in _WORD_RE.findall(text.lower()):
                dim = dimension_for_keyword(word)
                if dim is not None and dim in allowed:
                    label = dim
                    break
            labels.append(label)
        return labels
