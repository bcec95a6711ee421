"""Batched, rate-limit aware classification."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from lifemap.classify.oracle import Oracle
from lifemap.core.errors import ClassificationError, RateLimitedError
from lifemap.core.logging import ImportLogger
from lifemap.dimensions import SCORING_DIMENSIONS, Dimension

logger = logging.getLogger(__name__)

STAGE = "classify"


@dataclass
class BatchProgress:
    batch: int
    total_batches: int
    processed: int
    total: int


@dataclass
class ClassificationRun:
    """Labels for the processed prefix of the input."""

    labels: list[Dimension] = field(default_factory=list)
    cancelled: bool = False
    llm_calls: int = 0
    retries: int = 0


class BatchClassifier:
    """Send texts to an oracle in fixed-size batches.

    Between batches it pauses ``batch_delay`` seconds to stay under free-tier
    request quotas. A rate-limited batch waits ``rate_limit_delay`` (or the
    provider's retry-after, if longer) and is retried up to ``max_retries``
    times before the run fails with ``ClassificationError``.
    """

    def __init__(
        self,
        oracle: Oracle,
        batch_size: int = 20,
        batch_delay: float = 7.0,
        rate_limit_delay: float = 20.0,
        max_retries: int = 3,
        allowed: Sequence[Dimension] = SCORING_DIMENSIONS,
        sleep: Callable[[float], None] = time.sleep,
        import_logger: ImportLogger | None = None,
    ) -> None:
        if batch_size < 1:
            msg = f"batch_size must be positive, got {batch_size}"
            raise ValueError(msg)
        self.oracle = oracle
        self.batch_size = batch_size
        self.batch_delay = batch_delay
        self.rate_limit_delay = rate_limit_delay
        self.max_retries = max_retries
        self.allowed = tuple(allowed)
        self._sleep = sleep
        self._log = import_logger

    def classify(
        self,
        texts: Sequence[str],
        should_stop: Callable[[], bool] | None = None,
        on_progress: Callable[[BatchProgress], None] | None = None,
    ) -> ClassificationRun:
        """Classify every text, polling ``should_stop`` between batches.

        A stop request returns the labels of the batches already finished
        with ``cancelled=True``; a batch is never half-labelled.
        """
        run = ClassificationRun()
        batches = [texts[i:i + self.batch_size] for i in range(0, len(texts), self.batch_size)]

        for number, batch in enumerate(batches, start=1):
            if should_stop is not None and should_stop():
                logger.info("Classification stopped after %d/%d batches", number - 1, len(batches))
                run.cancelled = True
                break

            run.labels.extend(self._classify_batch(list(batch), run))

            if self._log:
                self._log.batch_done(STAGE, number, len(batches), len(batch))
            if on_progress is not None:
                on_progress(BatchProgress(number, len(batches), len(run.labels), len(texts)))

            if number < len(batches) and self.batch_delay > 0:
                self._sleep(self.batch_delay)

        return run

    def _classify_batch(self, batch: list[str], run: ClassificationRun) -> list[Dimension]:
        attempt = 0
        while True:
            start = time.time()
            try:
                labels = self.oracle.classify(batch, self.allowed)
            except RateLimitedError as exc:
                if attempt >= self.max_retries:
                    msg = f"Rate limit persisted after {self.max_retries} retries: {exc}"
                    raise ClassificationError(msg) from exc
                attempt += 1
                run.retries += 1
                delay = max(self.rate_limit_delay, exc.retry_after or 0.0)
                logger.warning("Rate limited, waiting %.0fs (retry %d/%d)", delay, attempt, self.max_retries)
                if self._log:
                    self._log.rate_limited(STAGE, attempt, delay)
                self._sleep(delay)
                continue

            run.llm_calls += 1
            if self._log:
                self._log.llm_call(STAGE, len(batch), start)
            if len(labels) != len(batch):
                msg = f"Oracle returned {len(labels)} label(s) for {len(batch)} item(s)"
                raise ClassificationError(msg)
            return labels
