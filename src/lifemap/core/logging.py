"""Structured logging and verbosity levels for Lifemap imports."""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import IntEnum
from pathlib import Path
from typing import Any

from rich.console import Console


class Verbosity(IntEnum):
    """Verbosity levels for console output."""

    DEFAULT = 0   # Summary only
    VERBOSE = 1   # + per-stage progress, per-batch status
    DEBUG = 2     # + oracle request details, timing


@dataclass
class StageLog:
    """Per-stage import statistics."""

    name: str
    items: int = 0
    llm_calls: int = 0
    retries: int = 0
    pairs_recorded: int = 0
    errors: int = 0
    time_seconds: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "items": self.items,
            "llm_calls": self.llm_calls,
            "retries": self.retries,
            "pairs_recorded": self.pairs_recorded,
            "errors": self.errors,
            "time_seconds": self.time_seconds,
        }


@dataclass
class RunLog:
    """Structured log of a complete import run.

    The dict format is::

        {
            "run_id": "20240315T100000Z",
            "stages": {
                "classify": {"items": 40, "llm_calls": 2, "retries": 1, ...},
                "store": {"items": 40, "pairs_recorded": 112, "errors": 0, ...},
            },
            "total_items": 40,
            "total_llm_calls": 2,
            "total_pairs": 112,
            "total_errors": 0,
            "total_time": 31.2,
        }
    """

    run_id: str = ""
    stages: dict[str, StageLog] = field(default_factory=dict)
    total_time: float = 0.0
    total_items: int = 0
    total_llm_calls: int = 0
    total_pairs: int = 0
    total_errors: int = 0

    def get_or_create_stage(self, name: str) -> StageLog:
        """Get existing stage log or create a new one."""
        if name not in self.stages:
            self.stages[name] = StageLog(name=name)
        return self.stages[name]

    def finalize(self) -> None:
        """Compute totals from stage data."""
        self.total_items = max((s.items for s in self.stages.values()), default=0)
        self.total_llm_calls = sum(s.llm_calls for s in self.stages.values())
        self.total_pairs = sum(s.pairs_recorded for s in self.stages.values())
        self.total_errors = sum(s.errors for s in self.stages.values())

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "stages": {name: stage.to_dict() for name, stage in self.stages.items()},
            "total_items": self.total_items,
            "total_llm_calls": self.total_llm_calls,
            "total_pairs": self.total_pairs,
            "total_errors": self.total_errors,
            "total_time": self.total_time,
        }


class ImportLogger:
    """Structured logger for import runs.

    Writes JSONL log files to logs_dir/ and optionally emits console
    output via Rich based on verbosity level.
    """

    def __init__(
        self,
        verbosity: Verbosity = Verbosity.DEFAULT,
        logs_dir: Path | None = None,
        console: Console | None = None,
    ):
        self.verbosity = verbosity
        self.run_log = RunLog(
            run_id=datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ"),
        )
        self._console = console
        self._log_file = None
        self._log_path: Path | None = None
        self._stage_start: float = 0.0

        if logs_dir is not None:
            logs_dir.mkdir(parents=True, exist_ok=True)
            self._log_path = logs_dir / f"{self.run_log.run_id}.jsonl"
            self._log_file = open(self._log_path, "a")

    @property
    def log_path(self) -> Path | None:
        return self._log_path

    def _write_event(self, event: dict[str, Any]) -> None:
        """Write a JSON event to the JSONL log file."""
        if self._log_file is not None:
            event["timestamp"] = datetime.now(timezone.utc).isoformat()
            self._log_file.write(json.dumps(event) + "\n")
            self._log_file.flush()

    def _console_print(self, message: str, min_verbosity: Verbosity) -> None:
        """Print to console if verbosity is high enough."""
        if self.verbosity >= min_verbosity:
            if self._console is None:
                self._console = Console()
            self._console.print(message)

    # -- Stage events --

    def stage_start(self, stage: str, items: int) -> None:
        """Log the start of an import stage."""
        self._stage_start = time.time()
        self.run_log.get_or_create_stage(stage).items = items

        self._write_event({"event": "stage_start", "stage": stage, "items": items})
        self._console_print(
            f"  [bold]{stage}:[/bold] {items} item(s)",
            Verbosity.VERBOSE,
        )

    def stage_finish(self, stage: str) -> None:
        """Log the completion of an import stage."""
        elapsed = time.time() - self._stage_start
        log = self.run_log.get_or_create_stage(stage)
        log.time_seconds = elapsed

        self._write_event({
            "event": "stage_finish",
            "stage": stage,
            "time_seconds": round(elapsed, 3),
            "errors": log.errors,
        })
        self._console_print(
            f"    {stage}: done ({elapsed:.1f}s, {log.errors} error(s))",
            Verbosity.VERBOSE,
        )

    # -- Batch events --

    def batch_done(self, stage: str, batch: int, total: int, size: int) -> None:
        """Log a finished classification batch or storage chunk."""
        self._write_event({
            "event": "batch_done",
            "stage": stage,
            "batch": batch,
            "total": total,
            "size": size,
        })
        self._console_print(
            f"      [green]+[/green] batch {batch}/{total} ({size})",
            Verbosity.VERBOSE,
        )

    def llm_call(self, stage: str, batch_size: int, start_time: float) -> None:
        """Log one completed oracle call."""
        elapsed = time.time() - start_time
        self.run_log.get_or_create_stage(stage).llm_calls += 1

        self._write_event({
            "event": "llm_call",
            "stage": stage,
            "batch_size": batch_size,
            "duration_seconds": round(elapsed, 3),
        })
        self._console_print(
            f"        [dim]oracle: {batch_size} item(s) in {elapsed:.1f}s[/dim]",
            Verbosity.DEBUG,
        )

    def rate_limited(self, stage: str, attempt: int, delay: float) -> None:
        """Log a rate-limit backoff."""
        self.run_log.get_or_create_stage(stage).retries += 1

        self._write_event({
            "event": "rate_limited",
            "stage": stage,
            "attempt": attempt,
            "delay_seconds": delay,
        })
        self._console_print(
            f"      [yellow]rate limited[/yellow], waiting {delay:.0f}s (retry {attempt})",
            Verbosity.DEFAULT,
        )

    def pairs_recorded(self, stage: str, count: int) -> None:
        self.run_log.get_or_create_stage(stage).pairs_recorded += count

    def error(self, stage: str, message: str) -> None:
        """Log a non-fatal error (e.g. a failed connection write)."""
        self.run_log.get_or_create_stage(stage).errors += 1

        self._write_event({"event": "error", "stage": stage, "message": message})
        self._console_print(f"      [red]![/red] {message}", Verbosity.VERBOSE)

    # -- Run lifecycle --

    def run_start(self, source: str, owner: str) -> None:
        self._write_event({"event": "run_start", "source": source, "owner": owner})

    def run_finish(self, total_time: float, cancelled: bool = False) -> None:
        """Log the completion of an import run and finalize stats."""
        self.run_log.total_time = total_time
        self.run_log.finalize()

        self._write_event({
            "event": "run_finish",
            "cancelled": cancelled,
            "total_time": round(total_time, 3),
            "total_items": self.run_log.total_items,
            "total_llm_calls": self.run_log.total_llm_calls,
            "total_pairs": self.run_log.total_pairs,
            "total_errors": self.run_log.total_errors,
        })
        self.close()

    def close(self) -> None:
        """Close the log file if open."""
        if self._log_file is not None:
            self._log_file.close()
            self._log_file = None
