"""Structured run logging utilities.

Responsibilities:
- Emit concise, deterministic stage-level logs for parse and export runs.
- Route all output through a single `loguru` sink chosen by the host.
"""

from __future__ import annotations

import sys
from typing import TextIO

from loguru import logger as _loguru_logger


_TOKEN_PUNCTUATION = frozenset("-_.:/")


def _log_token(value: object) -> str:
    """Render one context value as a single space-free token."""

    text = str(value).strip() or "none"
    return "".join(
        char if char.isalnum() or char in _TOKEN_PUNCTUATION else "_" for char in text
    )


def _context_suffix(context: dict[str, object]) -> str:
    """Return ` key=value` pairs sorted by key, or `""` without context."""

    return "".join(f" {key}={_log_token(context[key])}" for key in sorted(context))


class RunLogger:
    """Emit deterministic stage logs for story loading and export activity."""

    def __init__(self, sink: TextIO | None = None, level: str = "INFO") -> None:
        """Replace loguru sinks with one plain-message sink at `level`."""

        self._sink = sink or sys.stderr
        _loguru_logger.remove()
        _loguru_logger.add(self._sink, format="{message}", level=level.upper(), colorize=False)

    def _emit(self, level: str, event: str, stage: str, **context: object) -> None:
        """Emit one structured runtime log line."""

        line = f"[phase] level={level} stage={stage} event={event}{_context_suffix(context)}"
        _loguru_logger.log(level, line)

    def log_stage_start(self, stage: str, **context: object) -> None:
        """Emit a stage-start event."""

        self._emit("INFO", "start", stage, **context)

    def log_stage_complete(self, stage: str, **context: object) -> None:
        """Emit a stage-complete event."""

        self._emit("INFO", "complete", stage, **context)

    def log_stage_failure(self, stage: str, error_type: str) -> None:
        """Emit a stage-failure event without path or content details."""

        self._emit("ERROR", "failure", stage, error_type=error_type)

    def log_skipped_names(self, filename: str, names: list[str]) -> None:
        """Record group names that did not resolve to passages."""

        self._emit("DEBUG", "skipped", "compose", file=filename, count=len(names))
