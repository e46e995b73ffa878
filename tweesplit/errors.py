"""Domain exceptions for story parsing, export pipeline, and CLI diagnostics."""

from __future__ import annotations


class PipelineStageError(RuntimeError):
    """Raised when a specific pipeline stage fails."""

    def __init__(
        self,
        *,
        stage: str,
        detail: str,
        hint: str | None = None,
    ) -> None:
        """Initialize a stage-scoped pipeline error."""

        super().__init__(detail)
        self.stage = stage
        self.detail = detail
        self.hint = hint


class TweeParseError(ValueError):
    """Raised when story text cannot be parsed into passages."""

    def __init__(self, message: str, line: int | None = None) -> None:
        """Initialize a parse error, optionally anchored to a 1-based line."""

        text = message if line is None else f"line {line}: {message}"
        super().__init__(text)
        self.line = line


class StateLoadError(ValueError):
    """Raised when a persisted application state file exists but is malformed."""


class PromptUnavailableError(RuntimeError):
    """Raised when an interactive path prompt cannot reach a terminal."""
