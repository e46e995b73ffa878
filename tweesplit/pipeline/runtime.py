"""Stage telemetry and source-loading helpers for the split pipeline.

Responsibilities:
- Wrap each named stage with start/complete/failure telemetry events.
- Read and parse the source story, mapping failures to stage-aware errors.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import TypeVar

from ..errors import PipelineStageError, TweeParseError
from ..models.datatypes import ParsedStory
from ..telemetry.logger import RunLogger
from ..twee.parser import StoryParser

_StageResult = TypeVar("_StageResult")


class PipelineRuntimeMixin:
    """Provide stage telemetry and story loading for pipeline orchestration."""

    _parser: StoryParser
    _run_logger: RunLogger | None

    def _run_stage(
        self,
        stage_name: str,
        action: Callable[[], _StageResult],
    ) -> _StageResult:
        """Run one named stage and emit start/complete/failure telemetry events."""

        if self._run_logger is not None:
            self._run_logger.log_stage_start(stage_name)
        try:
            result = action()
        except Exception as exc:
            if self._run_logger is not None:
                self._run_logger.log_stage_failure(stage_name, type(exc).__name__)
            raise
        if self._run_logger is not None:
            self._run_logger.log_stage_complete(stage_name)
        return result

    def _load_story(self, source_path: Path) -> ParsedStory:
        """Read and parse a source story; both steps are fatal on failure."""

        text = self._run_stage("read", lambda: self._read_source(source_path))
        return self._run_stage("parse", lambda: self._parse_source(text))

    def _read_source(self, source_path: Path) -> str:
        """Read the full source document as UTF-8 text."""

        try:
            return source_path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise PipelineStageError(
                stage="read",
                detail=f"Story file not found: `{source_path}`.",
                hint="Pass an existing `.twee` or `.tw` file.",
            ) from exc
        except UnicodeDecodeError as exc:
            raise PipelineStageError(
                stage="read",
                detail=f"Story file `{source_path}` is not valid UTF-8: {exc.reason}.",
                hint="Re-save the story with UTF-8 encoding.",
            ) from exc
        except OSError as exc:
            raise PipelineStageError(
                stage="read",
                detail=f"Failed to read story file `{source_path}`: {exc}",
            ) from exc

    def _parse_source(self, text: str) -> ParsedStory:
        """Parse source text with the injected parser, forwarding its message."""

        try:
            return self._parser.parse(text)
        except TweeParseError as exc:
            raise PipelineStageError(stage="parse", detail=str(exc)) from exc
