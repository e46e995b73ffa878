"""Pipeline orchestration for tweesplit.

Responsibilities:
- Load a story once per request and expose passage listings and previews.
- Split a story into per-group Twee files or per-group archive entries.
- Report export counts in a stable result shape.

Key types:
- `SplitPipeline`: orchestration facade over parser, composer, and targets.

Exports are not transactional: when one group fails to write, files written
for earlier groups stay where they are.
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from ..errors import PipelineStageError
from ..io.archive import ArchivePackager
from ..io.storage import OutputDirectory
from ..models.datatypes import (
    ArchivePlan,
    ParsedStory,
    PassageInfo,
    SplitGroup,
    SplitPlan,
    SplitResult,
)
from ..telemetry.logger import RunLogger
from ..twee.parser import StoryParser, TweeParser
from ..twee.serializer import compose_group, serialize_passage
from .runtime import PipelineRuntimeMixin


class SplitPipeline(PipelineRuntimeMixin):
    """Coordinate story loading and group export for one host."""

    def __init__(
        self,
        parser: StoryParser | None = None,
        run_logger: RunLogger | None = None,
    ) -> None:
        """Initialize with an injectable parser and optional stage logging."""

        self._parser = parser or TweeParser()
        self._run_logger = run_logger

    def load_story(self, source_path: Path) -> ParsedStory:
        """Read and parse a story document."""

        return self._load_story(source_path)

    def list_passages(self, source_path: Path) -> list[PassageInfo]:
        """List passages in document order."""

        story = self._load_story(source_path)
        return [PassageInfo.from_passage(passage) for passage in story.passages.values()]

    def preview_passage(self, source_path: Path, name: str) -> str:
        """Render one passage exactly as it would appear in an exported group."""

        story = self._load_story(source_path)
        passage = story.passages.get(name)
        if passage is None:
            raise PipelineStageError(
                stage="preview",
                detail=f"Passage '{name}' not found",
                hint="Run `tweesplit passages <story>` to list passage names.",
            )
        return serialize_passage(passage)

    def split_to_directory(self, plan: SplitPlan) -> SplitResult:
        """Write one Twee file per group under `plan.output_dir`."""

        story = self._load_story(plan.source_path)
        target = OutputDirectory(plan.output_dir)
        self._run_stage("prepare", lambda: self._prepare_directory(target))
        self._run_stage("write", lambda: self._write_groups(target, plan.groups, story))
        return self._result(plan.groups)

    def split_to_archive(self, plan: ArchivePlan) -> SplitResult:
        """Write one deflated ZIP entry per group into `plan.archive_path`."""

        story = self._load_story(plan.source_path)
        self._run_stage(
            "archive",
            lambda: self._write_archive(plan.archive_path, plan.groups, story),
        )
        return self._result(plan.groups)

    def _prepare_directory(self, target: OutputDirectory) -> Path:
        """Create the output directory tree."""

        try:
            return target.prepare()
        except OSError as exc:
            raise PipelineStageError(
                stage="prepare",
                detail=f"Failed to create output directory `{target.root}`: {exc}",
                hint="Choose a writable output directory.",
            ) from exc

    def _write_groups(
        self,
        target: OutputDirectory,
        groups: Sequence[SplitGroup],
        story: ParsedStory,
    ) -> int:
        """Compose and write each group in order, stopping at the first failure."""

        written = 0
        for group in groups:
            content = self._compose(group, story)
            try:
                target.save_text(group.filename, content)
            except OSError as exc:
                raise PipelineStageError(
                    stage="write",
                    detail=f"Failed to write `{group.filename}`: {exc}",
                    hint=(
                        f"{written} file(s) written before the failure were kept in "
                        f"`{target.root}`."
                    ),
                ) from exc
            written += 1
        return written

    def _write_archive(
        self,
        archive_path: Path,
        groups: Sequence[SplitGroup],
        story: ParsedStory,
    ) -> Path:
        """Create the archive and write one entry per group."""

        packager = ArchivePackager(archive_path)
        try:
            packager.open()
        except OSError as exc:
            raise PipelineStageError(
                stage="archive",
                detail=f"Failed to create archive `{archive_path}`: {exc}",
                hint="Choose a writable archive location.",
            ) from exc

        for group in groups:
            content = self._compose(group, story)
            try:
                packager.write_entry(group.filename, content)
            except OSError as exc:
                packager.abort()
                raise PipelineStageError(
                    stage="archive",
                    detail=f"Failed to write archive entry `{group.filename}`: {exc}",
                    hint="The archive at this path is incomplete.",
                ) from exc

        try:
            return packager.finalize()
        except OSError as exc:
            raise PipelineStageError(
                stage="archive",
                detail=f"Failed to finalize archive `{archive_path}`: {exc}",
            ) from exc

    def _compose(self, group: SplitGroup, story: ParsedStory) -> str:
        """Compose one group body, logging names that did not resolve."""

        missing = [name for name in group.passage_names if name not in story.passages]
        if missing and self._run_logger is not None:
            self._run_logger.log_skipped_names(group.filename, missing)
        return compose_group(group.passage_names, story.passages)

    @staticmethod
    def _result(groups: Sequence[SplitGroup]) -> SplitResult:
        """Count processed groups and requested passage names."""

        return SplitResult(
            files_written=len(groups),
            total_passages=sum(len(group.passage_names) for group in groups),
        )
