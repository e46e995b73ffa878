"""Pipeline integration tests for directory and archive exports."""

from __future__ import annotations

import io
from pathlib import Path
import zipfile

import pytest

from tweesplit.errors import PipelineStageError, TweeParseError
from tweesplit.io.archive import ArchivePackager
from tweesplit.models.datatypes import (
    ArchivePlan,
    ParsedStory,
    Passage,
    SplitGroup,
    SplitPlan,
    SplitResult,
)
from tweesplit.pipeline import SplitPipeline
from tweesplit.telemetry.logger import RunLogger
from tweesplit.twee.parser import TweeParser
from tweesplit.twee.serializer import compose_group

_GROUPS = (
    SplitGroup(filename="opening.twee", passage_names=("StoryTitle", "StoryData", "Start")),
    SplitGroup(filename="middle.twee", passage_names=("Cave", "Missing")),
    SplitGroup(filename="ending.twee", passage_names=("Ending",)),
)


def test_split_to_directory_writes_composed_groups(
    tmp_path: Path, sample_story_path: Path, sample_story_text: str
) -> None:
    """Directory export should write one composed file per group and count requests."""

    out_dir = tmp_path / "out" / "nested"
    stream = io.StringIO()
    pipeline = SplitPipeline(run_logger=RunLogger(sink=stream, level="DEBUG"))

    result = pipeline.split_to_directory(
        SplitPlan(source_path=sample_story_path, output_dir=out_dir, groups=_GROUPS)
    )

    passages = TweeParser().parse(sample_story_text).passages
    assert result == SplitResult(files_written=3, total_passages=6)
    for group in _GROUPS:
        written = (out_dir / group.filename).read_bytes().decode("utf-8")
        assert written == compose_group(group.passage_names, passages)
    assert (out_dir / "middle.twee").read_text(encoding="utf-8") == (
        ":: Cave [cave dark]\nIt is very dark."
    )

    log_lines = stream.getvalue().splitlines()
    assert "[phase] level=INFO stage=read event=start" in log_lines
    assert "[phase] level=INFO stage=write event=complete" in log_lines
    assert "[phase] level=DEBUG stage=compose event=skipped count=1 file=middle.twee" in log_lines


def test_split_to_directory_keeps_earlier_files_when_a_later_write_fails(
    tmp_path: Path, sample_story_path: Path
) -> None:
    """A failing group should stop the export without removing earlier files."""

    out_dir = tmp_path / "out"
    groups = (
        SplitGroup(filename="first.twee", passage_names=("Start",)),
        SplitGroup(filename="missing-dir/second.twee", passage_names=("Cave",)),
        SplitGroup(filename="third.twee", passage_names=("Ending",)),
    )

    with pytest.raises(PipelineStageError) as exc_info:
        SplitPipeline().split_to_directory(
            SplitPlan(source_path=sample_story_path, output_dir=out_dir, groups=groups)
        )

    assert exc_info.value.stage == "write"
    assert "missing-dir/second.twee" in exc_info.value.detail
    assert (out_dir / "first.twee").exists()
    assert not (out_dir / "third.twee").exists()


def test_split_to_directory_with_empty_group_writes_empty_file(
    tmp_path: Path, sample_story_path: Path
) -> None:
    """Groups that resolve no passages should still produce an empty file."""

    out_dir = tmp_path / "out"

    result = SplitPipeline().split_to_directory(
        SplitPlan(
            source_path=sample_story_path,
            output_dir=out_dir,
            groups=(SplitGroup(filename="empty.twee", passage_names=("Nowhere",)),),
        )
    )

    assert result == SplitResult(files_written=1, total_passages=1)
    assert (out_dir / "empty.twee").read_bytes() == b""


def test_split_to_archive_writes_one_deflated_entry_per_group(
    tmp_path: Path, sample_story_path: Path, sample_story_text: str
) -> None:
    """Archive export should store composed groups as deflated entries in order."""

    archive_path = tmp_path / "export.zip"

    result = SplitPipeline().split_to_archive(
        ArchivePlan(source_path=sample_story_path, archive_path=archive_path, groups=_GROUPS)
    )

    passages = TweeParser().parse(sample_story_text).passages
    assert result == SplitResult(files_written=3, total_passages=6)
    with zipfile.ZipFile(archive_path) as archive:
        assert archive.namelist() == ["opening.twee", "middle.twee", "ending.twee"]
        for info in archive.infolist():
            assert info.compress_type == zipfile.ZIP_DEFLATED
        for group in _GROUPS:
            assert archive.read(group.filename).decode("utf-8") == compose_group(
                group.passage_names, passages
            )


def test_split_to_archive_reports_unwritable_location(
    tmp_path: Path, sample_story_path: Path
) -> None:
    """Archives in missing directories should fail at the archive stage."""

    with pytest.raises(PipelineStageError) as exc_info:
        SplitPipeline().split_to_archive(
            ArchivePlan(
                source_path=sample_story_path,
                archive_path=tmp_path / "no-such-dir" / "export.zip",
                groups=_GROUPS,
            )
        )

    assert exc_info.value.stage == "archive"
    assert "Failed to create archive" in exc_info.value.detail


def test_load_failures_map_to_read_and_parse_stages(tmp_path: Path) -> None:
    """Unreadable and malformed stories should fail before any output is created."""

    broken = tmp_path / "broken.twee"
    broken.write_text(":: Open [tag\nbody", encoding="utf-8")
    latin = tmp_path / "latin.twee"
    latin.write_bytes(":: Caf\xe9\n".encode("latin-1"))
    pipeline = SplitPipeline()

    with pytest.raises(PipelineStageError) as parse_error:
        pipeline.split_to_directory(
            SplitPlan(source_path=broken, output_dir=tmp_path / "out", groups=_GROUPS)
        )
    with pytest.raises(PipelineStageError) as decode_error:
        pipeline.list_passages(latin)

    assert parse_error.value.stage == "parse"
    assert parse_error.value.detail.startswith("line 1: unterminated tag block")
    assert decode_error.value.stage == "read"
    assert "not valid UTF-8" in decode_error.value.detail
    assert not (tmp_path / "out").exists()


def test_load_story_exposes_metadata_and_preview(sample_story_path: Path) -> None:
    """Loaded stories should carry StoryData metadata and render previews."""

    pipeline = SplitPipeline()

    story = pipeline.load_story(sample_story_path)

    assert story.metadata.title == "The Cave"
    assert story.metadata.start == "Start"
    assert pipeline.preview_passage(sample_story_path, "Ending") == ":: Ending\nThe end.\n"
    with pytest.raises(PipelineStageError, match="Passage 'Nowhere' not found"):
        pipeline.preview_passage(sample_story_path, "Nowhere")


class _FixedParser:
    """Parser double that returns a hand-built passage map or raises."""

    def __init__(
        self,
        passages: dict[str, Passage] | None = None,
        error: TweeParseError | None = None,
    ) -> None:
        """Store the canned passages or error and record parsed texts."""

        self._passages = passages or {}
        self._error = error
        self.seen: list[str] = []

    def parse(self, text: str) -> ParsedStory:
        """Return the canned story, ignoring the document grammar."""

        self.seen.append(text)
        if self._error is not None:
            raise self._error
        return ParsedStory(passages=dict(self._passages))


def test_split_to_directory_uses_injected_parser(tmp_path: Path) -> None:
    """Exports should compose whatever passage map the injected parser returns."""

    source = tmp_path / "story.txt"
    source.write_text("not a twee document", encoding="utf-8")
    parser = _FixedParser(
        passages={
            "A": Passage(name="A", content="ay"),
            "B": Passage(name="B", tags="x", content="bee\n", size="50,50"),
        }
    )

    result = SplitPipeline(parser=parser).split_to_directory(
        SplitPlan(
            source_path=source,
            output_dir=tmp_path / "out",
            groups=(SplitGroup(filename="out.twee", passage_names=("B", "Z", "A")),),
        )
    )

    assert parser.seen == ["not a twee document"]
    assert result == SplitResult(files_written=1, total_passages=3)
    assert (tmp_path / "out" / "out.twee").read_bytes() == (
        b':: B [x] {"position":"0,0","size":"50,50"}\nbee\n\n\n:: A\nay'
    )


def test_injected_parser_error_is_forwarded_verbatim(tmp_path: Path) -> None:
    """A parser error should become the `parse` stage detail unchanged."""

    source = tmp_path / "story.txt"
    source.write_text("anything", encoding="utf-8")
    pipeline = SplitPipeline(parser=_FixedParser(error=TweeParseError("bad token", line=4)))

    with pytest.raises(PipelineStageError) as exc_info:
        pipeline.split_to_archive(
            ArchivePlan(source_path=source, archive_path=tmp_path / "x.zip", groups=_GROUPS)
        )

    assert exc_info.value.stage == "parse"
    assert exc_info.value.detail == "line 4: bad token"
    assert isinstance(exc_info.value.__cause__, TweeParseError)
    assert not (tmp_path / "x.zip").exists()


def test_split_to_archive_reports_entry_failure_not_finalize_failure(
    tmp_path: Path, sample_story_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """A failed entry write should be the reported error and finalize should not run."""

    original_write_entry = ArchivePackager.write_entry

    def _failing_write_entry(self: ArchivePackager, name: str, content: str) -> None:
        """Fail on the second group and delegate otherwise."""

        if name == "middle.twee":
            raise OSError("disk full")
        original_write_entry(self, name, content)

    def _failing_finalize(self: ArchivePackager) -> Path:
        """Fail loudly if the error path tries to finalize."""

        raise OSError("finalize called")

    monkeypatch.setattr(ArchivePackager, "write_entry", _failing_write_entry)
    monkeypatch.setattr(ArchivePackager, "finalize", _failing_finalize)
    archive_path = tmp_path / "export.zip"

    with pytest.raises(PipelineStageError) as exc_info:
        SplitPipeline().split_to_archive(
            ArchivePlan(source_path=sample_story_path, archive_path=archive_path, groups=_GROUPS)
        )

    assert exc_info.value.stage == "archive"
    assert exc_info.value.detail == "Failed to write archive entry `middle.twee`: disk full"
    with zipfile.ZipFile(archive_path) as archive:
        assert archive.namelist() == ["opening.twee"]
