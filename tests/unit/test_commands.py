"""Unit tests for the host-facing command boundary."""

from __future__ import annotations

from pathlib import Path

import pytest

from tweesplit.commands import CommandError, TweesplitCommands
from tweesplit.config import TweesplitConfig
from tweesplit.errors import PipelineStageError, PromptUnavailableError, StateLoadError
from tweesplit.models.datatypes import AppState, SavedGroup, SplitResult
from tweesplit.prompts import PathPrompter


def _commands(tmp_path: Path, interactive: bool = False) -> TweesplitCommands:
    """Create commands with a temporary state directory and a scripted prompter."""

    return TweesplitCommands(
        config=TweesplitConfig(state_dir=tmp_path / "state"),
        prompter=PathPrompter(lambda *args, **kwargs: "picked.twee", interactive=interactive),
    )


def test_open_story_lists_passages_with_lines(tmp_path: Path, sample_story_path: Path) -> None:
    """Opening a story should list every passage with its header line."""

    rows = _commands(tmp_path).open_story(str(sample_story_path))

    assert [row.name for row in rows] == ["StoryTitle", "StoryData", "Start", "Cave", "Ending"]
    assert [row.line for row in rows] == [1, 4, 7, 11, 14]
    assert rows[2].position == "100,200"


def test_open_story_wraps_missing_file_in_command_error(tmp_path: Path) -> None:
    """Missing stories should surface one message with the stage error chained."""

    with pytest.raises(CommandError, match="Story file not found") as exc_info:
        _commands(tmp_path).open_story(tmp_path / "missing.twee")

    assert isinstance(exc_info.value.__cause__, PipelineStageError)
    assert exc_info.value.__cause__.stage == "read"


def test_preview_passage_reports_unknown_name(tmp_path: Path, sample_story_path: Path) -> None:
    """Previewing an unknown passage should fail with a not-found message."""

    commands = _commands(tmp_path)

    assert commands.preview_passage(sample_story_path, "Cave") == (
        ":: Cave [cave dark]\nIt is very dark."
    )
    with pytest.raises(CommandError) as exc_info:
        commands.preview_passage(sample_story_path, "Nowhere")
    assert exc_info.value.message == "Passage 'Nowhere' not found"


def test_execute_split_to_directory_accepts_payload_mapping(
    tmp_path: Path, sample_story_path: Path
) -> None:
    """Camel-case payloads should be accepted and produce a split result."""

    result = _commands(tmp_path).execute_split_to_directory(
        {
            "sourcePath": str(sample_story_path),
            "outputDir": str(tmp_path / "out"),
            "groups": [{"filename": "a.twee", "passageNames": ["Start", "Gone"]}],
        }
    )

    assert result == SplitResult(files_written=1, total_passages=2)
    assert (tmp_path / "out" / "a.twee").exists()


def test_execute_split_rejects_invalid_payload(tmp_path: Path) -> None:
    """Malformed payloads should fail before touching the filesystem."""

    commands = _commands(tmp_path)

    with pytest.raises(CommandError, match="Invalid plan payload"):
        commands.execute_split_to_archive({"sourcePath": "s.twee", "groups": []})
    with pytest.raises(CommandError, match="Expected a SplitPlan"):
        commands.execute_split_to_directory(["not", "a", "plan"])  # type: ignore[arg-type]


def test_pickers_map_missing_terminal_to_command_error(tmp_path: Path) -> None:
    """Prompt failures should be converted; interactive picks return the answer."""

    with pytest.raises(CommandError) as exc_info:
        _commands(tmp_path).pick_file()

    assert isinstance(exc_info.value.__cause__, PromptUnavailableError)
    assert _commands(tmp_path, interactive=True).pick_file() == "picked.twee"


def test_state_commands_roundtrip_and_report_corrupt_state(tmp_path: Path) -> None:
    """State commands should save, load, and convert corrupt files into errors."""

    commands = _commands(tmp_path)

    assert commands.load_state() is None
    commands.save_state(
        {
            "filePath": "story.twee",
            "groups": [{"id": "1", "filename": "a.twee", "passageNames": ["Start"]}],
        }
    )
    assert commands.load_state() == AppState(
        file_path="story.twee",
        groups=(SavedGroup(id="1", filename="a.twee", passage_names=("Start",)),),
    )

    commands.state_store.path.write_text("[]", encoding="utf-8")
    with pytest.raises(CommandError) as exc_info:
        commands.load_state()
    assert isinstance(exc_info.value.__cause__, StateLoadError)

    with pytest.raises(CommandError, match="Invalid state payload"):
        commands.save_state({"filePath": "story.twee"})


def test_load_state_wraps_undecodable_state_file(tmp_path: Path) -> None:
    """Non-UTF-8 state bytes should surface as one `CommandError` message."""

    commands = _commands(tmp_path)
    commands.state_store.root.mkdir(parents=True)
    commands.state_store.path.write_bytes(b"\xff\x00garbage")

    with pytest.raises(CommandError, match="not valid UTF-8") as exc_info:
        commands.load_state()

    assert isinstance(exc_info.value.__cause__, StateLoadError)
    assert isinstance(exc_info.value.__cause__.__cause__, UnicodeDecodeError)
