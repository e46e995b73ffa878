"""Shared pytest fixtures for the full tweesplit test suite."""

from __future__ import annotations

from pathlib import Path

import pytest

SAMPLE_STORY = """\
:: StoryTitle
The Cave

:: StoryData
{"ifid":"D674C58C-DEFA-4F70-B7A2-27742230C0FC","format":"Harlowe","format-version":"3.3.8","start":"Start","tag-colors":{"intro":"green"},"zoom":1}

:: Start [intro] {"position":"100,200","size":"100,100"}
You wake up in a dark forest.
[[Go north->Cave]]

:: Cave [cave dark]
It is very dark.

:: Ending
The end.
"""


@pytest.fixture
def sample_story_text() -> str:
    """Provide a small Twee 3 story with metadata, tags, and canvas data."""

    return SAMPLE_STORY


@pytest.fixture
def sample_story_path(tmp_path: Path) -> Path:
    """Write the sample story to a temporary `.twee` file."""

    path = tmp_path / "story.twee"
    path.write_text(SAMPLE_STORY, encoding="utf-8")
    return path
