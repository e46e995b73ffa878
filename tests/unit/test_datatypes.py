"""Unit tests for payload conversion of plans, results, and saved state."""

from __future__ import annotations

from pathlib import Path

import pytest

from tweesplit.models.datatypes import (
    AppState,
    ArchivePlan,
    Passage,
    PassageInfo,
    SavedGroup,
    SplitGroup,
    SplitPlan,
    SplitResult,
)


def test_split_plan_from_payload_reads_camel_case_fields() -> None:
    """Plan payloads should map `sourcePath`, `outputDir`, and group names."""

    plan = SplitPlan.from_payload(
        {
            "sourcePath": "story.twee",
            "outputDir": "out",
            "groups": [{"filename": "a.twee", "passageNames": ["Start", "Cave"]}],
        }
    )

    assert plan.source_path == Path("story.twee")
    assert plan.output_dir == Path("out")
    assert plan.groups == (SplitGroup(filename="a.twee", passage_names=("Start", "Cave")),)


def test_archive_plan_from_payload_reads_zip_path() -> None:
    """Archive payloads should use `zipPath` as the target."""

    plan = ArchivePlan.from_payload({"sourcePath": "s.twee", "zipPath": "x.zip", "groups": []})

    assert plan.archive_path == Path("x.zip")
    assert plan.groups == ()


@pytest.mark.parametrize(
    "payload",
    [
        {"outputDir": "out", "groups": []},
        {"sourcePath": "s.twee", "outputDir": "out"},
        {"sourcePath": "s.twee", "outputDir": "out", "groups": ["a.twee"]},
        {"sourcePath": "s.twee", "outputDir": "out", "groups": [{"filename": ""}]},
        {
            "sourcePath": "s.twee",
            "outputDir": "out",
            "groups": [{"filename": "a.twee", "passageNames": [1]}],
        },
    ],
)
def test_split_plan_from_payload_rejects_malformed_payloads(payload: dict) -> None:
    """Missing or mistyped plan fields should raise `ValueError`."""

    with pytest.raises(ValueError):
        SplitPlan.from_payload(payload)


def test_split_result_and_passage_info_payloads() -> None:
    """Result and listing rows should expose host-facing camelCase payloads."""

    info = PassageInfo.from_passage(Passage(name="A", tags="t", content="x"))

    assert SplitResult(files_written=2, total_passages=5).to_payload() == {
        "filesWritten": 2,
        "totalPassages": 5,
    }
    assert info.to_payload() == {
        "name": "A",
        "tags": "t",
        "content": "x",
        "line": 0,
        "position": None,
    }


def test_app_state_payload_roundtrip_and_validation() -> None:
    """State payloads should round-trip and reject wrong shapes."""

    state = AppState(
        file_path="story.twee",
        groups=(SavedGroup(id="1", filename="a.twee", passage_names=("Start",)),),
    )

    assert AppState.from_payload(state.to_payload()) == state
    assert AppState.from_payload({"groups": []}) == AppState()

    with pytest.raises(ValueError, match="missing required key `groups`"):
        AppState.from_payload({"filePath": None})
    with pytest.raises(ValueError, match="`filePath` must be a string or null"):
        AppState.from_payload({"filePath": 3, "groups": []})
    with pytest.raises(ValueError, match="State must be a JSON object"):
        AppState.from_payload([])
