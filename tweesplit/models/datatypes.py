"""Core datatypes shared across tweesplit modules.

Responsibilities:
- Represent immutable passage records produced by story parsing.
- Describe split plans, results, and persisted application state.
- Convert records to and from the camelCase payloads used by hosts.

Key types:
- `Passage`, `StoryMetadata`, `ParsedStory`, `PassageInfo`,
  `SplitGroup`, `SplitPlan`, `ArchivePlan`, `SplitResult`,
  `SavedGroup`, and `AppState`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping


@dataclass(frozen=True, slots=True)
class Passage:
    """One named unit of story text.

    Attributes:
        name: Passage name, unique within a story.
        tags: Whitespace-separated tag labels; `""` and `None` both render no tag block.
        content: Raw body text, kept verbatim.
        source_line: Optional 1-based line of the passage header in its source document.
        position: Optional `"x,y"` canvas coordinates.
        size: Optional `"w,h"` canvas box dimensions.
    """

    name: str
    tags: str | None = None
    content: str = ""
    source_line: int | None = None
    position: str | None = None
    size: str | None = None


@dataclass(frozen=True, slots=True)
class StoryMetadata:
    """Document-level metadata taken from `StoryTitle` and `StoryData` passages.

    Attributes:
        title: Story title, when a `StoryTitle` passage exists.
        ifid: Interactive fiction identifier.
        format: Story format name.
        format_version: Story format version.
        start: Name of the starting passage.
        tag_colors: Tag-to-color mapping used by authoring tools.
        zoom: Authoring tool zoom level.
    """

    title: str | None = None
    ifid: str | None = None
    format: str | None = None
    format_version: str | None = None
    start: str | None = None
    tag_colors: Mapping[str, str] = field(default_factory=dict)
    zoom: float | None = None


@dataclass(frozen=True, slots=True)
class ParsedStory:
    """Parser output: ordered passage mapping plus document metadata."""

    passages: dict[str, Passage]
    metadata: StoryMetadata = field(default_factory=StoryMetadata)


@dataclass(frozen=True, slots=True)
class PassageInfo:
    """Listing row describing one parsed passage for preview hosts."""

    name: str
    tags: str | None
    content: str
    line: int
    position: str | None

    @classmethod
    def from_passage(cls, passage: Passage) -> PassageInfo:
        """Build a listing row, using line `0` when the source line is unknown."""

        return cls(
            name=passage.name,
            tags=passage.tags,
            content=passage.content,
            line=passage.source_line or 0,
            position=passage.position,
        )

    def to_payload(self) -> dict[str, object]:
        """Return the host payload form of this row."""

        return {
            "name": self.name,
            "tags": self.tags,
            "content": self.content,
            "line": self.line,
            "position": self.position,
        }


@dataclass(frozen=True, slots=True)
class SplitGroup:
    """A named ordered subset of passage names destined for one output file.

    Attributes:
        filename: Output file name or archive entry name.
        passage_names: Ordered names to include; duplicates and unknown names allowed.
    """

    filename: str
    passage_names: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> SplitGroup:
        """Build a group from a `{filename, passageNames}` payload."""

        if not isinstance(payload, Mapping):
            raise ValueError("Group must be an object.")
        filename = payload.get("filename")
        if not isinstance(filename, str) or not filename:
            raise ValueError("Group `filename` must be a non-empty string.")
        names = _string_list(payload.get("passageNames", []), "passageNames")
        return cls(filename=filename, passage_names=tuple(names))


@dataclass(frozen=True, slots=True)
class SplitPlan:
    """Request to split one story into files under an output directory."""

    source_path: Path
    output_dir: Path
    groups: tuple[SplitGroup, ...]

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> SplitPlan:
        """Build a plan from a `{sourcePath, outputDir, groups}` payload."""

        return cls(
            source_path=Path(_required_string(payload, "sourcePath")),
            output_dir=Path(_required_string(payload, "outputDir")),
            groups=_groups_from_payload(payload),
        )


@dataclass(frozen=True, slots=True)
class ArchivePlan:
    """Request to split one story into entries of a single ZIP archive."""

    source_path: Path
    archive_path: Path
    groups: tuple[SplitGroup, ...]

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> ArchivePlan:
        """Build a plan from a `{sourcePath, zipPath, groups}` payload."""

        return cls(
            source_path=Path(_required_string(payload, "sourcePath")),
            archive_path=Path(_required_string(payload, "zipPath")),
            groups=_groups_from_payload(payload),
        )


@dataclass(frozen=True, slots=True)
class SplitResult:
    """Counts reported by a finished export.

    Attributes:
        files_written: Number of groups processed (files or archive entries).
        total_passages: Sum of requested passage names across groups.
    """

    files_written: int
    total_passages: int

    def to_payload(self) -> dict[str, int]:
        """Return the camelCase host payload."""

        return {"filesWritten": self.files_written, "totalPassages": self.total_passages}


@dataclass(frozen=True, slots=True)
class SavedGroup:
    """A persisted group definition."""

    id: str
    filename: str
    passage_names: tuple[str, ...] = field(default_factory=tuple)

    def to_split_group(self) -> SplitGroup:
        """Drop the identifier and return the export form of this group."""

        return SplitGroup(filename=self.filename, passage_names=self.passage_names)

    def to_payload(self) -> dict[str, object]:
        """Return the camelCase JSON form."""

        return {
            "id": self.id,
            "filename": self.filename,
            "passageNames": list(self.passage_names),
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> SavedGroup:
        """Build a saved group from its camelCase JSON form."""

        if not isinstance(payload, Mapping):
            raise ValueError("Saved group must be an object.")
        return cls(
            id=_required_string(payload, "id"),
            filename=_required_string(payload, "filename"),
            passage_names=tuple(_string_list(payload.get("passageNames"), "passageNames")),
        )


@dataclass(frozen=True, slots=True)
class AppState:
    """Last-opened story path and saved group definitions."""

    file_path: str | None = None
    groups: tuple[SavedGroup, ...] = field(default_factory=tuple)

    def to_payload(self) -> dict[str, object]:
        """Return the camelCase JSON form."""

        return {
            "filePath": self.file_path,
            "groups": [group.to_payload() for group in self.groups],
        }

    @classmethod
    def from_payload(cls, payload: object) -> AppState:
        """Build state from its JSON form, rejecting payloads of the wrong shape."""

        if not isinstance(payload, Mapping):
            raise ValueError("State must be a JSON object.")
        file_path = payload.get("filePath")
        if file_path is not None and not isinstance(file_path, str):
            raise ValueError("`filePath` must be a string or null.")
        if "groups" not in payload:
            raise ValueError("State is missing required key `groups`.")
        raw_groups = payload["groups"]
        if not isinstance(raw_groups, list):
            raise ValueError("`groups` must be a list.")
        return cls(
            file_path=file_path,
            groups=tuple(SavedGroup.from_payload(item) for item in raw_groups),
        )


def _required_string(payload: Mapping[str, Any], key: str) -> str:
    """Read a required string field from a payload."""

    value = payload.get(key)
    if not isinstance(value, str):
        raise ValueError(f"`{key}` must be a string.")
    return value


def _string_list(value: object, key: str) -> list[str]:
    """Validate that a payload field is a list of strings."""

    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValueError(f"`{key}` must be a list of strings.")
    return list(value)


def _groups_from_payload(payload: Mapping[str, Any]) -> tuple[SplitGroup, ...]:
    """Read the `groups` list of a plan payload."""

    raw_groups = payload.get("groups")
    if not isinstance(raw_groups, list):
        raise ValueError("`groups` must be a list.")
    return tuple(SplitGroup.from_payload(item) for item in raw_groups)
