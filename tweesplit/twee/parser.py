"""Twee 3 story parsing.

Responsibilities:
- Define the `StoryParser` capability consumed by the export pipeline.
- Convert Twee 3 document text into an ordered passage mapping and story metadata.

Key types:
- `StoryParser`: protocol for story text parsers.
- `TweeParser`: line-oriented Twee 3 implementation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import json
from typing import Protocol

from ..errors import TweeParseError
from ..models.datatypes import ParsedStory, Passage, StoryMetadata

STORY_TITLE_PASSAGE = "StoryTitle"
STORY_DATA_PASSAGE = "StoryData"


class StoryParser(Protocol):
    """Protocol for converting raw story text into passages."""

    def parse(self, text: str) -> ParsedStory:
        """Parse document text, raising `TweeParseError` on malformed input."""


@dataclass(slots=True)
class _PassageDraft:
    """Mutable passage record collected while scanning body lines."""

    name: str
    line: int
    tags: str | None = None
    position: str | None = None
    size: str | None = None
    body: list[str] = field(default_factory=list)

    def build(self, before_header: bool = False) -> Passage:
        """Finish the draft.

        A passage followed by another header loses one trailing empty line,
        the separator `compose_group` writes between passages.
        """

        body = list(self.body)
        if before_header and body and body[-1] == "":
            body.pop()
        return Passage(
            name=self.name,
            tags=self.tags,
            content="\n".join(body),
            source_line=self.line,
            position=self.position,
            size=self.size,
        )


class TweeParser:
    """Parse Twee 3 documents.

    Header grammar: `:: Name [tag1 tag2] {"position":"x,y","size":"w,h"}`.
    Text before the first header is ignored. Bodies are kept verbatim except
    for the one blank line separating a passage from the next header. A later
    passage with an existing name replaces the earlier one but keeps its
    position in the mapping.
    """

    def parse(self, text: str) -> ParsedStory:
        """Parse Twee text into a `ParsedStory`."""

        normalized = text.lstrip("\ufeff").replace("\r\n", "\n").replace("\r", "\n")
        passages: dict[str, Passage] = {}
        draft: _PassageDraft | None = None

        for line_number, line in enumerate(normalized.split("\n"), start=1):
            if line.startswith("::"):
                if draft is not None:
                    passages[draft.name] = draft.build(before_header=True)
                draft = self._parse_header(line, line_number)
            elif draft is not None:
                draft.body.append(line)

        if draft is not None:
            passages[draft.name] = draft.build()

        return ParsedStory(passages=passages, metadata=self._story_metadata(passages))

    def _parse_header(self, line: str, line_number: int) -> _PassageDraft:
        """Split one header line into name, tags, and canvas metadata."""

        rest = line[2:]
        name_chars: list[str] = []
        index = 0
        while index < len(rest):
            char = rest[index]
            if char == "\\" and index + 1 < len(rest):
                name_chars.append(rest[index + 1])
                index += 2
                continue
            if char in "[{":
                break
            name_chars.append(char)
            index += 1

        name = "".join(name_chars).strip()
        if not name:
            raise TweeParseError("passage header has an empty name", line_number)

        draft = _PassageDraft(name=name, line=line_number)
        remainder = rest[index:].strip()

        if remainder.startswith("["):
            close = _find_unescaped(remainder, "]", start=1)
            if close < 0:
                raise TweeParseError(f"unterminated tag block in passage `{name}`", line_number)
            draft.tags = " ".join(_unescape(remainder[1:close]).split())
            remainder = remainder[close + 1 :].strip()

        if remainder.startswith("{"):
            draft.position, draft.size = self._parse_metadata(remainder, name, line_number)
            remainder = ""

        if remainder:
            raise TweeParseError(
                f"unexpected text after header of passage `{name}`: {remainder!r}",
                line_number,
            )
        return draft

    def _parse_metadata(
        self, block: str, name: str, line_number: int
    ) -> tuple[str | None, str | None]:
        """Read `position` and `size` strings from a header metadata object."""

        try:
            payload = json.loads(block)
        except json.JSONDecodeError as exc:
            raise TweeParseError(
                f"invalid metadata block in passage `{name}`: {exc.msg}", line_number
            ) from exc
        if not isinstance(payload, dict):
            raise TweeParseError(
                f"metadata block in passage `{name}` must be a JSON object", line_number
            )

        position = payload.get("position")
        size = payload.get("size")
        return (
            position if isinstance(position, str) else None,
            size if isinstance(size, str) else None,
        )

    def _story_metadata(self, passages: dict[str, Passage]) -> StoryMetadata:
        """Collect document metadata from the special title and data passages."""

        title = None
        title_passage = passages.get(STORY_TITLE_PASSAGE)
        if title_passage is not None:
            title = title_passage.content.strip() or None

        data_passage = passages.get(STORY_DATA_PASSAGE)
        if data_passage is None or not data_passage.content.strip():
            return StoryMetadata(title=title)

        try:
            payload = json.loads(data_passage.content)
        except json.JSONDecodeError as exc:
            raise TweeParseError(
                f"invalid StoryData JSON: {exc.msg}", data_passage.source_line
            ) from exc
        if not isinstance(payload, dict):
            raise TweeParseError("StoryData must be a JSON object", data_passage.source_line)

        tag_colors = payload.get("tag-colors")
        zoom = payload.get("zoom")
        if isinstance(zoom, bool) or not isinstance(zoom, (int, float)):
            zoom = None
        return StoryMetadata(
            title=title,
            ifid=_optional_str(payload.get("ifid")),
            format=_optional_str(payload.get("format")),
            format_version=_optional_str(payload.get("format-version")),
            start=_optional_str(payload.get("start")),
            tag_colors=(
                {str(key): str(value) for key, value in tag_colors.items()}
                if isinstance(tag_colors, dict)
                else {}
            ),
            zoom=float(zoom) if zoom is not None else None,
        )


def _find_unescaped(text: str, target: str, start: int = 0) -> int:
    """Return the index of the first unescaped `target`, or `-1`."""

    index = start
    while index < len(text):
        char = text[index]
        if char == "\\":
            index += 2
            continue
        if char == target:
            return index
        index += 1
    return -1


def _unescape(text: str) -> str:
    """Remove Twee backslash escapes."""

    chars: list[str] = []
    index = 0
    while index < len(text):
        if text[index] == "\\" and index + 1 < len(text):
            chars.append(text[index + 1])
            index += 2
            continue
        chars.append(text[index])
        index += 1
    return "".join(chars)


def _optional_str(value: object) -> str | None:
    """Return `value` when it is a string, otherwise `None`."""

    return value if isinstance(value, str) else None
