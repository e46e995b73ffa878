"""Twee text serialization for passages and passage groups.

Responsibilities:
- Render one `Passage` back into its Twee 3 header line and verbatim body.
- Compose an ordered group of passages into one Twee document body.
"""

from __future__ import annotations

from typing import Iterable, Mapping

from ..models.datatypes import Passage

HEADER_SIGIL = "::"
PASSAGE_SEPARATOR = "\n\n"
DEFAULT_POSITION = "0,0"
DEFAULT_SIZE = "100,100"


def serialize_passage(passage: Passage) -> str:
    """Render one passage as Twee text.

    The name and content are emitted verbatim. Names containing `[`, `{`, or
    a leading backslash are not escaped and may not parse back identically.
    """

    header = f"{HEADER_SIGIL} {passage.name}"

    if passage.tags:
        header += f" [{passage.tags}]"

    if passage.position is not None or passage.size is not None:
        position = passage.position if passage.position is not None else DEFAULT_POSITION
        size = passage.size if passage.size is not None else DEFAULT_SIZE
        header += f' {{"position":"{position}","size":"{size}"}}'

    return f"{header}\n{passage.content}"


def compose_group(names: Iterable[str], passages: Mapping[str, Passage]) -> str:
    """Serialize the named passages in caller order, skipping unknown names."""

    parts = [
        serialize_passage(passages[name])
        for name in names
        if name in passages
    ]
    return PASSAGE_SEPARATOR.join(parts)
