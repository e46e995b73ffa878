"""Group-definition editing helpers.

Responsibilities:
- Create, rename, and remove saved group definitions.
- Move passages between groups with exclusive membership.
- Derive an initial grouping from passage tags.

All helpers return new lists and never mutate their input.
"""

from __future__ import annotations

from collections import Counter
from typing import Iterable, Sequence

from .models.datatypes import Passage, PassageInfo, SavedGroup, SplitGroup
from .twee.parser import STORY_DATA_PASSAGE, STORY_TITLE_PASSAGE

UNTAGGED_GROUP = "untagged"
GROUP_FILE_SUFFIX = ".twee"


def next_group_id(groups: Sequence[SavedGroup]) -> str:
    """Return the next free numeric group identifier."""

    numeric_ids = [int(group.id) for group in groups if group.id.isdigit()]
    return str(max(numeric_ids, default=0) + 1)


def add_group(groups: Sequence[SavedGroup], filename: str | None = None) -> list[SavedGroup]:
    """Append an empty group, named `group<id>.twee` unless a filename is given."""

    group_id = next_group_id(groups)
    resolved_filename = filename or f"group{group_id}{GROUP_FILE_SUFFIX}"
    return [*groups, SavedGroup(id=group_id, filename=resolved_filename)]


def remove_group(groups: Sequence[SavedGroup], group_id: str) -> list[SavedGroup]:
    """Drop the group with `group_id`."""

    return [group for group in groups if group.id != group_id]


def rename_group(
    groups: Sequence[SavedGroup], group_id: str, filename: str
) -> list[SavedGroup]:
    """Change the output filename of one group."""

    return [
        SavedGroup(id=group.id, filename=filename, passage_names=group.passage_names)
        if group.id == group_id
        else group
        for group in groups
    ]


def assign_passages(
    groups: Sequence[SavedGroup], group_id: str, names: Iterable[str]
) -> list[SavedGroup]:
    """Move `names` into one group, removing them from every other group first."""

    moved = list(names)
    moved_set = set(moved)
    updated: list[SavedGroup] = []
    for group in groups:
        kept = tuple(name for name in group.passage_names if name not in moved_set)
        if group.id == group_id:
            kept = (*kept, *moved)
        updated.append(SavedGroup(id=group.id, filename=group.filename, passage_names=kept))
    return updated


def unassign(groups: Sequence[SavedGroup], group_id: str, name: str) -> list[SavedGroup]:
    """Remove one passage name from one group."""

    return [
        SavedGroup(
            id=group.id,
            filename=group.filename,
            passage_names=tuple(item for item in group.passage_names if item != name),
        )
        if group.id == group_id
        else group
        for group in groups
    ]


def group_by_tag(
    passages: Iterable[Passage | PassageInfo], existing: Sequence[SavedGroup] = ()
) -> list[SavedGroup]:
    """Group passages by their first tag, in first-appearance order.

    `StoryTitle` and `StoryData` are left out. Untagged passages land in
    `untagged.twee`. New ids continue after any ids in `existing`.
    """

    by_tag: dict[str, list[str]] = {}
    for passage in passages:
        if passage.name in (STORY_DATA_PASSAGE, STORY_TITLE_PASSAGE):
            continue
        tags = passage.tags.split() if passage.tags else []
        tag = tags[0] if tags else UNTAGGED_GROUP
        by_tag.setdefault(tag, []).append(passage.name)

    first_id = int(next_group_id(existing))
    return [
        SavedGroup(
            id=str(first_id + offset),
            filename=f"{tag}{GROUP_FILE_SUFFIX}",
            passage_names=tuple(names),
        )
        for offset, (tag, names) in enumerate(by_tag.items())
    ]


def find_duplicate_filenames(groups: Iterable[SavedGroup | SplitGroup]) -> list[str]:
    """Return filenames used by more than one group, sorted."""

    counts = Counter(group.filename for group in groups)
    return sorted(filename for filename, count in counts.items() if count > 1)


def find_group(groups: Sequence[SavedGroup], group_id: str) -> SavedGroup | None:
    """Return the group with `group_id`, if present."""

    for group in groups:
        if group.id == group_id:
            return group
    return None
