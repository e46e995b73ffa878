"""Shared parsing helpers for configuration values and CLI group specs."""

from __future__ import annotations

from .models.datatypes import SplitGroup

_FLAG_VALUES = {
    "1": True,
    "true": True,
    "yes": True,
    "on": True,
    "0": False,
    "false": False,
    "no": False,
    "off": False,
}
_GROUP_SPEC_SEPARATOR = "="
_NAME_LIST_SEPARATOR = ","


def clean_text(value: object) -> str | None:
    """Return `value` as trimmed text, or `None` for missing and blank values.

    Used for environment variables, YAML scalars, plan payload fields, and
    prompt answers, where whitespace-only input means "not given".
    """

    text = "" if value is None else str(value).strip()
    return text or None


def parse_flag(value: object) -> bool | None:
    """Read an on/off setting; unknown tokens give `None` so callers can report them."""

    if isinstance(value, bool):
        return value
    text = clean_text(value)
    return None if text is None else _FLAG_VALUES.get(text.lower())


def split_name_list(value: str) -> list[str]:
    """Split a comma-separated passage name list, dropping blank items.

    Passage names keep inner spaces: `"Dark Forest, Cave"` gives
    `["Dark Forest", "Cave"]`.
    """

    return [
        name
        for name in (item.strip() for item in value.split(_NAME_LIST_SEPARATOR))
        if name
    ]


def parse_group_spec(spec: str) -> SplitGroup:
    """Parse a `FILENAME=Name1,Name2` group spec.

    Raises:
        ValueError: If the filename part is missing or blank.
    """

    filename_part, separator, names_part = spec.partition(_GROUP_SPEC_SEPARATOR)
    filename = clean_text(filename_part)
    if not separator or filename is None:
        raise ValueError(
            f"Invalid group spec `{spec}`; expected `FILENAME=Passage One,Passage Two`."
        )
    return SplitGroup(filename=filename, passage_names=tuple(split_name_list(names_part)))
