"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics,
passage listings, group listings, and export summaries.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import NoReturn, Sequence

import typer

from .commands import CommandError
from .errors import PipelineStageError
from .models.datatypes import PassageInfo, SavedGroup, SplitResult


def _stage_error_of(exc: Exception) -> PipelineStageError | None:
    """Return the stage error behind `exc`, unwrapping command errors."""

    if isinstance(exc, PipelineStageError):
        return exc
    if isinstance(exc, CommandError) and isinstance(exc.__cause__, PipelineStageError):
        return exc.__cause__
    return None


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    stage_error = _stage_error_of(exc)
    if stage_error is not None:
        typer.secho(
            f"{command_name} failed at stage `{stage_error.stage}`: {stage_error.detail}",
            fg=typer.colors.RED,
            err=True,
        )
        if stage_error.hint:
            typer.secho(f"Hint: {stage_error.hint}", fg=typer.colors.YELLOW, err=True)
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


def echo_no_selection(what: str) -> None:
    """Report a cancelled prompt."""

    typer.echo(f"No {what} selected; nothing to do.")


def echo_passage_list(passages: Sequence[PassageInfo], as_json: bool = False) -> None:
    """Print passages in document order, as aligned rows or JSON."""

    if as_json:
        typer.echo(json.dumps([row.to_payload() for row in passages], ensure_ascii=False, indent=2))
        return

    width = max((len(str(row.line)) for row in passages), default=1)
    for row in passages:
        tags = f" [{row.tags}]" if row.tags else ""
        typer.echo(f"{row.line:>{width}}  {row.name}{tags}")
    typer.echo(f"{len(passages)} passage(s)")


def echo_group_list(groups: Sequence[SavedGroup]) -> None:
    """Print saved groups with their passage names."""

    if not groups:
        typer.echo("No saved groups.")
        return
    for group in groups:
        names = ", ".join(group.passage_names) if group.passage_names else "(empty)"
        typer.echo(f"{group.id}. {group.filename}: {names}")


def echo_split_result(result: SplitResult, target: Path) -> None:
    """Print export counts and destination."""

    typer.echo(f"Done! {result.files_written} files, {result.total_passages} passages.")
    typer.echo(f"Output: {target}")
