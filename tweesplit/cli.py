"""Command-line interface for tweesplit.

Responsibilities:
- Expose user-facing commands for listing, previewing, and splitting stories.
- Resolve story paths, groups, and targets from arguments, plan files, saved
  state, or interactive prompts.
- Edit saved group definitions through the `groups` sub-command.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Callable, Sequence

import typer
import yaml

from .cli_rendering import (
    echo_group_list,
    echo_no_selection,
    echo_passage_list,
    echo_split_result,
    exit_with_command_error,
)
from .commands import CommandError, TweesplitCommands
from .config import ConfigLoader, TweesplitConfig
from .errors import PipelineStageError
from .groups import (
    add_group,
    assign_passages,
    find_duplicate_filenames,
    find_group,
    group_by_tag,
    remove_group,
    rename_group,
    unassign,
)
from .models.datatypes import AppState, ArchivePlan, SavedGroup, SplitGroup, SplitPlan
from .parsing import clean_text, parse_group_spec
from .pipeline import SplitPipeline
from .telemetry.logger import RunLogger

app = typer.Typer(
    name="tweesplit",
    no_args_is_help=True,
    help="Split Twee stories into per-group files or a ZIP archive.",
)
groups_app = typer.Typer(
    name="groups",
    no_args_is_help=True,
    help="Edit saved group definitions.",
)
app.add_typer(groups_app, name="groups")


@dataclass(slots=True)
class _CliSettings:
    """Global options shared by every command."""

    config_file: Path | None = None
    state_dir: Path | None = None
    verbose: bool = False


@dataclass(frozen=True, slots=True)
class _PlanFile:
    """Optional source, target, and groups read from a plan file."""

    source_path: str | None
    target: str | None
    groups: tuple[SplitGroup, ...]


@app.callback()
def main_callback(
    ctx: typer.Context,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="YAML config file (defaults to TWEESPLIT_* environment)."),
    ] = None,
    state_dir: Annotated[
        Path | None,
        typer.Option("--state-dir", help="Directory holding saved state (overrides config)."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Print stage logs to stderr."),
    ] = False,
) -> None:
    """Collect global options for sub-commands."""

    ctx.obj = _CliSettings(config_file=config_file, state_dir=state_dir, verbose=verbose)


def _load_config(settings: _CliSettings) -> TweesplitConfig:
    """Load YAML or environment config and apply global CLI overrides."""

    if settings.config_file is not None:
        try:
            config = ConfigLoader.from_yaml(settings.config_file)
        except FileNotFoundError as exc:
            raise PipelineStageError(
                stage="config",
                detail=f"Config file not found: `{settings.config_file}`.",
                hint="Provide an existing path via `--config <path.yaml>`.",
            ) from exc
        except ValueError as exc:
            raise PipelineStageError(
                stage="config",
                detail=f"Invalid config file `{settings.config_file}`: {exc}",
                hint="Fix config keys/values and rerun.",
            ) from exc
    else:
        try:
            config = ConfigLoader.from_env()
        except ValueError as exc:
            raise PipelineStageError(
                stage="config",
                detail=str(exc),
                hint="Fix `TWEESPLIT_*` environment variables and rerun.",
            ) from exc

    if settings.state_dir is not None:
        config.state_dir = settings.state_dir
    if settings.verbose:
        config.log_level = "DEBUG"
    return config


def _build_commands(ctx: typer.Context) -> TweesplitCommands:
    """Create the command facade for one CLI invocation."""

    settings = ctx.obj if isinstance(ctx.obj, _CliSettings) else _CliSettings()
    config = _load_config(settings)
    pipeline = SplitPipeline(run_logger=RunLogger(level=config.log_level))
    return TweesplitCommands(config=config, pipeline=pipeline)


def _load_plan_file(path: Path, target_key: str) -> _PlanFile:
    """Read a YAML/JSON plan with optional `sourcePath`, target, and `groups`."""

    try:
        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise PipelineStageError(
            stage="plan",
            detail=f"Plan file not found: `{path}`.",
            hint="Provide an existing path via `--plan <plan.yaml>`.",
        ) from exc
    except yaml.YAMLError as exc:
        raise PipelineStageError(stage="plan", detail=f"Invalid plan file `{path}`: {exc}") from exc

    if not isinstance(payload, Mapping):
        raise PipelineStageError(
            stage="plan", detail=f"Plan file `{path}` must contain a mapping/object."
        )

    raw_groups = payload.get("groups", [])
    try:
        if not isinstance(raw_groups, list):
            raise ValueError("`groups` must be a list.")
        groups = tuple(SplitGroup.from_payload(item) for item in raw_groups)
    except ValueError as exc:
        raise PipelineStageError(stage="plan", detail=f"Invalid plan file `{path}`: {exc}") from exc

    return _PlanFile(
        source_path=clean_text(payload.get("sourcePath")),
        target=clean_text(payload.get(target_key)),
        groups=groups,
    )


def _resolve_story(
    commands: TweesplitCommands,
    story: Path | None,
    plan_file: _PlanFile | None,
    use_saved: bool = True,
) -> Path | None:
    """Resolve the story path from argument, plan, saved state, or prompt."""

    if story is not None:
        return story
    if plan_file is not None and plan_file.source_path:
        return Path(plan_file.source_path)
    if use_saved:
        state = commands.load_state()
        if state is not None and state.file_path:
            return Path(state.file_path)
    picked = commands.pick_file()
    return Path(picked) if picked else None


def _to_saved_groups(groups: Sequence[SplitGroup]) -> list[SavedGroup]:
    """Number export groups so they can be saved."""

    return [
        SavedGroup(id=str(index), filename=group.filename, passage_names=group.passage_names)
        for index, group in enumerate(groups, start=1)
    ]


def _resolve_groups(
    commands: TweesplitCommands,
    story_path: Path,
    group_specs: Sequence[str],
    plan_file: _PlanFile | None,
    by_tag: bool,
) -> list[SavedGroup]:
    """Pick groups from specs, plan, tags, or saved state, in that order."""

    if group_specs:
        try:
            return _to_saved_groups([parse_group_spec(spec) for spec in group_specs])
        except ValueError as exc:
            raise PipelineStageError(stage="plan", detail=str(exc)) from exc
    if plan_file is not None and plan_file.groups:
        return _to_saved_groups(plan_file.groups)
    if by_tag:
        return group_by_tag(commands.open_story(story_path))

    state = commands.load_state()
    if state is not None and state.groups:
        return list(state.groups)

    raise PipelineStageError(
        stage="plan",
        detail="No groups to export.",
        hint=(
            "Pass `--group FILE=Name,...`, `--plan <plan.yaml>`, or `--by-tag`, "
            "or save groups with `tweesplit groups`."
        ),
    )


def _check_unique_filenames(groups: Sequence[SavedGroup]) -> None:
    """Refuse plans that would write two groups to the same file name."""

    duplicates = find_duplicate_filenames(groups)
    if duplicates:
        raise PipelineStageError(
            stage="plan",
            detail=f"Duplicate filenames detected: {', '.join(duplicates)}.",
            hint="Rename groups so each output file is unique.",
        )


def _remember(
    commands: TweesplitCommands,
    story_path: Path,
    groups: Sequence[SavedGroup] | None = None,
) -> None:
    """Save the last story and groups; failures are reported but not fatal."""

    if not commands.config.remember_state:
        return
    try:
        if groups is None:
            previous = commands.load_state()
            same_story = previous is not None and previous.file_path == str(story_path)
            groups = previous.groups if same_story and previous is not None else ()
        commands.save_state(AppState(file_path=str(story_path), groups=tuple(groups)))
    except CommandError as exc:
        typer.secho(f"Warning: state not saved: {exc}", fg=typer.colors.YELLOW, err=True)


def _run_export(
    ctx: typer.Context,
    command_name: str,
    story: Path | None,
    target: Path | None,
    group_specs: Sequence[str] | None,
    plan: Path | None,
    by_tag: bool,
    target_key: str,
    pick_target: Callable[[TweesplitCommands], str | None],
    execute: Callable[[TweesplitCommands, Path, Path, tuple[SplitGroup, ...]], object],
) -> None:
    """Shared flow for directory and archive exports."""

    try:
        commands = _build_commands(ctx)
        plan_file = _load_plan_file(plan, target_key) if plan is not None else None
        story_path = _resolve_story(commands, story, plan_file)
        if story_path is None:
            echo_no_selection("story file")
            return

        saved_groups = _resolve_groups(commands, story_path, group_specs or [], plan_file, by_tag)
        _check_unique_filenames(saved_groups)

        resolved_target = target
        if resolved_target is None and plan_file is not None and plan_file.target:
            resolved_target = Path(plan_file.target)
        if resolved_target is None:
            picked = pick_target(commands)
            if picked is None:
                echo_no_selection("target")
                return
            resolved_target = Path(picked)

        groups = tuple(group.to_split_group() for group in saved_groups)
        result = execute(commands, story_path, resolved_target, groups)
        _remember(commands, story_path, saved_groups)
    except Exception as exc:
        exit_with_command_error(command_name, exc)

    echo_split_result(result, resolved_target)


_GroupOption = Annotated[
    list[str] | None,
    typer.Option(
        "--group",
        "-g",
        help="Group spec `FILENAME=Passage One,Passage Two`; repeat for more groups.",
    ),
]
_PlanOption = Annotated[
    Path | None,
    typer.Option("--plan", help="YAML/JSON plan file with `sourcePath` and `groups`."),
]
_ByTagOption = Annotated[
    bool,
    typer.Option("--by-tag", help="Group passages by their first tag."),
]
_StoryArgument = Annotated[
    Path | None,
    typer.Argument(help="Path to the source .twee story (prompted when omitted)."),
]


@app.command("passages")
def passages_command(
    ctx: typer.Context,
    story: _StoryArgument = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print passages as JSON.")] = False,
) -> None:
    """List passages in document order."""

    try:
        commands = _build_commands(ctx)
        story_path = _resolve_story(commands, story, None, use_saved=False)
        if story_path is None:
            echo_no_selection("story file")
            return
        rows = commands.open_story(story_path)
        _remember(commands, story_path)
    except Exception as exc:
        exit_with_command_error("passages", exc)

    echo_passage_list(rows, as_json=as_json)


@app.command("preview")
def preview_command(
    ctx: typer.Context,
    story: Annotated[Path, typer.Argument(help="Path to the source .twee story.")],
    name: Annotated[str, typer.Argument(help="Passage name.")],
) -> None:
    """Print one passage as it would appear in an exported file."""

    try:
        commands = _build_commands(ctx)
        text = commands.preview_passage(story, name)
    except Exception as exc:
        exit_with_command_error("preview", exc)

    typer.echo(text)


@app.command("split")
def split_command(
    ctx: typer.Context,
    story: _StoryArgument = None,
    out: Annotated[
        Path | None,
        typer.Option("--out", "-o", help="Output directory (prompted when omitted)."),
    ] = None,
    group: _GroupOption = None,
    plan: _PlanOption = None,
    by_tag: _ByTagOption = False,
) -> None:
    """Write one Twee file per group into a directory."""

    _run_export(
        ctx,
        "split",
        story,
        out,
        group,
        plan,
        by_tag,
        target_key="outputDir",
        pick_target=lambda commands: commands.pick_directory(),
        execute=lambda commands, source, target, groups: commands.execute_split_to_directory(
            SplitPlan(source_path=source, output_dir=target, groups=groups)
        ),
    )


@app.command("zip")
def zip_command(
    ctx: typer.Context,
    story: _StoryArgument = None,
    archive: Annotated[
        Path | None,
        typer.Option("--archive", "-a", help="ZIP archive path (prompted when omitted)."),
    ] = None,
    group: _GroupOption = None,
    plan: _PlanOption = None,
    by_tag: _ByTagOption = False,
) -> None:
    """Write one ZIP entry per group into a single archive."""

    _run_export(
        ctx,
        "zip",
        story,
        archive,
        group,
        plan,
        by_tag,
        target_key="zipPath",
        pick_target=lambda commands: commands.pick_save_file(),
        execute=lambda commands, source, target, groups: commands.execute_split_to_archive(
            ArchivePlan(source_path=source, archive_path=target, groups=groups)
        ),
    )


def _edit_groups(
    ctx: typer.Context,
    command_name: str,
    edit: Callable[[TweesplitCommands, AppState], list[SavedGroup]],
) -> None:
    """Load saved state, apply one group edit, save, and print the result."""

    try:
        commands = _build_commands(ctx)
        state = commands.load_state() or AppState()
        groups = edit(commands, state)
        commands.save_state(AppState(file_path=state.file_path, groups=tuple(groups)))
    except Exception as exc:
        exit_with_command_error(command_name, exc)

    echo_group_list(groups)


def _require_group(state: AppState, group_id: str) -> SavedGroup:
    """Return the group with `group_id` or fail with a stage error."""

    group = find_group(state.groups, group_id)
    if group is None:
        raise PipelineStageError(
            stage="groups",
            detail=f"Group `{group_id}` not found.",
            hint="Run `tweesplit groups list` to see group ids.",
        )
    return group


@groups_app.command("list")
def groups_list_command(ctx: typer.Context) -> None:
    """Print saved groups."""

    try:
        commands = _build_commands(ctx)
        state = commands.load_state() or AppState()
    except Exception as exc:
        exit_with_command_error("groups list", exc)

    if state.file_path:
        typer.echo(f"Story: {state.file_path}")
    echo_group_list(state.groups)


@groups_app.command("add")
def groups_add_command(
    ctx: typer.Context,
    filename: Annotated[
        str | None,
        typer.Option("--filename", help="Output file name (defaults to `group<id>.twee`)."),
    ] = None,
) -> None:
    """Append an empty group."""

    _edit_groups(ctx, "groups add", lambda _, state: add_group(state.groups, filename))


@groups_app.command("remove")
def groups_remove_command(
    ctx: typer.Context,
    group_id: Annotated[str, typer.Argument(help="Group id.")],
) -> None:
    """Delete a group."""

    def _edit(_: TweesplitCommands, state: AppState) -> list[SavedGroup]:
        _require_group(state, group_id)
        return remove_group(state.groups, group_id)

    _edit_groups(ctx, "groups remove", _edit)


@groups_app.command("rename")
def groups_rename_command(
    ctx: typer.Context,
    group_id: Annotated[str, typer.Argument(help="Group id.")],
    filename: Annotated[str, typer.Argument(help="New output file name.")],
) -> None:
    """Change a group's output file name."""

    def _edit(_: TweesplitCommands, state: AppState) -> list[SavedGroup]:
        _require_group(state, group_id)
        return rename_group(state.groups, group_id, filename)

    _edit_groups(ctx, "groups rename", _edit)


@groups_app.command("assign")
def groups_assign_command(
    ctx: typer.Context,
    group_id: Annotated[str, typer.Argument(help="Group id.")],
    names: Annotated[list[str], typer.Argument(help="Passage names to move into the group.")],
) -> None:
    """Move passages into a group, removing them from every other group."""

    def _edit(_: TweesplitCommands, state: AppState) -> list[SavedGroup]:
        _require_group(state, group_id)
        return assign_passages(state.groups, group_id, names)

    _edit_groups(ctx, "groups assign", _edit)


@groups_app.command("unassign")
def groups_unassign_command(
    ctx: typer.Context,
    group_id: Annotated[str, typer.Argument(help="Group id.")],
    name: Annotated[str, typer.Argument(help="Passage name to remove.")],
) -> None:
    """Remove one passage from a group."""

    def _edit(_: TweesplitCommands, state: AppState) -> list[SavedGroup]:
        _require_group(state, group_id)
        return unassign(state.groups, group_id, name)

    _edit_groups(ctx, "groups unassign", _edit)


@groups_app.command("auto")
def groups_auto_command(
    ctx: typer.Context,
    story: _StoryArgument = None,
) -> None:
    """Replace saved groups with one group per first tag."""

    try:
        commands = _build_commands(ctx)
        story_path = _resolve_story(commands, story, None)
        if story_path is None:
            echo_no_selection("story file")
            return
        groups = group_by_tag(commands.open_story(story_path))
        commands.save_state(AppState(file_path=str(story_path), groups=tuple(groups)))
    except Exception as exc:
        exit_with_command_error("groups auto", exc)

    echo_group_list(groups)


@groups_app.command("clear")
def groups_clear_command(ctx: typer.Context) -> None:
    """Delete the saved state file."""

    try:
        commands = _build_commands(ctx)
        removed = commands.state_store.clear()
    except Exception as exc:
        exit_with_command_error("groups clear", exc)

    typer.echo("Saved state cleared." if removed else "No saved state found.")


def main() -> None:
    """CLI entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()
