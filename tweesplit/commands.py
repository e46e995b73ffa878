"""Host-facing command boundary.

Responsibilities:
- Expose story listing, preview, export, picker, and state operations to hosts.
- Accept dataclass or camelCase payload plans.
- Convert every failure into one `CommandError` carrying a single message.

Key types:
- `CommandError`: single-message command failure; the original error is chained.
- `TweesplitCommands`: command facade bound to one pipeline, store, and prompter.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from .config import TweesplitConfig
from .errors import PipelineStageError, PromptUnavailableError, StateLoadError
from .io.state_store import AppStateStore
from .models.datatypes import AppState, ArchivePlan, PassageInfo, SplitPlan, SplitResult
from .pipeline import SplitPipeline
from .prompts import PathPrompter


class CommandError(RuntimeError):
    """Raised by host commands with one human-readable message."""

    def __init__(self, message: str) -> None:
        """Initialize with the user-facing message."""

        super().__init__(message)
        self.message = message


@contextmanager
def _command_boundary() -> Iterator[None]:
    """Translate domain and I/O failures into `CommandError`."""

    try:
        yield
    except PipelineStageError as exc:
        raise CommandError(exc.detail) from exc
    except (StateLoadError, PromptUnavailableError) as exc:
        raise CommandError(str(exc)) from exc
    except OSError as exc:
        raise CommandError(str(exc)) from exc


class TweesplitCommands:
    """Command facade used by the CLI and other hosts."""

    def __init__(
        self,
        config: TweesplitConfig,
        pipeline: SplitPipeline | None = None,
        state_store: AppStateStore | None = None,
        prompter: PathPrompter | None = None,
    ) -> None:
        """Bind commands to their collaborators, defaulting from `config`."""

        self.config = config
        self.pipeline = pipeline or SplitPipeline()
        self.state_store = state_store or AppStateStore(config.state_dir)
        self.prompter = prompter or PathPrompter()

    def open_story(self, path: str | Path) -> list[PassageInfo]:
        """List the passages of a story in document order."""

        with _command_boundary():
            return self.pipeline.list_passages(Path(path))

    def preview_passage(self, path: str | Path, name: str) -> str:
        """Render one passage as Twee text."""

        with _command_boundary():
            return self.pipeline.preview_passage(Path(path), name)

    def execute_split_to_directory(self, plan: SplitPlan | Mapping[str, Any]) -> SplitResult:
        """Export groups as files under the plan's output directory."""

        resolved = self._resolve_plan(plan, SplitPlan)
        with _command_boundary():
            return self.pipeline.split_to_directory(resolved)

    def execute_split_to_archive(self, plan: ArchivePlan | Mapping[str, Any]) -> SplitResult:
        """Export groups as entries of the plan's archive."""

        resolved = self._resolve_plan(plan, ArchivePlan)
        with _command_boundary():
            return self.pipeline.split_to_archive(resolved)

    def pick_file(self) -> str | None:
        """Prompt for a story file; `None` when the user makes no selection."""

        with _command_boundary():
            return self.prompter.pick_file(self.config.story_extensions)

    def pick_directory(self) -> str | None:
        """Prompt for an output directory; `None` when the user makes no selection."""

        with _command_boundary():
            return self.prompter.pick_directory()

    def pick_save_file(self) -> str | None:
        """Prompt for an archive path; `None` when the user makes no selection."""

        with _command_boundary():
            return self.prompter.pick_save_file(self.config.archive_name)

    def save_state(self, state: AppState | Mapping[str, Any]) -> None:
        """Persist application state, replacing any previous file."""

        if isinstance(state, Mapping):
            try:
                state = AppState.from_payload(state)
            except ValueError as exc:
                raise CommandError(f"Invalid state payload: {exc}") from exc
        with _command_boundary():
            self.state_store.save(state)

    def load_state(self) -> AppState | None:
        """Load application state; `None` when nothing was saved yet."""

        with _command_boundary():
            return self.state_store.load()

    @staticmethod
    def _resolve_plan(plan: Any, plan_type: type) -> Any:
        """Build a plan dataclass from a payload mapping when needed."""

        if isinstance(plan, plan_type):
            return plan
        if not isinstance(plan, Mapping):
            raise CommandError(f"Expected a {plan_type.__name__} or payload mapping.")
        try:
            return plan_type.from_payload(plan)
        except ValueError as exc:
            raise CommandError(f"Invalid plan payload: {exc}") from exc
