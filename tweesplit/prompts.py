"""Terminal path pickers used when a command is missing a path argument.

A blank answer or an aborted prompt (Ctrl+C, Ctrl+D) means "no selection" and
returns `None`. Running without an interactive terminal is an error, so hosts
can tell a cancelled choice apart from a prompt that never reached the user.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path
import sys

import typer

from .errors import PromptUnavailableError
from .parsing import clean_text


class PathPrompter:
    """Ask the user for story, directory, and archive paths."""

    def __init__(
        self,
        prompt_fn: Callable[..., str] = typer.prompt,
        interactive: bool | None = None,
    ) -> None:
        """Initialize with an injectable prompt function and terminal detection."""

        self._prompt_fn = prompt_fn
        self._interactive = interactive

    def pick_file(self, extensions: Sequence[str] = ("twee", "tw")) -> str | None:
        """Ask for an existing story file with one of `extensions`."""

        allowed = {f".{extension.lower()}" for extension in extensions}
        label = ", ".join(sorted(allowed))
        while True:
            answer = self._ask(f"Story file ({label})")
            if answer is None:
                return None
            if Path(answer).suffix.lower() in allowed:
                return answer
            typer.secho(f"Expected a file ending in {label}.", fg=typer.colors.YELLOW, err=True)

    def pick_directory(self) -> str | None:
        """Ask for an output directory."""

        return self._ask("Output directory")

    def pick_save_file(self, default_name: str = "export.zip") -> str | None:
        """Ask for an archive path, suggesting `default_name`."""

        return self._ask("Save archive as", default=default_name)

    def _ask(self, message: str, default: str | None = None) -> str | None:
        """Prompt once and normalize the answer."""

        if not self._is_interactive():
            raise PromptUnavailableError(
                f"Cannot prompt for `{message}`: no interactive terminal is attached."
            )
        try:
            answer = self._prompt_fn(
                message,
                default=default or "",
                show_default=default is not None,
            )
        except typer.Abort:
            return None
        return clean_text(answer)

    def _is_interactive(self) -> bool:
        """Return whether stdin is attached to a terminal."""

        if self._interactive is not None:
            return self._interactive
        return sys.stdin is not None and sys.stdin.isatty()
