"""Persisted application state.

Responsibilities:
- Save the last story path and group definitions as pretty-printed JSON.
- Distinguish "never saved" (`None`) from a corrupt state file (`StateLoadError`).
"""

from __future__ import annotations

import json
from pathlib import Path

from ..errors import StateLoadError
from ..models.datatypes import AppState

STATE_FILENAME = "state.json"


class AppStateStore:
    """JSON file store for `AppState`, one file per state directory."""

    def __init__(self, root: Path) -> None:
        """Initialize the store with its state directory."""

        self.root = root

    @property
    def path(self) -> Path:
        """Full path of the state file."""

        return self.root / STATE_FILENAME

    def save(self, state: AppState) -> Path:
        """Overwrite the state file with `state` and return its path."""

        self.root.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps(state.to_payload(), ensure_ascii=False, indent=2, sort_keys=True),
            encoding="utf-8",
        )
        return self.path

    def load(self) -> AppState | None:
        """Load saved state, returning `None` when nothing was saved yet.

        Raises:
            StateLoadError: If the file exists but is not valid state JSON.
        """

        if not self.path.exists():
            return None

        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except UnicodeDecodeError as exc:
            raise StateLoadError(
                f"State file `{self.path}` is not valid UTF-8: {exc.reason}."
            ) from exc
        except json.JSONDecodeError as exc:
            raise StateLoadError(f"State file `{self.path}` is not valid JSON: {exc}") from exc

        try:
            return AppState.from_payload(payload)
        except ValueError as exc:
            raise StateLoadError(f"State file `{self.path}` is malformed: {exc}") from exc

    def clear(self) -> bool:
        """Delete the state file and return whether one existed."""

        if not self.path.exists():
            return False
        self.path.unlink()
        return True
