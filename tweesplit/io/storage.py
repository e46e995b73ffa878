"""Directory output target for split exports.

Responsibilities:
- Create the output directory tree on demand.
- Write composed group documents byte-exactly, overwriting existing files.
"""

from __future__ import annotations

from pathlib import Path


class OutputDirectory:
    """Filesystem directory that receives one text file per group."""

    def __init__(self, root: Path) -> None:
        """Initialize the target with its root directory."""

        self.root = root

    def prepare(self) -> Path:
        """Create the root directory and any missing parents."""

        self.root.mkdir(parents=True, exist_ok=True)
        return self.root

    def save_text(self, filename: str, content: str) -> Path:
        """Write UTF-8 content to `root / filename` and return the final path.

        Newlines are written as-is on every platform. Parent directories
        inside the root are not created.
        """

        path = self.root / filename
        path.write_bytes(content.encode("utf-8"))
        return path
