"""ZIP archive target for split exports.

Responsibilities:
- Create or truncate one archive file per export.
- Write one deflate-compressed entry per group, strictly one entry at a time.
- Finalize the central directory so standard tools can read the result.
"""

from __future__ import annotations

from contextlib import suppress
from pathlib import Path
import zipfile


class ArchivePackager:
    """Sequential ZIP writer.

    Entry names are used verbatim. Two entries with the same name are both
    stored; extraction tools then disagree on which one wins.
    """

    compression = zipfile.ZIP_DEFLATED

    def __init__(self, archive_path: Path) -> None:
        """Initialize the packager without touching the filesystem."""

        self.archive_path = archive_path
        self._archive: zipfile.ZipFile | None = None

    def open(self) -> ArchivePackager:
        """Create or truncate the archive file."""

        self._archive = zipfile.ZipFile(self.archive_path, mode="w", compression=self.compression)
        return self

    def write_entry(self, name: str, content: str) -> None:
        """Write one complete entry and close it before returning."""

        if self._archive is None:
            raise RuntimeError("Archive is not open.")
        with self._archive.open(name, mode="w") as entry:
            entry.write(content.encode("utf-8"))

    def finalize(self) -> Path:
        """Write the central directory and close the archive file.

        Calling this on an already finalized packager does nothing.
        """

        archive = self._release()
        if archive is not None:
            archive.close()
        return self.archive_path

    def abort(self) -> None:
        """Close the archive after a failed entry; close errors are ignored."""

        archive = self._release()
        if archive is not None:
            with suppress(OSError):
                archive.close()

    def _release(self) -> zipfile.ZipFile | None:
        """Detach the open archive so it is closed at most once."""

        archive, self._archive = self._archive, None
        return archive
