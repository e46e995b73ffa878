"""Input/output targets for tweesplit.

This package contains the directory and archive export targets and the
application state store.
"""

from .archive import ArchivePackager
from .state_store import AppStateStore
from .storage import OutputDirectory

__all__ = ["AppStateStore", "ArchivePackager", "OutputDirectory"]
