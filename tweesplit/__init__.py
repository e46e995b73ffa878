"""Top-level package for tweesplit.

This package splits one Twee story document into several smaller Twee files,
written to a directory or packed into a single ZIP archive. The main
orchestration entry point is `SplitPipeline`.
"""

from .pipeline import SplitPipeline

__all__ = ["SplitPipeline", "__version__"]

__version__ = "0.1.0"
