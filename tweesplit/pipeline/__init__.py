"""tweesplit pipeline package.

This package contains orchestration and helper modules for loading stories
and exporting passage groups to directories or archives.
"""

from .orchestrator import SplitPipeline

__all__ = ["SplitPipeline"]
