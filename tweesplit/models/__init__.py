"""Shared typed data models for tweesplit.

This package contains dataclasses used across parser, pipeline, and state
modules to avoid cross-module coupling and circular imports.
"""

from .datatypes import (
    AppState,
    ArchivePlan,
    ParsedStory,
    Passage,
    PassageInfo,
    SavedGroup,
    SplitGroup,
    SplitPlan,
    SplitResult,
    StoryMetadata,
)

__all__ = [
    "AppState",
    "ArchivePlan",
    "ParsedStory",
    "Passage",
    "PassageInfo",
    "SavedGroup",
    "SplitGroup",
    "SplitPlan",
    "SplitResult",
    "StoryMetadata",
]
