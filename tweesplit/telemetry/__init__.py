"""Telemetry scaffolds.

This package emits stage-level run events for parse and export operations.
"""

from .logger import RunLogger

__all__ = ["RunLogger"]
