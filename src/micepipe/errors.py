"""Exceptions raised while loading and aggregating mouse datasets."""

from __future__ import annotations


class MalformedInputError(ValueError):
    """Raised when a dataset cannot be turned into whole-day per-subject series."""


class AlignmentError(AssertionError):
    """Raised when series that must share a time base do not."""
