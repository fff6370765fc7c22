"""Dependency template storage and name-based resolution for tracking plans."""

from __future__ import annotations

from .bookends import (
    END_DATE,
    END_DEPENDENCY,
    END_ROW_NUMBER,
    START_DATE,
    START_DEPENDENCY,
    START_ROW_NUMBER,
    bookend_timeline_id,
    bookend_timelines,
    with_bookends,
)
from .populator import DependencyGraphPopulator
from .resolution import StyleResolution, TimelineLink, milestone_lookup, name_key, resolve_style

__all__ = [
    "END_DATE",
    "END_DEPENDENCY",
    "END_ROW_NUMBER",
    "START_DATE",
    "START_DEPENDENCY",
    "START_ROW_NUMBER",
    "DependencyGraphPopulator",
    "StyleResolution",
    "TimelineLink",
    "bookend_timeline_id",
    "bookend_timelines",
    "milestone_lookup",
    "name_key",
    "resolve_style",
    "with_bookends",
]
