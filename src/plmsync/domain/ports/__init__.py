"""Domain port definitions for adapters."""

from __future__ import annotations

from .agents import DateRecalculator, DependencyRequest, DependencyRequester
from .fetching import MasterdataSource, PlanSource, SourceError
from .persistence import Filters, Rows, StorageError, StoragePort

__all__ = [
    "DateRecalculator",
    "DependencyRequest",
    "DependencyRequester",
    "Filters",
    "MasterdataSource",
    "PlanSource",
    "Rows",
    "SourceError",
    "StorageError",
    "StoragePort",
]
