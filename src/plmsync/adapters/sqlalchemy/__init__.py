"""SQLAlchemy adapter package for plmsync."""

from __future__ import annotations

from .engine import StartupError, configured_engine, configured_store, is_started, shutdown, startup
from .mappings import build_metadata
from .recalculation import SqlDateRecalculator
from .store import SqlAlchemyStore

__all__ = [
    "SqlAlchemyStore",
    "SqlDateRecalculator",
    "StartupError",
    "build_metadata",
    "configured_engine",
    "configured_store",
    "is_started",
    "shutdown",
    "startup",
]
