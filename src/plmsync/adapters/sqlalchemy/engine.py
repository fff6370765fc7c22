"""Engine lifecycle for the SQLAlchemy adapter."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqlalchemy import create_engine

from plmsync.config.storage import get_database_config

from .migrations import upgrade_head
from .store import SqlAlchemyStore

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine


class StartupError(RuntimeError):
    """Raised when the SQLAlchemy adapter is used before initialisation."""


@dataclass(slots=True)
class _AdapterState:
    engine: Engine | None = None
    schema: str | None = None
    store: SqlAlchemyStore | None = None


_STATE = _AdapterState()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    schema: str | None = None,
    force: bool = False,
) -> None:
    """Create the engine, bring the base schema to head and set up the store."""

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )

    database = get_database_config()
    resolved_engine = engine or create_engine(database_uri or database.uri, future=True)
    resolved_schema = schema if schema is not None else database.schema
    upgrade_head(engine=resolved_engine, schema=resolved_schema)

    if _STATE.engine is not None and _STATE.engine is not resolved_engine:
        _STATE.engine.dispose()
    _STATE.engine = resolved_engine
    _STATE.schema = resolved_schema
    _STATE.store = SqlAlchemyStore(resolved_engine, schema=resolved_schema)


def configured_engine() -> Engine | None:
    """Return the engine currently managed by the adapter (if any)."""

    return _STATE.engine


def is_started() -> bool:
    return _STATE.engine is not None


def configured_store() -> SqlAlchemyStore:
    if _STATE.store is None:
        raise StartupError(
            "SQLAlchemy adapter not initialised. Call "
            "plmsync.adapters.sqlalchemy.startup() before requesting the store."
        )
    return _STATE.store


def shutdown() -> None:
    """Dispose the managed engine and reset state (primarily for tests)."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.engine = None
    _STATE.schema = None
    _STATE.store = None
