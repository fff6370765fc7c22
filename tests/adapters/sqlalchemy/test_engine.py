from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from plmsync.adapters.sqlalchemy import (
    SqlAlchemyStore,
    StartupError,
    configured_engine,
    configured_store,
    is_started,
    shutdown,
    startup,
)

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy.engine import Engine


@pytest.fixture(autouse=True)
def reset_adapter() -> Iterator[None]:
    shutdown()
    yield
    shutdown()


def test_configured_store_requires_startup() -> None:
    assert not is_started()

    with pytest.raises(StartupError, match="not initialised"):
        configured_store()


def test_startup_with_engine_builds_store(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine)

    assert is_started()
    assert configured_engine() is sqlite_engine
    store = configured_store()
    assert isinstance(store, SqlAlchemyStore)
    assert "beproduct_material_id" in store.get_columns("material")


def test_second_startup_requires_force(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine)

    with pytest.raises(StartupError, match="already initialised"):
        startup(engine=sqlite_engine)

    startup(engine=sqlite_engine, force=True)
    assert configured_engine() is sqlite_engine


def test_startup_from_database_uri() -> None:
    startup(database_uri="sqlite+pysqlite:///:memory:")

    engine = configured_engine()
    assert engine is not None
    assert engine.dialect.name == "sqlite"


def test_shutdown_resets_state(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine)

    shutdown()

    assert configured_engine() is None
    with pytest.raises(StartupError):
        configured_store()
