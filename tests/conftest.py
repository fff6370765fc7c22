from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.pool import StaticPool

from plmsync.adapters.sqlalchemy import SqlAlchemyStore
from plmsync.adapters.sqlalchemy.migrations import upgrade_head
from tests.helpers.fakes import InMemoryStore
from tests.helpers.payloads import load_fixture

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


@pytest.fixture
def beproduct_payload() -> Callable[[str], dict[str, object]]:
    return load_fixture


@pytest.fixture
def memory_store() -> InMemoryStore:
    return InMemoryStore.with_base_tables()


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:", poolclass=StaticPool)
    upgrade_head(engine=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_store(sqlite_engine: Engine) -> SqlAlchemyStore:
    return SqlAlchemyStore(sqlite_engine)
