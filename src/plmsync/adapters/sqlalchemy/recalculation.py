"""Date propagation through a stored procedure of the database."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from plmsync.config.sync import DEFAULT_RECALCULATION_FUNCTION
from plmsync.domain.ports import StorageError

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = getLogger(__name__)


class SqlDateRecalculator:
    """Call ``<schema>.<function>(plan_id)`` and count the rows it returns.

    The procedure owns the date arithmetic; only PostgreSQL deployments have it.
    """

    def __init__(
        self,
        engine: Engine,
        *,
        function_name: str = DEFAULT_RECALCULATION_FUNCTION,
        schema: str | None = None,
    ) -> None:
        self._engine = engine
        self._function_name = function_name
        self._schema = schema

    def __call__(self, plan_id: str) -> int:
        if self._engine.dialect.name != "postgresql":
            raise StorageError(
                f"{self._function_name} is not available on {self._engine.dialect.name}"
            )
        preparer = self._engine.dialect.identifier_preparer
        name = preparer.quote(self._function_name)
        if self._schema:
            name = f"{preparer.quote_schema(self._schema)}.{name}"
        statement = text(f"SELECT count(*) FROM {name}(:plan_id)")  # noqa: S608
        try:
            with self._engine.begin() as connection:
                touched = connection.execute(statement, {"plan_id": plan_id}).scalar_one()
        except SQLAlchemyError as exc:
            raise StorageError(f"{self._function_name}({plan_id}) failed: {exc}") from exc
        log.info("Recalculated %s timeline rows for plan %s", touched, plan_id)
        return int(touched)
