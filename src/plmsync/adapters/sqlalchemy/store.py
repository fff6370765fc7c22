"""SQLAlchemy Core implementation of the storage port.

Tables are reflected on first use instead of being declared, because their
column set grows while the service runs. A reflected table is dropped from the
cache whenever this store adds a column to it.
"""

from __future__ import annotations

from collections.abc import Mapping, Set
from contextlib import contextmanager
from logging import getLogger
from typing import TYPE_CHECKING, Any

from alembic.operations import Operations
from alembic.runtime.migration import MigrationContext
from sqlalchemy import Column, MetaData, Table, delete, inspect, null, select, update
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import NoSuchTableError, SQLAlchemyError

from plmsync.domain.ports import StorageError

from .mappings import sql_type

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from sqlalchemy import ColumnElement
    from sqlalchemy.engine import Connection, Engine

    from plmsync.domain.column_types import ColumnType
    from plmsync.domain.ports import Filters, Rows

log = getLogger(__name__)


def normalize_rows(rows: Rows) -> list[dict[str, object]]:
    """Give every row the same keys so they fit one multi-row statement."""

    columns: dict[str, None] = {}
    for row in rows:
        columns.update(dict.fromkeys(row))
    return [{column: row.get(column) for column in columns} for row in rows]


class SqlAlchemyStore:
    """Storage port backed by an SQLAlchemy engine (PostgreSQL or SQLite)."""

    def __init__(self, engine: Engine, *, schema: str | None = None) -> None:
        self._engine = engine
        self._schema = schema
        self._tables: dict[str, Table] = {}

    @property
    def dialect(self) -> str:
        return self._engine.dialect.name

    def get_columns(self, table: str) -> set[str]:
        try:
            columns = inspect(self._engine).get_columns(table, schema=self._schema)
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not introspect {table}: {exc}", table=table) from exc
        return {str(column["name"]) for column in columns}

    def add_column(self, table: str, column: str, column_type: ColumnType) -> None:
        options: dict[str, Any] = {}
        if self.dialect == "postgresql":
            options["if_not_exists"] = True
        elif column in self.get_columns(table):
            return
        try:
            with self._engine.begin() as connection:
                operations = Operations(MigrationContext.configure(connection))
                operations.add_column(
                    table,
                    Column(column, sql_type(column_type), nullable=True),
                    schema=self._schema,
                    **options,
                )
        except SQLAlchemyError as exc:
            raise StorageError(
                f"Could not add column {column} to {table}: {exc}", table=table
            ) from exc
        finally:
            self._tables.pop(table, None)
        log.info("Added column %s.%s (%s)", table, column, column_type)

    def upsert(
        self,
        table: str,
        rows: Rows,
        conflict_keys: Sequence[str],
        *,
        replace: bool = False,
    ) -> int:
        if not rows:
            return 0
        values = normalize_rows(rows)
        with _translate_errors(table, "upsert into"), self._engine.begin() as connection:
            target = self._table(table, connection)
            statement = self._upsert_statement(target, values)
            replaced: dict[str, Any] = {
                name: statement.excluded[name] for name in values[0] if name not in conflict_keys
            }
            if replace:
                replaced.update(
                    (column.name, null())
                    for column in target.columns
                    if column.name not in replaced
                    and column.name not in conflict_keys
                    and not column.primary_key
                    and column.server_default is None
                )
            if replaced:
                statement = statement.on_conflict_do_update(
                    index_elements=list(conflict_keys), set_=replaced
                )
            else:
                statement = statement.on_conflict_do_nothing(index_elements=list(conflict_keys))
            connection.execute(statement)
        return len(values)

    def insert(self, table: str, rows: Rows) -> int:
        if not rows:
            return 0
        values = normalize_rows(rows)
        with _translate_errors(table, "insert into"), self._engine.begin() as connection:
            connection.execute(self._table(table, connection).insert(), values)
        return len(values)

    def update(self, table: str, values: Mapping[str, object], filters: Filters) -> int:
        if not values:
            return 0
        with _translate_errors(table, "update"), self._engine.begin() as connection:
            target = self._table(table, connection)
            statement = update(target).where(*_conditions(target, filters)).values(dict(values))
            return connection.execute(statement).rowcount

    def delete(self, table: str, filters: Filters) -> int:
        with _translate_errors(table, "delete from"), self._engine.begin() as connection:
            target = self._table(table, connection)
            return connection.execute(delete(target).where(*_conditions(target, filters))).rowcount

    def fetch(
        self,
        table: str,
        filters: Filters,
        columns: Sequence[str] | None = None,
    ) -> list[dict[str, object]]:
        with _translate_errors(table, "read from"), self._engine.connect() as connection:
            target = self._table(table, connection)
            selected = [_column(target, name) for name in columns] if columns else [target]
            statement = select(*selected).where(*_conditions(target, filters))
            return [dict(row._mapping) for row in connection.execute(statement)]

    def replace(self, table: str, filters: Filters, rows: Rows) -> int:
        values = normalize_rows(rows)
        with _translate_errors(table, "replace rows of"), self._engine.begin() as connection:
            target = self._table(table, connection)
            connection.execute(delete(target).where(*_conditions(target, filters)))
            if values:
                connection.execute(target.insert(), values)
        return len(values)

    def _table(self, name: str, connection: Connection) -> Table:
        cached = self._tables.get(name)
        if cached is not None:
            return cached
        try:
            table = Table(name, MetaData(schema=self._schema), autoload_with=connection)
        except NoSuchTableError as exc:
            raise StorageError(f"Unknown table {name}", table=name) from exc
        self._tables[name] = table
        return table

    def _upsert_statement(self, target: Table, values: list[dict[str, object]]) -> Any:
        match self.dialect:
            case "postgresql":
                return postgresql_insert(target).values(values)
            case "sqlite":
                return sqlite_insert(target).values(values)
            case other:
                raise StorageError(f"Upserts are not supported on {other}", table=target.name)


@contextmanager
def _translate_errors(table: str, verb: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        raise StorageError(f"Could not {verb} {table}: {exc}", table=table) from exc


def _column(table: Table, name: str) -> ColumnElement[Any]:
    try:
        return table.c[name]
    except KeyError as exc:
        raise StorageError(f"Unknown column {table.name}.{name}", table=table.name) from exc


def _conditions(table: Table, filters: Filters) -> list[ColumnElement[bool]]:
    conditions: list[ColumnElement[bool]] = []
    for name, value in filters.items():
        column = _column(table, name)
        if value is None:
            conditions.append(column.is_(None))
        elif isinstance(value, list | tuple | Set):
            conditions.append(column.in_(list(value)))
        else:
            conditions.append(column == value)
    return conditions
