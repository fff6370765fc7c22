"""Storage port used by schema evolution, reconciliation and event services."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from plmsync.domain.column_types import ColumnType

type Filters = Mapping[str, object]
"""Equality filters by column. Collection values mean ``IN``, ``None`` means ``IS NULL``."""

type Rows = Sequence[Mapping[str, object]]


class StorageError(RuntimeError):
    """Raised by storage adapters when a read, write or DDL operation fails."""

    def __init__(self, message: str, *, table: str | None = None) -> None:
        super().__init__(message)
        self.table = table


@runtime_checkable
class StoragePort(Protocol):
    """Table-oriented access to a store whose column set grows at runtime.

    Every method addresses tables by name inside the adapter's configured
    schema. Each call commits on its own except :meth:`replace`, which deletes
    and inserts in one transaction.
    """

    def get_columns(self, table: str) -> set[str]: ...

    def add_column(self, table: str, column: str, column_type: ColumnType) -> None:
        """Add ``column`` unless it exists already."""
        ...

    def upsert(
        self,
        table: str,
        rows: Rows,
        conflict_keys: Sequence[str],
        *,
        replace: bool = False,
    ) -> int:
        """Insert ``rows``, overwriting the written columns of a conflicting row.

        With ``replace`` the conflicting row takes the new row's full state:
        columns the row does not carry are cleared, except the primary key and
        columns with a server default.
        """
        ...

    def insert(self, table: str, rows: Rows) -> int: ...

    def update(self, table: str, values: Mapping[str, object], filters: Filters) -> int: ...

    def delete(self, table: str, filters: Filters) -> int: ...

    def fetch(
        self,
        table: str,
        filters: Filters,
        columns: Sequence[str] | None = None,
    ) -> list[dict[str, object]]: ...

    def replace(self, table: str, filters: Filters, rows: Rows) -> int:
        """Atomically delete the rows matching ``filters`` and insert ``rows``."""
        ...


__all__ = ["Filters", "Rows", "StorageError", "StoragePort"]
