"""Additive column creation for fields that have not been seen before."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from plmsync.domain.column_types import infer_column_type
from plmsync.domain.identifiers import sanitize_identifier
from plmsync.domain.ports import StorageError

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from plmsync.domain.ports import StoragePort

log = getLogger(__name__)


@dataclass(slots=True)
class SchemaEvolution:
    """Make sure a table has a column for every incoming field.

    The column set only grows. Introspection and DDL failures are logged and
    never abort the caller; a write against a missing column fails later and
    is reported there.
    """

    store: StoragePort

    def ensure_columns(self, table: str, fields: Mapping[str, object]) -> dict[str, object]:
        """Add missing columns for ``fields`` and return it keyed by column name."""

        existing = self._existing_columns(table)
        renamed: dict[str, object] = {}
        samples: dict[str, object] = {}

        for name, value in fields.items():
            column = sanitize_identifier(name)
            if not column:
                log.warning("Skipping field %r on %s: no usable column name", name, table)
                continue
            renamed[column] = value
            if column not in existing and samples.get(column) is None:
                samples[column] = value

        for column, sample in samples.items():
            column_type = infer_column_type(sample)
            try:
                self.store.add_column(table, column, column_type)
            except StorageError as exc:
                log.warning("Could not add column %s.%s (%s): %s", table, column, column_type, exc)
                continue
            log.info("Added column %s.%s (%s)", table, column, column_type)

        return renamed

    def ensure_columns_for_rows(
        self, table: str, rows: Iterable[Mapping[str, object]]
    ) -> dict[str, object]:
        """Cover the union of fields across ``rows``, typed by the first non-null value."""

        return self.ensure_columns(table, union_fields(rows))

    def _existing_columns(self, table: str) -> set[str]:
        try:
            return self.store.get_columns(table)
        except StorageError as exc:
            log.warning("Could not read columns of %s, assuming none: %s", table, exc)
            return set()


def union_fields(rows: Iterable[Mapping[str, object]]) -> dict[str, object]:
    merged: dict[str, object] = {}
    for row in rows:
        for name, value in row.items():
            if merged.get(name) is None:
                merged[name] = value
    return merged


__all__ = ["SchemaEvolution", "union_fields"]
