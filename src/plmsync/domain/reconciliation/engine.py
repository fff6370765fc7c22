"""Apply a collection plan against the store, one parent at a time."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from plmsync.domain.ports import StorageError
from plmsync.domain.schema_evolution import SchemaEvolution

from .plan import plan_collection

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from plmsync.domain.model import ParentRef, Row
    from plmsync.domain.ports import StoragePort

    from .plan import CollectionKey

log = getLogger(__name__)


@dataclass(slots=True, kw_only=True)
class ReconcileOutcome:
    """What happened to one child collection of one parent."""

    table: str
    upserted: int = 0
    deleted_keys: tuple[CollectionKey, ...] = ()
    deleted_all: bool = False
    skipped: int = 0
    errors: list[str] = field(default_factory=list[str])

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def error(self) -> str | None:
        return "; ".join(self.errors) if self.errors else None

    def to_payload(self) -> dict[str, object]:
        body: dict[str, object] = {
            "upserted": self.upserted,
            "deleted": list(self.deleted_keys),
            "deleted_all": self.deleted_all,
        }
        if self.errors:
            body["errors"] = list(self.errors)
        return body


@dataclass(slots=True)
class CollectionReconciler:
    """Reconcile a parent's stored children with the latest snapshot.

    Schema evolution precedes the upsert, the upsert precedes deletions. A
    failing step is recorded on the outcome and the remaining steps still run.
    """

    store: StoragePort
    schema: SchemaEvolution

    @classmethod
    def for_store(cls, store: StoragePort) -> CollectionReconciler:
        return cls(store, SchemaEvolution(store))

    def reconcile(
        self,
        table: str,
        parent: ParentRef,
        unique_key: str,
        current: Sequence[Row] | None,
        previous: Sequence[Mapping[str, object]] | None = None,
    ) -> ReconcileOutcome:
        outcome = ReconcileOutcome(table=table)
        if current is None:
            log.debug("Collection %s absent from event, leaving it untouched", table)
            return outcome

        plan = plan_collection(unique_key, current, previous)
        outcome.skipped = plan.skipped
        if plan.skipped:
            log.warning("Skipped %d %s rows without %s", plan.skipped, table, unique_key)

        if plan.upserts:
            rows = [{**row, parent.column: parent.id} for row in plan.upserts]
            self.schema.ensure_columns_for_rows(table, rows)
            try:
                outcome.upserted = self.store.upsert(
                    table, rows, (parent.column, unique_key), replace=True
                )
            except StorageError as exc:
                log.error(
                    "Upsert into %s failed for %s=%s: %s", table, parent.column, parent.id, exc
                )
                outcome.errors.append(f"upsert failed: {exc}")

        if plan.delete_all:
            try:
                self.store.delete(table, {parent.column: parent.id})
            except StorageError as exc:
                log.error(
                    "Clearing %s failed for %s=%s: %s", table, parent.column, parent.id, exc
                )
                outcome.errors.append(f"delete failed: {exc}")
            else:
                outcome.deleted_all = True
                log.info("Removed all %s rows of %s=%s", table, parent.column, parent.id)
        elif plan.removed_keys:
            try:
                self.store.delete(
                    table, {parent.column: parent.id, unique_key: list(plan.removed_keys)}
                )
            except StorageError as exc:
                log.error(
                    "Deleting from %s failed for %s=%s: %s", table, parent.column, parent.id, exc
                )
                outcome.errors.append(f"delete failed: {exc}")
            else:
                outcome.deleted_keys = plan.removed_keys
                log.info(
                    "Removed %d %s rows of %s=%s",
                    len(plan.removed_keys),
                    table,
                    parent.column,
                    parent.id,
                )

        return outcome
