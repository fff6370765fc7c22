"""Material and style change events: header upsert plus child reconciliation."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Final

from plmsync.domain.clock import utc_now
from plmsync.domain.model import (
    EventResult,
    EventType,
    HeaderDescriptor,
    ParentRef,
    SyncLogEntry,
    SyncStatus,
)
from plmsync.domain.model import layout as tables
from plmsync.domain.ports import StorageError
from plmsync.domain.reconciliation import CollectionReconciler
from plmsync.domain.schema_evolution import SchemaEvolution

from .sync_log import record_sync

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from plmsync.domain.model import HeaderChange
    from plmsync.domain.ports import StoragePort
    from plmsync.domain.reconciliation import ReconcileOutcome

log = getLogger(__name__)

MATERIAL_HEADER: Final = HeaderDescriptor(
    entity_type="material",
    table=tables.MATERIAL,
    key_column="beproduct_material_id",
    parent_column="material_id",
    child_tables=(
        tables.MATERIAL_COLORWAY,
        tables.MATERIAL_SIZE_RANGE,
        tables.MATERIAL_SUPPLIER,
        tables.MATERIAL_TAG,
        tables.MATERIAL_PLAN_LINK,
    ),
)

STYLE_HEADER: Final = HeaderDescriptor(
    entity_type="style",
    table=tables.STYLE,
    key_column="beproduct_style_id",
    parent_column="style_id",
    child_tables=(tables.STYLE_COLORWAY, tables.STYLE_SIZE_CLASS),
)


def sync_header_event(
    change: HeaderChange,
    *,
    store: StoragePort,
    clock: Callable[[], datetime] = utc_now,
) -> EventResult:
    """Apply one material or style event and record it in the sync log."""

    descriptor = change.descriptor
    match change.event_type:
        case EventType.ON_DELETE:
            result = _soft_delete(change, store, clock)
        case EventType.ON_CREATE | EventType.ON_CHANGE | EventType.ON_COPY:
            result = _upsert(change, store)
        case _:
            log.info("Ignoring %s event %r", descriptor.entity_type, change.raw_event_type)
            result = _result(change, SyncStatus.IGNORED, error="Unsupported eventType")

    record_sync(
        store,
        SyncLogEntry(
            entity_type=descriptor.entity_type,
            entity_id=change.external_id,
            action=change.raw_event_type or "unknown",
            payload=change.payload,
        ),
    )
    return result


def _result(
    change: HeaderChange,
    status: SyncStatus,
    *,
    action: str | None = None,
    error: str | None = None,
    collections: list[ReconcileOutcome] | None = None,
    details: dict[str, object] | None = None,
) -> EventResult:
    return EventResult(
        status=status,
        entity_type=change.descriptor.entity_type,
        entity_id=change.external_id,
        action=action or change.raw_event_type,
        error=error,
        collections=collections or [],
        details=details or {},
    )


def _upsert(change: HeaderChange, store: StoragePort) -> EventResult:
    descriptor = change.descriptor
    if not change.has_after:
        return _result(change, SyncStatus.IGNORED, error="No after data")
    if not change.external_id:
        return _result(change, SyncStatus.INVALID, error="Missing headerId")
    if not change.header_number or not change.header_name:
        log.error(
            "Missing required fields on %s %s: header_number=%r header_name=%r",
            descriptor.entity_type,
            change.external_id,
            change.header_number,
            change.header_name,
        )
        return _result(
            change,
            SyncStatus.INVALID,
            error="Missing required fields: header_number or header_name",
        )

    # nulls are not written; stored values survive sparse events
    fields = {
        name: value
        for name, value in {**change.dynamic_fields, **change.row}.items()
        if value is not None
    }
    fields[descriptor.key_column] = change.external_id
    fields["header_number"] = change.header_number
    fields["header_name"] = change.header_name

    schema = SchemaEvolution(store)
    row = schema.ensure_columns(descriptor.table, fields)
    try:
        store.upsert(descriptor.table, [row], (descriptor.key_column,))
        parent_id = _header_row_id(store, descriptor, change.external_id)
    except StorageError as exc:
        log.error("Upsert of %s %s failed: %s", descriptor.entity_type, change.external_id, exc)
        return _result(change, SyncStatus.FAILED, error=str(exc))
    if parent_id is None:
        return _result(
            change,
            SyncStatus.FAILED,
            error=f"{descriptor.entity_type} row id not found after upsert",
        )
    log.info("Upserted %s %s with %d fields", descriptor.entity_type, change.external_id, len(row))

    reconciler = CollectionReconciler(store, schema)
    parent = ParentRef(descriptor.parent_column, parent_id)
    outcomes = [
        reconciler.reconcile(
            collection.table,
            parent,
            collection.unique_key,
            collection.current,
            collection.previous,
        )
        for collection in change.collections
    ]
    for outcome in outcomes:
        if not outcome.ok:
            log.warning(
                "Partial sync of %s %s: %s %s",
                descriptor.entity_type,
                change.external_id,
                outcome.table,
                outcome.error,
            )
    return _result(change, SyncStatus.OK, collections=outcomes)


def _soft_delete(
    change: HeaderChange,
    store: StoragePort,
    clock: Callable[[], datetime],
) -> EventResult:
    descriptor = change.descriptor
    if not change.external_id:
        return _result(change, SyncStatus.INVALID, error="Missing headerId for deletion")

    values = {
        descriptor.deleted_column: True,
        tables.RAW_PAYLOAD_COLUMN: dict(change.payload),
        descriptor.modified_column: clock(),
    }
    try:
        deleted = store.update(
            descriptor.table, values, {descriptor.key_column: change.external_id}
        )
        parent_id = _header_row_id(store, descriptor, change.external_id)
    except StorageError as exc:
        log.error(
            "Soft delete of %s %s failed: %s", descriptor.entity_type, change.external_id, exc
        )
        return _result(change, SyncStatus.FAILED, error=str(exc))
    if not deleted:
        log.warning("Delete for unknown %s %s", descriptor.entity_type, change.external_id)

    children: dict[str, int] = {}
    if parent_id is not None:
        schema = SchemaEvolution(store)
        for table in descriptor.child_tables:
            schema.ensure_columns(table, {descriptor.deleted_column: True})
            try:
                children[table] = store.update(
                    table,
                    {descriptor.deleted_column: True},
                    {descriptor.parent_column: parent_id},
                )
            except StorageError as exc:
                log.error("Soft delete of %s rows for %s failed: %s", table, parent_id, exc)
    log.info("Soft-deleted %s %s", descriptor.entity_type, change.external_id)
    return _result(
        change,
        SyncStatus.OK,
        action="deleted",
        details={"deleted": deleted, "children": children},
    )


def _header_row_id(store: StoragePort, descriptor: HeaderDescriptor, external_id: str) -> object:
    rows = store.fetch(descriptor.table, {descriptor.key_column: external_id}, ("id",))
    return rows[0]["id"] if rows else None
