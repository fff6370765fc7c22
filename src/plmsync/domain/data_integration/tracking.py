"""Tracking plan-style events: folder, plan, plan-style and milestone rows."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Final

from plmsync.domain.clock import utc_now
from plmsync.domain.dependency_graph import bookend_timelines
from plmsync.domain.model import EventResult, EventType, ParentRef, SyncLogEntry, SyncStatus
from plmsync.domain.model import layout as tables
from plmsync.domain.ports import SourceError, StorageError
from plmsync.domain.reconciliation import CollectionReconciler
from plmsync.domain.schema_evolution import SchemaEvolution

from .sync_log import record_sync

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from plmsync.domain.dependency_graph import DependencyGraphPopulator
    from plmsync.domain.model import PlanSnapshot, Row, TrackingEvent
    from plmsync.domain.ports import PlanSource, StoragePort

log = getLogger(__name__)

ENTITY_TYPE: Final = "tracking"
ASSIGNMENT_KEY: Final = "assignee_id"


def folder_brand(folder_name: str | None) -> str | None:
    """Brand is the first word of a tracking folder name ("GREYSON MENS")."""

    if not folder_name:
        return None
    parts = folder_name.split()
    return parts[0] if parts else None


def fallback_folder_row(folder_id: str, folder_name: str | None) -> Row:
    return {
        "id": folder_id,
        "name": folder_name,
        "brand": folder_brand(folder_name),
        "style_folder_id": None,
        "style_folder_name": None,
        "active": True,
        "raw_payload": None,
    }


@dataclass(slots=True)
class TrackingSync:
    """Handle plan-style events of tracking plans.

    ``OnCreate`` stores folder, plan, plan-style and milestones and fires the
    dependency request; ``OnChange`` updates one milestone; ``OnDelete``
    deactivates the plan-style.
    """

    store: StoragePort
    plans: PlanSource | None
    dependencies: DependencyGraphPopulator
    clock: Callable[[], datetime] = utc_now
    schema: SchemaEvolution = field(init=False)
    reconciler: CollectionReconciler = field(init=False)

    def __post_init__(self) -> None:
        self.schema = SchemaEvolution(self.store)
        self.reconciler = CollectionReconciler(self.store, self.schema)

    def handle(self, event: TrackingEvent) -> EventResult:
        match event.event_type:
            case EventType.ON_CREATE:
                result = self._on_create(event)
            case EventType.ON_CHANGE:
                result = self._on_change(event)
            case EventType.ON_DELETE:
                result = self._on_delete(event)
            case _:
                log.info("Ignoring tracking event %r", event.raw_event_type)
                result = self._result(event, SyncStatus.IGNORED, error="Unsupported eventType")
        if result.status in {SyncStatus.INVALID, SyncStatus.FAILED}:
            log.error(
                "Tracking %s for %s failed: %s", event.raw_event_type, event.header_id, result.error
            )

        record_sync(
            self.store,
            SyncLogEntry(
                entity_type=ENTITY_TYPE,
                entity_id=event.header_id,
                action=event.raw_event_type or "unknown",
                payload=event.payload,
            ),
        )
        return result

    def _result(
        self,
        event: TrackingEvent,
        status: SyncStatus,
        *,
        error: str | None = None,
        details: dict[str, object] | None = None,
    ) -> EventResult:
        return EventResult(
            status=status,
            entity_type=ENTITY_TYPE,
            entity_id=event.header_id,
            action=event.raw_event_type,
            error=error,
            details=details or {},
        )

    def _on_create(self, event: TrackingEvent) -> EventResult:
        if event.plan_style is None or not event.plan_style_id:
            return self._result(
                event, SyncStatus.INVALID, error="Missing 'after' data in OnCreate event"
            )
        if not event.plan_id or not event.folder_id:
            return self._result(event, SyncStatus.INVALID, error="Missing planId or planFolderId")
        plan_id = event.plan_id
        plan_style_id = event.plan_style_id

        error = self._ensure_folder(event.folder_id, event.folder_name)
        if error is not None:
            return self._result(event, SyncStatus.FAILED, error=error)
        plan, error = self._fetch_plan(plan_id)
        if plan is None:
            return self._result(event, SyncStatus.FAILED, error=error)
        error = self._write(tables.TRACKING_PLAN, plan.row, what=f"plan {plan_id}")
        if error is not None:
            return self._result(event, SyncStatus.FAILED, error=error)
        requested = self.dependencies.request(plan_id, event.folder_id)
        error = self._write(
            tables.TRACKING_PLAN_STYLE, event.plan_style, what=f"plan style {plan_style_id}"
        )
        if error is not None:
            return self._result(event, SyncStatus.FAILED, error=error)

        start, end = bookend_timelines(
            plan_style_id, start_date=plan.start_date, end_date=plan.end_date
        )
        milestones = [
            {**milestone.row, **_template_columns(plan, milestone.template_item_id)}
            for milestone in event.milestones
        ]
        timelines = [start, *milestones, end]
        self.schema.ensure_columns_for_rows(tables.TRACKING_TIMELINE, timelines)
        failures: list[str] = []
        for timeline in timelines:
            try:
                self.store.upsert(tables.TRACKING_TIMELINE, [timeline], ("id",))
            except StorageError as exc:
                log.error("Upsert of timeline %s failed: %s", timeline.get("id"), exc)
                failures.append(f"timeline {timeline.get('id')}: {exc}")

        result = self._result(event, SyncStatus.OK)
        for milestone in event.milestones:
            outcome = self.reconciler.reconcile(
                tables.TRACKING_ASSIGNMENT,
                ParentRef("timeline_id", milestone.timeline_id),
                ASSIGNMENT_KEY,
                milestone.assignments,
            )
            if outcome.upserted or not outcome.ok:
                result.collections.append(outcome)

        result.details = {
            "plan_id": plan_id,
            "plan_style_id": plan_style_id,
            "timelines": len(timelines) - len(failures),
            "dependencies_requested": requested,
            "recalculated": self.dependencies.recalculate_dates(plan_id),
        }
        if failures:
            result.details["failures"] = failures
        return result

    def _on_change(self, event: TrackingEvent) -> EventResult:
        change = event.item_change
        if change is None:
            log.warning("OnChange for %s without before/after TimeLineItem", event.header_id)
            return self._result(
                event, SyncStatus.IGNORED, error="Missing before/after TimeLineItem data"
            )

        values = self.schema.ensure_columns(
            tables.TRACKING_TIMELINE, {**change.values, "updated_at": self.clock()}
        )
        try:
            updated = self.store.update(
                tables.TRACKING_TIMELINE, values, {"id": change.timeline_id}
            )
        except StorageError as exc:
            return self._result(
                event, SyncStatus.FAILED, error=f"Failed to update timeline: {exc}"
            )
        if not updated:
            log.warning("Timeline %s is not stored yet", change.timeline_id)

        outcome = self.reconciler.reconcile(
            tables.TRACKING_ASSIGNMENT,
            ParentRef("timeline_id", change.timeline_id),
            ASSIGNMENT_KEY,
            change.current_assignments,
            change.previous_assignments,
        )

        plan_id = self._owning_plan(change.timeline_id)
        recalculated = self.dependencies.recalculate_dates(plan_id) if plan_id else None
        result = self._result(
            event,
            SyncStatus.OK,
            details={
                "timeline_id": change.timeline_id,
                "plan_id": plan_id,
                "recalculated": recalculated,
            },
        )
        result.collections.append(outcome)
        return result

    def _on_delete(self, event: TrackingEvent) -> EventResult:
        if not event.plan_style_id:
            log.warning("OnDelete for %s without before data", event.header_id)
            return self._result(event, SyncStatus.IGNORED, error="Missing before data")
        try:
            self.store.update(
                tables.TRACKING_PLAN_STYLE, {"active": False}, {"id": event.plan_style_id}
            )
        except StorageError as exc:
            return self._result(
                event, SyncStatus.FAILED, error=f"Failed to soft delete style: {exc}"
            )
        log.info("Deactivated plan style %s", event.plan_style_id)
        return self._result(event, SyncStatus.OK, details={"plan_style_id": event.plan_style_id})

    def _ensure_folder(self, folder_id: str, folder_name: str | None) -> str | None:
        try:
            existing = self.store.fetch(
                tables.TRACKING_FOLDER, {"id": folder_id}, ("id", "name", "style_folder_name")
            )
        except StorageError as exc:
            log.warning("Could not read folder %s: %s", folder_id, exc)
            existing = []
        if existing and existing[0].get("style_folder_name"):
            return None

        log.info("Folder %s missing or incomplete, fetching details", folder_id)
        snapshot = self.plans.fetch_folder(folder_id) if self.plans is not None else None
        row = snapshot.row if snapshot is not None else fallback_folder_row(folder_id, folder_name)
        return self._write(tables.TRACKING_FOLDER, row, what=f"folder {folder_id}")

    def _fetch_plan(self, plan_id: str) -> tuple[PlanSnapshot | None, str | None]:
        if self.plans is None:
            return None, "No plan source configured"
        try:
            return self.plans.fetch_plan(plan_id), None
        except SourceError as exc:
            return None, f"Failed to fetch plan: {exc}"

    def _write(self, table: str, row: Row, *, what: str) -> str | None:
        values = self.schema.ensure_columns(table, row)
        try:
            self.store.upsert(table, [values], ("id",))
        except StorageError as exc:
            return f"Failed to upsert {what}: {exc}"
        return None

    def _owning_plan(self, timeline_id: str) -> str | None:
        try:
            timelines = self.store.fetch(
                tables.TRACKING_TIMELINE, {"id": timeline_id}, ("plan_style_id",)
            )
            if not timelines or timelines[0].get("plan_style_id") is None:
                return None
            styles = self.store.fetch(
                tables.TRACKING_PLAN_STYLE, {"id": timelines[0]["plan_style_id"]}, ("plan_id",)
            )
        except StorageError as exc:
            log.warning("Could not find the plan of timeline %s: %s", timeline_id, exc)
            return None
        plan_id = styles[0].get("plan_id") if styles else None
        return str(plan_id) if plan_id is not None else None


def _template_columns(plan: PlanSnapshot, template_item_id: str | None) -> dict[str, object]:
    template = plan.template_for(template_item_id)
    if template is None:
        return {}
    return dict(template.columns)
