"""Outcome records returned by the sync services."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .enums import SyncStatus

if TYPE_CHECKING:
    from plmsync.domain.reconciliation import ReconcileOutcome


@dataclass(slots=True, kw_only=True)
class EventResult:
    """Result of handling one inbound change event."""

    status: SyncStatus
    entity_type: str
    entity_id: str | None = None
    action: str | None = None
    error: str | None = None
    collections: list[ReconcileOutcome] = field(default_factory=list["ReconcileOutcome"])
    details: dict[str, object] = field(default_factory=dict[str, object])

    @property
    def ok(self) -> bool:
        return self.status in {SyncStatus.OK, SyncStatus.IGNORED}

    @property
    def http_status(self) -> int:
        return self.status.http_status

    @property
    def partial_failures(self) -> list[ReconcileOutcome]:
        return [outcome for outcome in self.collections if not outcome.ok]

    def to_payload(self) -> dict[str, object]:
        body: dict[str, object] = {
            "ok": self.status is SyncStatus.OK,
            "status": self.status.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
        }
        if self.action is not None:
            body["action"] = self.action
        if self.error is not None:
            body["error"] = self.error
        if self.collections:
            body["collections"] = {
                outcome.table: outcome.to_payload() for outcome in self.collections
            }
        body.update(self.details)
        return body


@dataclass(slots=True)
class ResolutionSummary:
    """Counters of one dependency resolution pass over a plan's styles."""

    styles: int = 0
    timelines_updated: int = 0
    unmatched: list[str] = field(default_factory=list[str])
    failures: list[str] = field(default_factory=list[str])


@dataclass(slots=True, kw_only=True)
class DeliveryResult:
    """Result of receiving one dependency delivery."""

    status: SyncStatus
    plan_id: str | None
    dependencies_stored: int = 0
    resolution: ResolutionSummary | None = None
    recalculated: int | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is SyncStatus.OK

    @property
    def http_status(self) -> int:
        return self.status.http_status

    def to_payload(self) -> dict[str, object]:
        body: dict[str, object] = {
            "ok": self.ok,
            "status": self.status.value,
            "plan_id": self.plan_id,
        }
        if self.error is not None:
            body["error"] = self.error
        if self.ok:
            body["dependencies_stored"] = self.dependencies_stored
        if self.resolution is not None:
            body["timelines_updated"] = self.resolution.timelines_updated
        if self.recalculated is not None:
            body["recalculated"] = self.recalculated
        return body


@dataclass(slots=True)
class FieldSyncResult:
    synced: int = 0
    errors: list[str] = field(default_factory=list[str])


@dataclass(slots=True)
class MasterdataSyncResult:
    fields: dict[str, FieldSyncResult] = field(default_factory=dict[str, FieldSyncResult])

    @property
    def ok(self) -> bool:
        return all(not result.errors for result in self.fields.values())

    @property
    def synced(self) -> int:
        return sum(result.synced for result in self.fields.values())
