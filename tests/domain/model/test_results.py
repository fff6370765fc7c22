from __future__ import annotations

from plmsync.domain.model import (
    DeliveryResult,
    EventResult,
    FieldSyncResult,
    MasterdataSyncResult,
    ResolutionSummary,
    SyncStatus,
)
from plmsync.domain.reconciliation import ReconcileOutcome


def test_event_result_payload_lists_collections_and_details() -> None:
    result = EventResult(
        status=SyncStatus.OK,
        entity_type="material",
        entity_id="mat-1",
        action="OnChange",
        collections=[
            ReconcileOutcome(table="material_tag", upserted=2, deleted_keys=("old",)),
            ReconcileOutcome(table="material_supplier", errors=["upsert failed: boom"]),
        ],
        details={"extra": 1},
    )

    assert result.ok
    assert [outcome.table for outcome in result.partial_failures] == ["material_supplier"]
    assert result.to_payload() == {
        "ok": True,
        "status": "ok",
        "entity_type": "material",
        "entity_id": "mat-1",
        "action": "OnChange",
        "collections": {
            "material_tag": {"upserted": 2, "deleted": ["old"], "deleted_all": False},
            "material_supplier": {
                "upserted": 0,
                "deleted": [],
                "deleted_all": False,
                "errors": ["upsert failed: boom"],
            },
        },
        "extra": 1,
    }


def test_ignored_event_is_ok_but_not_reported_as_applied() -> None:
    result = EventResult(status=SyncStatus.IGNORED, entity_type="style", error="No after data")

    assert result.ok
    assert result.http_status == 200
    assert result.to_payload()["ok"] is False


def test_delivery_result_payload() -> None:
    result = DeliveryResult(
        status=SyncStatus.OK,
        plan_id="plan-1",
        dependencies_stored=5,
        resolution=ResolutionSummary(styles=1, timelines_updated=4),
    )

    assert result.to_payload() == {
        "ok": True,
        "status": "ok",
        "plan_id": "plan-1",
        "dependencies_stored": 5,
        "timelines_updated": 4,
    }


def test_masterdata_result_aggregates_fields() -> None:
    result = MasterdataSyncResult(
        fields={"a": FieldSyncResult(synced=3), "b": FieldSyncResult(errors=["down"])}
    )

    assert result.synced == 3
    assert not result.ok
