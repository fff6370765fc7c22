from __future__ import annotations

from plmsync.domain.dependency_graph import DependencyGraphPopulator, bookend_timelines
from plmsync.domain.model import DependencyDelivery, DependencyRow, SyncStatus
from plmsync.domain.ports import DependencyRequest, StorageError
from tests.helpers.fakes import (
    FIXED_NOW,
    FakeRecalculator,
    FakeRequester,
    InMemoryStore,
    fixed_clock,
)

TEMPLATE = [
    DependencyRow(
        row_number=1, action_description="Proto Sample", depends_on="START DATE", relationship="FS"
    ),
    DependencyRow(row_number=2, action_description="Fit Approval", depends_on="Proto Sample"),
    DependencyRow(row_number=3, action_description="Bulk Cut", depends_on="Fit Approval"),
]


def _seed_plan(store: InMemoryStore, *styles: str) -> None:
    store.insert("tracking_plan", [{"id": "plan-1", "name": "Spring 26"}])
    for style in styles:
        store.insert("tracking_plan_style", [{"id": style, "plan_id": "plan-1"}])
        start, end = bookend_timelines(style, start_date=None, end_date=None)
        store.insert(
            "tracking_plan_style_timeline",
            [
                start,
                {"id": f"{style}-proto", "plan_style_id": style, "milestone_name": "Proto Sample"},
                {"id": f"{style}-fit", "plan_style_id": style, "milestone_name": "FIT APPROVAL"},
                end,
            ],
        )


def _timeline(store: InMemoryStore, timeline_id: str) -> dict[str, object]:
    (row,) = store.fetch("tracking_plan_style_timeline", {"id": timeline_id})
    return row


def _populator(
    store: InMemoryStore, recalculator: FakeRecalculator | None = None
) -> DependencyGraphPopulator:
    return DependencyGraphPopulator(store, recalculate=recalculator, clock=fixed_clock)


def test_request_hands_plan_to_agent() -> None:
    requester = FakeRequester()
    populator = DependencyGraphPopulator(InMemoryStore.with_base_tables(), requester=requester)

    assert populator.request("plan-1", "tf-1")
    assert requester.requests == [DependencyRequest(plan_id="plan-1", folder_id="tf-1")]


def test_request_reports_rejection_without_raising() -> None:
    populator = DependencyGraphPopulator(
        InMemoryStore.with_base_tables(), requester=FakeRequester(accepted=False)
    )

    assert not populator.request("plan-1", "tf-1")


def test_request_swallows_requester_errors() -> None:
    requester = FakeRequester(error=RuntimeError("event loop is closed"))
    populator = DependencyGraphPopulator(InMemoryStore.with_base_tables(), requester=requester)

    assert not populator.request("plan-1", "tf-1")
    assert len(requester.requests) == 1


def test_request_without_agent_is_skipped() -> None:
    assert not DependencyGraphPopulator(InMemoryStore.with_base_tables()).request("plan-1", "tf-1")


def test_deliver_replaces_template_with_bookends() -> None:
    store = InMemoryStore.with_base_tables()
    _seed_plan(store, "ps-1")
    store.insert(
        "tracking_plan_dependencies",
        [
            {"plan_id": "plan-1", "action_description": "Old"},
            {"plan_id": "plan-9", "action_description": "Other"},
        ],
    )

    result = _populator(store).deliver(DependencyDelivery(plan_id="plan-1", dependencies=TEMPLATE))

    assert result.ok
    assert result.dependencies_stored == 5
    stored = store.fetch("tracking_plan_dependencies", {"plan_id": "plan-1"})
    assert [row["action_description"] for row in stored] == [
        "START DATE",
        "Proto Sample",
        "Fit Approval",
        "Bulk Cut",
        "END DATE",
    ]
    assert store.fetch("tracking_plan_dependencies", {"plan_id": "plan-9"}) != []


def test_deliver_links_every_style_of_the_plan() -> None:
    store = InMemoryStore.with_base_tables()
    _seed_plan(store, "ps-1", "ps-2")

    result = _populator(store).deliver(DependencyDelivery(plan_id="plan-1", dependencies=TEMPLATE))

    assert result.resolution is not None
    assert result.resolution.styles == 2
    # START, Proto, Fit and END per style
    assert result.resolution.timelines_updated == 8
    assert result.resolution.unmatched == ["Bulk Cut"]
    for style in ("ps-1", "ps-2"):
        proto = _timeline(store, f"{style}-proto")
        fit = _timeline(store, f"{style}-fit")
        start_id = bookend_timelines(style, start_date=None, end_date=None)[0]["id"]
        assert proto["dependency_uuid"] == start_id
        assert proto["relationship"] == "FS"
        assert fit["dependency_uuid"] == f"{style}-proto"
        assert fit["row_number"] == 2
        assert fit["updated_at"] == FIXED_NOW


def test_deliver_is_idempotent() -> None:
    store = InMemoryStore.with_base_tables()
    _seed_plan(store, "ps-1")
    populator = _populator(store)
    delivery = DependencyDelivery(plan_id="plan-1", dependencies=TEMPLATE)

    populator.deliver(delivery)
    first = store.fetch("tracking_plan_style_timeline", {"plan_style_id": "ps-1"})
    populator.deliver(delivery)

    assert store.fetch("tracking_plan_style_timeline", {"plan_style_id": "ps-1"}) == first
    assert len(store.fetch("tracking_plan_dependencies", {"plan_id": "plan-1"})) == 5


def test_deliver_triggers_recalculation() -> None:
    store = InMemoryStore.with_base_tables()
    _seed_plan(store, "ps-1")
    recalculator = FakeRecalculator(touched=4)

    result = _populator(store, recalculator).deliver(
        DependencyDelivery(plan_id="plan-1", dependencies=TEMPLATE)
    )

    assert recalculator.calls == ["plan-1"]
    assert result.recalculated == 4
    assert result.to_payload()["recalculated"] == 4


def test_failing_recalculation_does_not_fail_delivery() -> None:
    store = InMemoryStore.with_base_tables()
    _seed_plan(store, "ps-1")
    recalculator = FakeRecalculator(error=StorageError("function missing"))

    result = _populator(store, recalculator).deliver(
        DependencyDelivery(plan_id="plan-1", dependencies=TEMPLATE)
    )

    assert result.status is SyncStatus.OK
    assert result.recalculated is None


def test_deliver_rejects_missing_plan_id() -> None:
    result = _populator(InMemoryStore.with_base_tables()).deliver(
        DependencyDelivery(plan_id=None, dependencies=TEMPLATE)
    )

    assert result.status is SyncStatus.INVALID
    assert result.http_status == 400
    assert result.error == "Missing plan_id"


def test_deliver_rejects_missing_dependency_list() -> None:
    result = _populator(InMemoryStore.with_base_tables()).deliver(
        DependencyDelivery(plan_id="plan-1", dependencies=None)
    )

    assert result.status is SyncStatus.INVALID
    assert result.error == "Missing or invalid dependencies array"


def test_deliver_for_unknown_plan_is_not_found() -> None:
    store = InMemoryStore.with_base_tables()

    result = _populator(store).deliver(DependencyDelivery(plan_id="plan-x", dependencies=TEMPLATE))

    assert result.status is SyncStatus.NOT_FOUND
    assert result.http_status == 404
    assert store.table("tracking_plan_dependencies") == []


def test_failed_replace_keeps_previous_template() -> None:
    store = InMemoryStore.with_base_tables()
    _seed_plan(store, "ps-1")
    store.insert("tracking_plan_dependencies", [{"plan_id": "plan-1", "action_description": "Old"}])
    store.fail("replace", "tracking_plan_dependencies")

    result = _populator(store).deliver(DependencyDelivery(plan_id="plan-1", dependencies=TEMPLATE))

    assert result.status is SyncStatus.FAILED
    assert result.http_status == 500
    assert [row["action_description"] for row in store.table("tracking_plan_dependencies")] == [
        "Old"
    ]


def test_resolve_without_styles_is_empty() -> None:
    store = InMemoryStore.with_base_tables()
    store.insert("tracking_plan", [{"id": "plan-1"}])

    summary = _populator(store).resolve("plan-1", TEMPLATE)

    assert summary.styles == 0
    assert summary.timelines_updated == 0


def test_resolve_keeps_going_after_failed_link() -> None:
    store = InMemoryStore.with_base_tables()
    _seed_plan(store, "ps-1")
    store.fail("update", "tracking_plan_style_timeline")

    summary = _populator(store).resolve("plan-1", TEMPLATE)

    assert summary.timelines_updated == 0
    assert len(summary.failures) == 2
