"""Both phases of the dependency protocol against one in-memory store."""

from __future__ import annotations

from plmsync.adapters.agent import dependency_delivery
from plmsync.adapters.beproduct import tracking_event
from plmsync.adapters.beproduct.translator import plan_snapshot
from plmsync.domain.data_integration import TrackingSync, receive_dependencies
from plmsync.domain.dependency_graph import (
    END_DATE,
    START_DATE,
    DependencyGraphPopulator,
    bookend_timeline_id,
)
from plmsync.domain.model import SyncStatus
from tests.helpers.fakes import FakePlanSource, FakeRecalculator, FakeRequester, InMemoryStore
from tests.helpers.payloads import load_fixture


def _create_style(store: InMemoryStore, populator: DependencyGraphPopulator) -> None:
    plans = FakePlanSource(
        plans={"plan-1": plan_snapshot(load_fixture("plan.json"), plan_id="plan-1")}
    )
    sync = TrackingSync(store=store, plans=plans, dependencies=populator)
    result = sync.handle(tracking_event(load_fixture("tracking_on_create.json")))
    assert result.status is SyncStatus.OK


def _timeline(store: InMemoryStore, timeline_id: str) -> dict[str, object]:
    (row,) = store.fetch("tracking_plan_style_timeline", {"id": timeline_id})
    return row


def test_dependencies_flow_from_create_to_resolved_graph(memory_store: InMemoryStore) -> None:
    requester = FakeRequester()
    recalculator = FakeRecalculator(touched=4)
    populator = DependencyGraphPopulator(
        memory_store, requester=requester, recalculate=recalculator
    )
    _create_style(memory_store, populator)
    (request,) = requester.requests

    delivery = dependency_delivery(load_fixture("dependencies_delivery.json"))
    assert delivery.plan_id == request.plan_id
    result = receive_dependencies(delivery, populator=populator, store=memory_store)

    assert result.status is SyncStatus.OK
    assert result.dependencies_stored == 5
    assert result.resolution is not None
    assert result.resolution.unmatched == ["Bulk Cut"]
    start_id = bookend_timeline_id("ps-1", START_DATE)
    proto = _timeline(memory_store, "tl-1")
    fit = _timeline(memory_store, "tl-2")
    assert proto["row_number"] == 1
    assert proto["depends_on"] == START_DATE
    assert proto["dependency_uuid"] == start_id
    assert fit["row_number"] == 2
    assert fit["depends_on"] == "proto sample"
    assert fit["dependency_uuid"] == "tl-1"
    end = _timeline(memory_store, bookend_timeline_id("ps-1", END_DATE))
    assert end["row_number"] == 99
    assert result.recalculated == 4


def test_delivery_is_recorded_in_sync_log(memory_store: InMemoryStore) -> None:
    populator = DependencyGraphPopulator(memory_store)
    _create_style(memory_store, populator)
    payload = load_fixture("dependencies_delivery.json")

    receive_dependencies(dependency_delivery(payload), populator=populator, store=memory_store)

    entry = memory_store.table("beproduct_sync_log")[-1]
    assert entry["entity_type"] == "tracking_dependency"
    assert entry["entity_id"] == "plan-1"
    assert entry["action"] == "DependencyReceived"
    assert entry["payload"] == payload


def test_rejected_delivery_is_still_logged(memory_store: InMemoryStore) -> None:
    populator = DependencyGraphPopulator(memory_store)

    result = receive_dependencies(
        dependency_delivery({"plan_id": "plan-1"}), populator=populator, store=memory_store
    )

    assert result.status is SyncStatus.INVALID
    assert len(memory_store.table("beproduct_sync_log")) == 1
