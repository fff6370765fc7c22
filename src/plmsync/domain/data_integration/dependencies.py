from __future__ import annotations

from typing import TYPE_CHECKING, Final

from plmsync.domain.model import SyncLogEntry

from .sync_log import record_sync

if TYPE_CHECKING:
    from plmsync.domain.dependency_graph import DependencyGraphPopulator
    from plmsync.domain.model import DeliveryResult, DependencyDelivery
    from plmsync.domain.ports import StoragePort

ENTITY_TYPE: Final = "tracking_dependency"
ACTION: Final = "DependencyReceived"


def receive_dependencies(
    delivery: DependencyDelivery,
    *,
    populator: DependencyGraphPopulator,
    store: StoragePort,
) -> DeliveryResult:
    """Run phase two for ``delivery`` and append it to the sync log."""

    result = populator.deliver(delivery)
    record_sync(
        store,
        SyncLogEntry(
            entity_type=ENTITY_TYPE,
            entity_id=delivery.plan_id,
            action=ACTION,
            payload=delivery.payload,
        ),
    )
    return result
