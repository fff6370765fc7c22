"""Application orchestration entry points.

Each handler takes one decoded JSON payload as the HTTP layer receives it and
returns a result whose ``http_status`` and ``to_payload()`` form the response.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import ValidationError

from plmsync.adapters.agent import DependencyAgentClient, dependency_delivery
from plmsync.adapters.beproduct import (
    BeProductMasterdataSource,
    BeProductPlanSource,
    material_change,
    style_change,
    tracking_event,
)
from plmsync.adapters.sqlalchemy import (
    SqlDateRecalculator,
    configured_engine,
    configured_store,
    is_started,
    startup,
)
from plmsync.config import (
    ConfigurationError,
    get_beproduct_config,
    get_database_config,
    get_dependency_agent_config,
    get_sync_config,
)
from plmsync.domain.data_integration import (
    TrackingSync,
    receive_dependencies,
    sync_header_event,
    sync_masterdata,
)
from plmsync.domain.dependency_graph import DependencyGraphPopulator
from plmsync.domain.model import DeliveryResult, EventResult, SyncStatus

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from plmsync.domain.model import MasterdataSyncResult
    from plmsync.domain.ports import (
        DateRecalculator,
        DependencyRequester,
        MasterdataSource,
        PlanSource,
        StoragePort,
    )

log = getLogger(__name__)


def initialize_database() -> None:
    """Start the SQLAlchemy adapter, which migrates the base schema to head."""

    if not is_started():
        startup()


def default_store() -> StoragePort:
    initialize_database()
    return configured_store()


def default_plan_source() -> PlanSource | None:
    try:
        return BeProductPlanSource(config=get_beproduct_config())
    except ConfigurationError as exc:
        log.warning("BeProduct is not configured, plans cannot be fetched: %s", exc)
        return None


def default_requester() -> DependencyRequester | None:
    try:
        return DependencyAgentClient(config=get_dependency_agent_config())
    except ConfigurationError as exc:
        log.warning("Dependency agent is not configured: %s", exc)
        return None


def default_recalculator() -> DateRecalculator | None:
    engine = configured_engine()
    if engine is None:
        return None
    return SqlDateRecalculator(
        engine,
        function_name=get_sync_config().recalculation_function,
        schema=get_database_config().schema,
    )


def build_populator(
    store: StoragePort,
    *,
    requester: DependencyRequester | None = None,
    recalculate: DateRecalculator | None = None,
) -> DependencyGraphPopulator:
    return DependencyGraphPopulator(
        store=store,
        requester=requester if requester is not None else default_requester(),
        recalculate=recalculate if recalculate is not None else default_recalculator(),
    )


def _invalid_event(entity_type: str, exc: ValidationError) -> EventResult:
    log.error("Rejected %s payload: %s", entity_type, exc)
    return EventResult(
        status=SyncStatus.INVALID,
        entity_type=entity_type,
        error=f"Invalid payload: {exc.error_count()} validation errors",
    )


def handle_material_event(
    payload: Mapping[str, object],
    *,
    store: StoragePort | None = None,
) -> EventResult:
    try:
        change = material_change(payload)
    except ValidationError as exc:
        return _invalid_event("material", exc)
    result = sync_header_event(change, store=store if store is not None else default_store())
    log.info("Material %s %s: %s", change.external_id, change.raw_event_type, result.status)
    return result


def handle_style_event(
    payload: Mapping[str, object],
    *,
    store: StoragePort | None = None,
) -> EventResult:
    try:
        change = style_change(payload)
    except ValidationError as exc:
        return _invalid_event("style", exc)
    result = sync_header_event(change, store=store if store is not None else default_store())
    log.info("Style %s %s: %s", change.external_id, change.raw_event_type, result.status)
    return result


def handle_tracking_event(
    payload: Mapping[str, object],
    *,
    store: StoragePort | None = None,
    plans: PlanSource | None = None,
    populator: DependencyGraphPopulator | None = None,
) -> EventResult:
    try:
        event = tracking_event(payload)
    except ValidationError as exc:
        return _invalid_event("tracking", exc)
    effective_store = store if store is not None else default_store()
    sync = TrackingSync(
        store=effective_store,
        plans=plans if plans is not None else default_plan_source(),
        dependencies=populator if populator is not None else build_populator(effective_store),
    )
    result = sync.handle(event)
    log.info("Tracking %s %s: %s", event.header_id, event.raw_event_type, result.status)
    return result


def handle_dependency_delivery(
    payload: Mapping[str, object],
    *,
    store: StoragePort | None = None,
    populator: DependencyGraphPopulator | None = None,
) -> DeliveryResult:
    try:
        delivery = dependency_delivery(payload)
    except ValidationError as exc:
        log.error("Rejected dependency delivery: %s", exc)
        return DeliveryResult(
            status=SyncStatus.INVALID, plan_id=None, error="Invalid dependency payload"
        )
    effective_store = store if store is not None else default_store()
    result = receive_dependencies(
        delivery,
        populator=populator if populator is not None else build_populator(effective_store),
        store=effective_store,
    )
    log.info(
        "Dependencies for plan %s: status=%s, stored=%s",
        delivery.plan_id,
        result.status,
        result.dependencies_stored,
    )
    return result


def run_masterdata_sync(
    *,
    fields: Iterable[str] | None = None,
    source: MasterdataSource | None = None,
    store: StoragePort | None = None,
) -> MasterdataSyncResult:
    """Mirror the configured masterdata fields into ``app_config``."""

    effective_fields = tuple(fields) if fields is not None else get_sync_config().masterdata_fields
    effective_source = (
        source
        if source is not None
        else BeProductMasterdataSource(config=get_beproduct_config())
    )
    log.info("Starting masterdata sync for %d fields", len(effective_fields))
    result = sync_masterdata(
        effective_fields,
        source=effective_source,
        store=store if store is not None else default_store(),
    )
    log.info("Finished masterdata sync: synced=%s, ok=%s", result.synced, result.ok)
    return result
