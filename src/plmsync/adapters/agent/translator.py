"""Translate agent callbacks into :class:`DependencyDelivery` records."""

from __future__ import annotations

from collections.abc import Mapping
from logging import getLogger
from typing import TYPE_CHECKING

from plmsync.domain.model import DependencyDelivery, DependencyRow

from .schema import DependencyDeliveryPayload, DependencyItemPayload

if TYPE_CHECKING:
    from collections.abc import Iterable

log = getLogger(__name__)


def dependency_rows(items: Iterable[object]) -> list[DependencyRow]:
    """Decode the agent's rows, dropping entries without an action description."""

    rows: list[DependencyRow] = []
    for index, item in enumerate(items):
        if not isinstance(item, Mapping):
            log.warning("Skipping dependency entry %d: not an object", index)
            continue
        dependency = DependencyItemPayload.model_validate(item)
        if not dependency.action_description:
            log.warning("Skipping dependency entry %d: no action_description", index)
            continue
        rows.append(
            DependencyRow(
                row_number=dependency.row_number,
                action_description=dependency.action_description,
                department=dependency.department,
                short_description=dependency.short_description,
                share_with=dependency.share_with,
                page=dependency.page,
                days=dependency.days,
                depends_on=dependency.depends_on,
                duration=dependency.duration,
                duration_unit=dependency.duration_unit,
                relationship=dependency.relationship,
            )
        )
    return rows


def dependency_delivery(payload: Mapping[str, object]) -> DependencyDelivery:
    delivery = DependencyDeliveryPayload.model_validate(payload)
    return DependencyDelivery(
        plan_id=delivery.plan_id or None,
        folder_id=delivery.folder_id,
        tracking_url=delivery.tracking_url,
        dependencies=dependency_rows(delivery.dependencies)
        if delivery.dependencies is not None
        else None,
        payload=payload,
    )
