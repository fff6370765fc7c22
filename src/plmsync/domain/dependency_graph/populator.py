"""Two-phase population of a plan's dependency graph.

Phase one asks an external agent to extract the dependency template of a
plan, using the plan id as correlation id. Phase two receives that template
later, replaces the stored template and links every style's timeline rows to
their predecessors. No state is held between the phases.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from plmsync.domain.clock import utc_now
from plmsync.domain.model import DeliveryResult, ResolutionSummary, SyncStatus
from plmsync.domain.model import layout as tables
from plmsync.domain.ports import DependencyRequest, StorageError

from .bookends import with_bookends
from .resolution import resolve_style

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from datetime import datetime

    from plmsync.domain.model import DependencyDelivery, DependencyRow
    from plmsync.domain.ports import DateRecalculator, DependencyRequester, StoragePort

log = getLogger(__name__)


@dataclass(slots=True)
class DependencyGraphPopulator:
    store: StoragePort
    requester: DependencyRequester | None = None
    recalculate: DateRecalculator | None = None
    clock: Callable[[], datetime] = utc_now

    def request(self, plan_id: str, folder_id: str) -> bool:
        """Fire phase one. Never fails the caller."""

        if self.requester is None:
            log.info("No dependency agent configured, plan %s stays unresolved", plan_id)
            return False
        try:
            handed_over = self.requester(DependencyRequest(plan_id=plan_id, folder_id=folder_id))
        except Exception:
            log.exception("Dependency request for plan %s raised", plan_id)
            return False
        if not handed_over:
            log.warning("Dependency request for plan %s was not accepted", plan_id)
        return handed_over

    def deliver(self, delivery: DependencyDelivery) -> DeliveryResult:
        """Store a delivered template, resolve it per style and recalculate dates."""

        plan_id = delivery.plan_id
        if not plan_id:
            return DeliveryResult(status=SyncStatus.INVALID, plan_id=None, error="Missing plan_id")
        if delivery.dependencies is None:
            return DeliveryResult(
                status=SyncStatus.INVALID,
                plan_id=plan_id,
                error="Missing or invalid dependencies array",
            )

        try:
            found = self.store.fetch(tables.TRACKING_PLAN, {"id": plan_id}, ("id",))
        except StorageError as exc:
            log.error("Could not look up plan %s: %s", plan_id, exc)
            return DeliveryResult(status=SyncStatus.FAILED, plan_id=plan_id, error=str(exc))
        if not found:
            log.warning("Dependencies delivered for unknown plan %s", plan_id)
            return DeliveryResult(
                status=SyncStatus.NOT_FOUND, plan_id=plan_id, error="Plan not found"
            )

        template = with_bookends(delivery.dependencies)
        try:
            stored = self.store.replace(
                tables.TRACKING_DEPENDENCIES,
                {"plan_id": plan_id},
                [row.as_row(plan_id) for row in template],
            )
        except StorageError as exc:
            log.error("Replacing dependencies of plan %s failed: %s", plan_id, exc)
            return DeliveryResult(status=SyncStatus.FAILED, plan_id=plan_id, error=str(exc))
        log.info("Stored %d dependencies for plan %s", stored, plan_id)

        summary = self.resolve(plan_id, template)
        return DeliveryResult(
            status=SyncStatus.OK,
            plan_id=plan_id,
            dependencies_stored=len(template),
            resolution=summary,
            recalculated=self.recalculate_dates(plan_id),
        )

    def resolve(self, plan_id: str, template: Sequence[DependencyRow]) -> ResolutionSummary:
        """Link timeline rows of every style of the plan. Failures stay local."""

        summary = ResolutionSummary()
        try:
            styles = self.store.fetch(tables.TRACKING_PLAN_STYLE, {"plan_id": plan_id}, ("id",))
        except StorageError as exc:
            log.error("Could not list styles of plan %s: %s", plan_id, exc)
            summary.failures.append(f"styles: {exc}")
            return summary
        if not styles:
            log.warning("No styles found for plan %s", plan_id)
            return summary

        unmatched: set[str] | None = None
        for style in styles:
            style_id = style["id"]
            try:
                timelines = self.store.fetch(
                    tables.TRACKING_TIMELINE,
                    {"plan_style_id": style_id},
                    ("id", "milestone_name"),
                )
            except StorageError as exc:
                log.error("Could not load timelines of style %s: %s", style_id, exc)
                summary.failures.append(f"style {style_id}: {exc}")
                continue
            summary.styles += 1

            resolution = resolve_style(template, timelines)
            missing = set(resolution.unmatched)
            unmatched = missing if unmatched is None else unmatched & missing
            now = self.clock()
            for link in resolution.links:
                try:
                    self.store.update(
                        tables.TRACKING_TIMELINE,
                        {**link.values(), "updated_at": now},
                        {"id": link.timeline_id},
                    )
                except StorageError as exc:
                    log.error("Could not link timeline %s: %s", link.timeline_id, exc)
                    summary.failures.append(f"timeline {link.timeline_id}: {exc}")
                    continue
                summary.timelines_updated += 1

        summary.unmatched = sorted(unmatched or ())
        log.info(
            "Linked %d timelines across %d styles of plan %s (%d names unmatched)",
            summary.timelines_updated,
            summary.styles,
            plan_id,
            len(summary.unmatched),
        )
        return summary

    def recalculate_dates(self, plan_id: str) -> int | None:
        if self.recalculate is None:
            return None
        try:
            touched = self.recalculate(plan_id)
        except StorageError as exc:
            log.error("Date recalculation for plan %s failed: %s", plan_id, exc)
            return None
        log.info("Recalculated start dates of %d timelines for plan %s", touched, plan_id)
        return touched
