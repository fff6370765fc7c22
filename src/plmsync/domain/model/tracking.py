"""Tracking plans, plan-styles and their timeline milestones."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import date

    from .changes import Row
    from .enums import EventType


@dataclass(slots=True, frozen=True)
class TimelineTemplate:
    """Milestone metadata from a plan's timeline schema, keyed by template item id."""

    template_item_id: str
    columns: Mapping[str, object]


@dataclass(slots=True, kw_only=True)
class PlanSnapshot:
    plan_id: str
    row: Row
    start_date: date | None = None
    end_date: date | None = None
    templates: dict[str, TimelineTemplate] = field(default_factory=dict[str, TimelineTemplate])

    def template_for(self, template_item_id: str | None) -> TimelineTemplate | None:
        if template_item_id is None:
            return None
        return self.templates.get(template_item_id)


@dataclass(slots=True, kw_only=True)
class FolderSnapshot:
    folder_id: str
    name: str | None
    row: Row


@dataclass(slots=True, kw_only=True)
class MilestoneSnapshot:
    timeline_id: str
    template_item_id: str | None
    row: Row
    assignments: list[Row] = field(default_factory=list["Row"])


@dataclass(slots=True, kw_only=True)
class TimelineItemChange:
    """One changed milestone of an existing plan-style.

    Assignment snapshots follow the collection convention: ``None`` when absent.
    """

    timeline_id: str
    values: Row
    current_assignments: list[Row] | None
    previous_assignments: list[Row] | None


@dataclass(slots=True, kw_only=True)
class TrackingEvent:
    event_type: EventType | None
    raw_event_type: str | None
    header_id: str | None
    plan_id: str | None = None
    folder_id: str | None = None
    folder_name: str | None = None
    plan_style_id: str | None = None
    plan_style: Row | None = None
    milestones: list[MilestoneSnapshot] = field(default_factory=list["MilestoneSnapshot"])
    item_change: TimelineItemChange | None = None
    payload: Mapping[str, object] = field(default_factory=dict[str, object])
