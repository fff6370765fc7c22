"""Synthetic START DATE / END DATE entries framing every plan."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final
from uuid import NAMESPACE_URL, uuid5

from plmsync.domain.model import DependencyRow, TimelineStatus

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import date

    from plmsync.domain.model import Row

START_DATE: Final = "START DATE"
END_DATE: Final = "END DATE"
START_ROW_NUMBER: Final = 0
END_ROW_NUMBER: Final = 99
BOOKEND_DEPARTMENT: Final = "PLAN"

_BOOKEND_NAMESPACE = uuid5(NAMESPACE_URL, "https://plmsync/tracking/bookend")


def _bookend(row_number: int, name: str) -> DependencyRow:
    return DependencyRow(
        row_number=row_number,
        department=BOOKEND_DEPARTMENT,
        action_description=name,
        short_description=name,
        days=0,
        duration=0,
    )


START_DEPENDENCY: Final = _bookend(START_ROW_NUMBER, START_DATE)
END_DEPENDENCY: Final = _bookend(END_ROW_NUMBER, END_DATE)


def with_bookends(rows: Iterable[DependencyRow]) -> list[DependencyRow]:
    """Frame delivered rows with the start and end bookends."""

    return [START_DEPENDENCY, *rows, END_DEPENDENCY]


def bookend_timeline_id(plan_style_id: str, name: str) -> str:
    """Stable id of a synthesized milestone, so redelivered events overwrite it."""

    return str(uuid5(_BOOKEND_NAMESPACE, f"{plan_style_id}:{name}"))


def bookend_timelines(
    plan_style_id: str,
    *,
    start_date: date | None,
    end_date: date | None,
) -> list[Row]:
    return [
        _bookend_timeline(
            plan_style_id,
            START_DEPENDENCY,
            status=TimelineStatus.COMPLETE,
            on=start_date,
            source="tracking_plan.start_date",
        ),
        _bookend_timeline(
            plan_style_id,
            END_DEPENDENCY,
            status=TimelineStatus.NOT_STARTED,
            on=end_date,
            source="tracking_plan.end_date",
        ),
    ]


def _bookend_timeline(
    plan_style_id: str,
    dependency: DependencyRow,
    *,
    status: TimelineStatus,
    on: date | None,
    source: str,
) -> Row:
    name = dependency.action_description
    return {
        "id": bookend_timeline_id(plan_style_id, name),
        "plan_style_id": plan_style_id,
        "template_item_id": None,
        "status": status.value,
        "plan_date": on,
        "due_date": on,
        "late": False,
        "milestone_name": name,
        "milestone_short_name": name,
        "dept_customer": dependency.department,
        "row_number": dependency.row_number,
        "depends_on": None,
        "relationship": None,
        "raw_payload": {"synthesized": True, "source": source},
    }
