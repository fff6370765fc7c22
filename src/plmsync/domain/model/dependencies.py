"""Dependency rows delivered by the extraction agent."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .changes import Row


@dataclass(slots=True, frozen=True, kw_only=True)
class DependencyRow:
    """One milestone entry of a plan's dependency template."""

    row_number: int | None
    action_description: str
    department: str | None = None
    short_description: str | None = None
    share_with: str | None = None
    page: str | None = None
    days: float | None = None
    depends_on: str | None = None
    duration: float | None = None
    duration_unit: str | None = None
    relationship: str | None = None

    def as_row(self, plan_id: str) -> Row:
        return {"plan_id": plan_id, **asdict(self)}


@dataclass(slots=True, kw_only=True)
class DependencyDelivery:
    """Phase two of the dependency protocol, keyed by the plan id.

    ``dependencies`` is ``None`` when the payload carried no usable list.
    """

    plan_id: str | None
    folder_id: str | None = None
    tracking_url: str | None = None
    dependencies: list[DependencyRow] | None = None
    payload: Mapping[str, object] = field(default_factory=dict[str, object])
