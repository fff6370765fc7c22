"""Match dependency rows to one style's timeline milestones by name."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from plmsync.domain.model import DependencyRow


@dataclass(slots=True, frozen=True)
class TimelineLink:
    """Dependency attributes to write onto one timeline row."""

    timeline_id: object
    row_number: int | None
    depends_on: str | None
    dependency_uuid: object | None
    relationship: str | None

    def values(self) -> dict[str, object]:
        return {
            "row_number": self.row_number,
            "depends_on": self.depends_on,
            "dependency_uuid": self.dependency_uuid,
            "relationship": self.relationship,
        }


@dataclass(slots=True)
class StyleResolution:
    links: list[TimelineLink]
    unmatched: list[str]


def name_key(name: object) -> str | None:
    """Case-insensitive lookup key for a milestone name."""

    if not isinstance(name, str):
        return None
    key = name.strip().casefold()
    return key or None


def milestone_lookup(timelines: Iterable[Mapping[str, object]]) -> dict[str, object]:
    """Map each milestone name of one style onto its timeline id."""

    lookup: dict[str, object] = {}
    for timeline in timelines:
        key = name_key(timeline.get("milestone_name"))
        if key is not None:
            lookup.setdefault(key, timeline.get("id"))
    return lookup


def resolve_style(
    dependencies: Sequence[DependencyRow],
    timelines: Sequence[Mapping[str, object]],
) -> StyleResolution:
    """Link every timeline of one style to its predecessor within that style.

    A dependency whose name matches no timeline is reported as unmatched. A
    predecessor that cannot be found, or that would be the timeline itself,
    leaves ``dependency_uuid`` empty.
    """

    lookup = milestone_lookup(timelines)
    by_name: dict[str, list[Mapping[str, object]]] = {}
    for timeline in timelines:
        key = name_key(timeline.get("milestone_name"))
        if key is not None:
            by_name.setdefault(key, []).append(timeline)

    links: list[TimelineLink] = []
    unmatched: list[str] = []
    for dependency in dependencies:
        key = name_key(dependency.action_description)
        matches = by_name.get(key, []) if key is not None else []
        if not matches:
            unmatched.append(dependency.action_description)
            continue
        predecessor_key = name_key(dependency.depends_on)
        predecessor = lookup.get(predecessor_key) if predecessor_key is not None else None
        for timeline in matches:
            timeline_id = timeline.get("id")
            links.append(
                TimelineLink(
                    timeline_id=timeline_id,
                    row_number=dependency.row_number,
                    depends_on=dependency.depends_on,
                    dependency_uuid=predecessor if predecessor != timeline_id else None,
                    relationship=dependency.relationship,
                )
            )
    return StyleResolution(links=links, unmatched=unmatched)
