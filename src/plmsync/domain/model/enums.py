"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class EventType(StrEnum):
    ON_CREATE = "OnCreate"
    ON_CHANGE = "OnChange"
    ON_COPY = "OnCopy"
    ON_DELETE = "OnDelete"

    @classmethod
    def parse(cls, value: object) -> EventType | None:
        if isinstance(value, str):
            try:
                return cls(value)
            except ValueError:
                return None
        return None

    @property
    def is_upsert(self) -> bool:
        return self in {EventType.ON_CREATE, EventType.ON_CHANGE, EventType.ON_COPY}


class SyncStatus(StrEnum):
    """Outcome class of one inbound event, mapped onto a transport status."""

    OK = "ok"
    IGNORED = "ignored"
    INVALID = "invalid"
    NOT_FOUND = "not_found"
    FAILED = "failed"

    @property
    def http_status(self) -> int:
        return _HTTP_STATUS[self]


_HTTP_STATUS: dict[SyncStatus, int] = {
    SyncStatus.OK: 200,
    SyncStatus.IGNORED: 200,
    SyncStatus.INVALID: 400,
    SyncStatus.NOT_FOUND: 404,
    SyncStatus.FAILED: 500,
}


class TimelineStatus(StrEnum):
    NOT_STARTED = "Not Started"
    IN_PROGRESS = "In Progress"
    APPROVED = "Approved"
    APPROVED_WITH_CORRECTIONS = "Approved with corrections"
    REJECTED = "Rejected"
    COMPLETE = "Complete"
    WAITING_ON = "Waiting On"
    NA = "NA"


_STATUS_ALIASES: dict[str, TimelineStatus] = {
    "not started": TimelineStatus.NOT_STARTED,
    "in progress": TimelineStatus.IN_PROGRESS,
    "approved": TimelineStatus.APPROVED,
    "approved with corrections": TimelineStatus.APPROVED_WITH_CORRECTIONS,
    "rejected": TimelineStatus.REJECTED,
    "complete": TimelineStatus.COMPLETE,
    "completed": TimelineStatus.COMPLETE,
    "waiting on": TimelineStatus.WAITING_ON,
    "na": TimelineStatus.NA,
    "n/a": TimelineStatus.NA,
}


def normalize_timeline_status(value: object) -> TimelineStatus:
    """Map a free-form BeProduct status onto the fixed vocabulary.

    Unknown or empty values fall back to ``Not Started``.
    """

    if not isinstance(value, str) or not value.strip():
        return TimelineStatus.NOT_STARTED
    key = value.strip().lower().replace("_", " ").replace("-", " ")
    return _STATUS_ALIASES.get(key, TimelineStatus.NOT_STARTED)
