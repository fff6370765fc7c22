"""Domain records for PLM change events and their sync outcomes."""

from __future__ import annotations

from .changes import (
    CollectionChange,
    HeaderChange,
    HeaderDescriptor,
    ParentRef,
    Row,
    SyncLogEntry,
)
from .dependencies import DependencyDelivery, DependencyRow
from .enums import EventType, SyncStatus, TimelineStatus, normalize_timeline_status
from .masterdata import MasterdataChoice
from .results import (
    DeliveryResult,
    EventResult,
    FieldSyncResult,
    MasterdataSyncResult,
    ResolutionSummary,
)
from .tracking import (
    FolderSnapshot,
    MilestoneSnapshot,
    PlanSnapshot,
    TimelineItemChange,
    TimelineTemplate,
    TrackingEvent,
)

__all__ = [
    "CollectionChange",
    "DeliveryResult",
    "DependencyDelivery",
    "DependencyRow",
    "EventResult",
    "EventType",
    "FieldSyncResult",
    "FolderSnapshot",
    "HeaderChange",
    "HeaderDescriptor",
    "MasterdataChoice",
    "MasterdataSyncResult",
    "MilestoneSnapshot",
    "ParentRef",
    "PlanSnapshot",
    "ResolutionSummary",
    "Row",
    "SyncLogEntry",
    "SyncStatus",
    "TimelineItemChange",
    "TimelineStatus",
    "TimelineTemplate",
    "TrackingEvent",
    "normalize_timeline_status",
]
