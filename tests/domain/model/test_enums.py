from __future__ import annotations

import pytest

from plmsync.domain.model import EventType, SyncStatus, TimelineStatus, normalize_timeline_status


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("in_progress", TimelineStatus.IN_PROGRESS),
        ("In Progress", TimelineStatus.IN_PROGRESS),
        ("approved-with-corrections", TimelineStatus.APPROVED_WITH_CORRECTIONS),
        ("APPROVED", TimelineStatus.APPROVED),
        ("completed", TimelineStatus.COMPLETE),
        ("n/a", TimelineStatus.NA),
        ("waiting_on", TimelineStatus.WAITING_ON),
        ("something else", TimelineStatus.NOT_STARTED),
        ("", TimelineStatus.NOT_STARTED),
        (None, TimelineStatus.NOT_STARTED),
        (3, TimelineStatus.NOT_STARTED),
    ],
)
def test_normalize_timeline_status(raw: object, expected: TimelineStatus) -> None:
    assert normalize_timeline_status(raw) is expected


def test_event_type_parse_rejects_unknown_values() -> None:
    assert EventType.parse("OnCopy") is EventType.ON_COPY
    assert EventType.parse("OnArchive") is None
    assert EventType.parse(None) is None


def test_event_type_upsert_kinds() -> None:
    assert EventType.ON_CREATE.is_upsert
    assert EventType.ON_COPY.is_upsert
    assert not EventType.ON_DELETE.is_upsert


def test_sync_status_maps_onto_http_status() -> None:
    assert [status.http_status for status in SyncStatus] == [200, 200, 400, 404, 500]
