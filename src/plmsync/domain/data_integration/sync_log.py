from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from plmsync.domain.model import layout as tables
from plmsync.domain.ports import StorageError

if TYPE_CHECKING:
    from plmsync.domain.model import SyncLogEntry
    from plmsync.domain.ports import StoragePort

log = getLogger(__name__)


def record_sync(store: StoragePort, entry: SyncLogEntry) -> bool:
    """Append ``entry`` to the audit log; a failing store is logged, not raised."""

    try:
        store.insert(tables.SYNC_LOG, [entry.as_row()])
    except StorageError as exc:
        log.error(
            "Could not record %s %s for %s: %s",
            entry.entity_type,
            entry.action,
            entry.entity_id,
            exc,
        )
        return False
    return True
