"""Mirror PLM masterdata choice lists into the application config table."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Final

from plmsync.domain.clock import utc_now
from plmsync.domain.model import FieldSyncResult, MasterdataSyncResult
from plmsync.domain.model import layout as tables
from plmsync.domain.ports import SourceError, StorageError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from datetime import datetime

    from plmsync.domain.model import MasterdataChoice, Row
    from plmsync.domain.ports import MasterdataSource, StoragePort

log = getLogger(__name__)

CONFIG_KEY: Final = ("category", "key")


def sync_masterdata(
    fields: Iterable[str],
    *,
    source: MasterdataSource,
    store: StoragePort,
    clock: Callable[[], datetime] = utc_now,
) -> MasterdataSyncResult:
    """Upsert every choice of every field; one failing field does not stop the rest."""

    result = MasterdataSyncResult()
    for field_id in fields:
        outcome = result.fields[field_id] = FieldSyncResult()
        try:
            choices = source(field_id)
        except SourceError as exc:
            log.error("Error syncing %s: %s", field_id, exc)
            outcome.errors.append(str(exc))
            continue

        rows = config_rows(field_id, choices, synced_at=clock())
        if not rows:
            log.info("No choices for %s", field_id)
            continue
        try:
            outcome.synced = store.upsert(tables.APP_CONFIG, rows, CONFIG_KEY)
        except StorageError as exc:
            log.error("Batch upsert for %s failed: %s", field_id, exc)
            outcome.errors.append(f"Batch upsert failed: {exc}")
            continue
        log.info("Synced %d values for %s", outcome.synced, field_id)
    return result


def config_rows(
    field_id: str,
    choices: Iterable[MasterdataChoice],
    *,
    synced_at: datetime,
) -> list[Row]:
    """Build one config row per usable choice, the last duplicate key winning."""

    rows: dict[str, Row] = {}
    for choice in choices:
        key = choice.key
        if key is None or not (choice.value or choice.code):
            continue
        rows[key] = {
            "category": field_id,
            "key": key,
            "value": choice.value or "",
            "is_active": choice.active,
            "allowed_for": list(choice.allowed_for) if choice.allowed_for is not None else None,
            "last_synced_at": synced_at,
            "updated_at": synced_at,
            "config_type": "enum",
            "data_type": "text",
        }
    return list(rows.values())
