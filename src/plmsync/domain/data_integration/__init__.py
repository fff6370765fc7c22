"""Application services applying PLM change events to the store."""

from __future__ import annotations

from .dependencies import receive_dependencies
from .headers import MATERIAL_HEADER, STYLE_HEADER, sync_header_event
from .masterdata import config_rows, sync_masterdata
from .sync_log import record_sync
from .tracking import TrackingSync, fallback_folder_row, folder_brand

__all__ = [
    "MATERIAL_HEADER",
    "STYLE_HEADER",
    "TrackingSync",
    "config_rows",
    "fallback_folder_row",
    "folder_brand",
    "receive_dependencies",
    "record_sync",
    "sync_header_event",
    "sync_masterdata",
]
