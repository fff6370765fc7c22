"""Names of the persisted tables and their identifying columns."""

from __future__ import annotations

from typing import Final

MATERIAL: Final = "material"
MATERIAL_COLORWAY: Final = "material_colorway"
MATERIAL_SIZE_RANGE: Final = "material_size_range"
MATERIAL_SUPPLIER: Final = "material_supplier"
MATERIAL_TAG: Final = "material_tag"
MATERIAL_PLAN_LINK: Final = "material_plan_link"

STYLE: Final = "style"
STYLE_COLORWAY: Final = "style_colorway"
STYLE_SIZE_CLASS: Final = "style_size_class"

TRACKING_FOLDER: Final = "tracking_folder"
TRACKING_PLAN: Final = "tracking_plan"
TRACKING_PLAN_STYLE: Final = "tracking_plan_style"
TRACKING_TIMELINE: Final = "tracking_plan_style_timeline"
TRACKING_DEPENDENCIES: Final = "tracking_plan_dependencies"
TRACKING_ASSIGNMENT: Final = "tracking_timeline_assignment"

SYNC_LOG: Final = "beproduct_sync_log"
APP_CONFIG: Final = "app_config"

RAW_PAYLOAD_COLUMN: Final = "raw_beproduct_data"
