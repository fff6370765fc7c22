"""Synchronization defaults for webhook and masterdata services."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var

DEFAULT_RECALCULATION_FUNCTION = "calculate_timeline_start_dates"
DEFAULT_MASTERDATA_FIELDS: tuple[str, ...] = (
    "product_type",
    "delivery",
    "gender",
    "product_category",
    "year",
    "season",
    "fabric_group",
    "classification",
    "status",
    "account_manager",
    "senior_product_developer",
    "color_number_ls",
)


@dataclass(frozen=True, slots=True)
class SyncConfig:
    recalculation_function: str = DEFAULT_RECALCULATION_FUNCTION
    masterdata_fields: tuple[str, ...] = DEFAULT_MASTERDATA_FIELDS


def get_sync_config() -> SyncConfig:
    function_name = optional_env_var("PLMSYNC_RECALCULATION_FUNCTION")
    if function_name is None:
        return SyncConfig()
    return SyncConfig(recalculation_function=function_name)
