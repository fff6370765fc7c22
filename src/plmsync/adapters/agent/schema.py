"""Pydantic models for the dependency-extraction agent's callback payload."""

from __future__ import annotations

from plmsync.adapters.beproduct.schema import (
    BeProductBaseModel,
    LooseInt,
    LooseNumber,
    LooseStr,
    RawItems,
)


class DependencyItemPayload(BeProductBaseModel):
    row_number: LooseInt = None
    action_description: LooseStr = None
    department: LooseStr = None
    short_description: LooseStr = None
    share_with: LooseStr = None
    page: LooseStr = None
    days: LooseNumber = None
    depends_on: LooseStr = None
    duration: LooseNumber = None
    duration_unit: LooseStr = None
    relationship: LooseStr = None


class DependencyDeliveryPayload(BeProductBaseModel):
    plan_id: LooseStr = None
    folder_id: LooseStr = None
    tracking_url: LooseStr = None
    dependencies: RawItems = None
