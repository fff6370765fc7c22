"""BeProduct PLM adapter: webhook payload translation and API lookups."""

from __future__ import annotations

from .client import BeProductAPIError, BeProductClient
from .fetcher import BeProductMasterdataSource, BeProductPlanSource
from .translator import material_change, style_change, tracking_event

__all__ = [
    "BeProductAPIError",
    "BeProductClient",
    "BeProductMasterdataSource",
    "BeProductPlanSource",
    "material_change",
    "style_change",
    "tracking_event",
]
