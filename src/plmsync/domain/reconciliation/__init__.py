"""Before/after reconciliation of nested child collections."""

from __future__ import annotations

from .engine import CollectionReconciler, ReconcileOutcome
from .plan import CollectionKey, CollectionPlan, collection_key, plan_collection

__all__ = [
    "CollectionKey",
    "CollectionPlan",
    "CollectionReconciler",
    "ReconcileOutcome",
    "collection_key",
    "plan_collection",
]
