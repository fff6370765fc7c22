"""Pure before/after comparison of one child collection."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from plmsync.domain.model import Row

type CollectionKey = str | int | float


@dataclass(slots=True, kw_only=True)
class CollectionPlan:
    """Writes needed to bring stored children in line with ``current``.

    ``delete_all`` is set when the incoming collection is explicitly empty while
    the before snapshot still had keys; ``removed_keys`` is then irrelevant.
    """

    upserts: list[Row] = field(default_factory=list["Row"])
    removed_keys: tuple[CollectionKey, ...] = ()
    delete_all: bool = False
    skipped: int = 0

    @property
    def is_noop(self) -> bool:
        return not self.upserts and not self.removed_keys and not self.delete_all


def collection_key(row: Mapping[str, object], unique_key: str) -> CollectionKey | None:
    """Return the row's unique key, ``None`` when absent, empty or not a scalar."""

    value = row.get(unique_key)
    if isinstance(value, bool) or not isinstance(value, str | int | float):
        return None
    if isinstance(value, str) and not value.strip():
        return None
    return value


def plan_collection(
    unique_key: str,
    current: Sequence[Row],
    previous: Sequence[Mapping[str, object]] | None,
) -> CollectionPlan:
    """Derive upserts and deletions from two snapshots of a collection.

    Deletions are only inferred when ``previous`` is given. A key present on
    both sides is an update.
    """

    plan = CollectionPlan()
    incoming: set[CollectionKey] = set()
    for row in current:
        key = collection_key(row, unique_key)
        if key is None:
            plan.skipped += 1
            continue
        incoming.add(key)
        plan.upserts.append(row)

    if previous is None:
        return plan

    previous_keys = _unique_keys(previous, unique_key)
    if not current and previous_keys:
        plan.delete_all = True
        return plan
    plan.removed_keys = tuple(key for key in previous_keys if key not in incoming)
    return plan


def _unique_keys(
    rows: Iterable[Mapping[str, object]], unique_key: str
) -> list[CollectionKey]:
    keys: list[CollectionKey] = []
    for row in rows:
        key = collection_key(row, unique_key)
        if key is not None and key not in keys:
            keys.append(key)
    return keys
