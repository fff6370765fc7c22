"""Flattened change records handed from payload translators to sync services."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .enums import EventType

type Row = dict[str, object]


@dataclass(slots=True, frozen=True)
class ParentRef:
    """Identity of the header that owns a child collection."""

    column: str
    id: object


@dataclass(slots=True, frozen=True)
class HeaderDescriptor:
    """Static persistence layout of one kind of entity header."""

    entity_type: str
    table: str
    key_column: str
    parent_column: str
    child_tables: tuple[str, ...]
    deleted_column: str = "deleted"
    modified_column: str = "beproduct_modified_at"


@dataclass(slots=True, kw_only=True)
class CollectionChange:
    """Before/after snapshot of one nested collection, already flattened.

    ``current`` is ``None`` when the collection is absent from the event and
    ``previous`` is ``None`` when no before snapshot was sent.
    """

    table: str
    unique_key: str
    current: list[Row] | None
    previous: list[Row] | None = None


@dataclass(slots=True, kw_only=True)
class HeaderChange:
    descriptor: HeaderDescriptor
    event_type: EventType | None
    raw_event_type: str | None
    external_id: str | None
    header_number: str | None = None
    header_name: str | None = None
    has_after: bool = False
    row: Row = field(default_factory=dict[str, object])
    dynamic_fields: Row = field(default_factory=dict[str, object])
    collections: list[CollectionChange] = field(default_factory=list["CollectionChange"])
    payload: Mapping[str, object] = field(default_factory=dict[str, object])


@dataclass(slots=True, frozen=True)
class SyncLogEntry:
    entity_type: str
    entity_id: str | None
    action: str
    payload: Mapping[str, object]

    def as_row(self) -> Row:
        return {
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "action": self.action,
            "payload": dict(self.payload),
        }
