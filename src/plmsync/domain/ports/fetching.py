"""Ports for fetching records from the PLM system."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from plmsync.domain.model import FolderSnapshot, MasterdataChoice, PlanSnapshot


class SourceError(RuntimeError):
    """Raised by PLM source adapters when a record cannot be fetched or decoded."""


@runtime_checkable
class PlanSource(Protocol):
    def fetch_plan(self, plan_id: str) -> PlanSnapshot:
        """Return the plan with its timeline templates or raise :class:`SourceError`."""
        ...

    def fetch_folder(self, folder_id: str) -> FolderSnapshot | None:
        """Return folder details, ``None`` when unknown or unreachable."""
        ...


@runtime_checkable
class MasterdataSource(Protocol):
    def __call__(self, field_id: str) -> list[MasterdataChoice]: ...


__all__ = ["MasterdataSource", "PlanSource", "SourceError"]
