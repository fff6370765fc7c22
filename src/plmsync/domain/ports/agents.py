"""Ports for external agents and procedures the sync services trigger."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(slots=True, frozen=True)
class DependencyRequest:
    """Phase one of the dependency protocol. ``plan_id`` is the correlation id."""

    plan_id: str
    folder_id: str


@runtime_checkable
class DependencyRequester(Protocol):
    """Ask the extraction agent for a plan's dependency list.

    Returns whether the request was handed over. Implementations must not raise.
    """

    def __call__(self, request: DependencyRequest) -> bool: ...


@runtime_checkable
class DateRecalculator(Protocol):
    """Opaque date propagation for a plan; returns the number of rows touched."""

    def __call__(self, plan_id: str) -> int: ...


__all__ = ["DateRecalculator", "DependencyRequest", "DependencyRequester"]
