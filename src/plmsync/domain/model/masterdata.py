"""Masterdata choice lists mirrored into application configuration."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True, kw_only=True)
class MasterdataChoice:
    id: str | None
    code: str | None
    value: str | None
    allowed_for: tuple[str, ...] | None = None
    active: bool = True

    @property
    def key(self) -> str | None:
        return self.code or self.id
