"""Storage identifier helpers."""

from __future__ import annotations

import re

_INVALID_CHARS = re.compile(r"[^a-z0-9_]")
_REPEATED_UNDERSCORES = re.compile(r"_+")


def sanitize_identifier(name: str) -> str:
    """Map an arbitrary external field name onto a safe, stable column name.

    The result only contains ``[a-z0-9_]``, has no leading, trailing or doubled
    underscores, and sanitizing it again yields the same string.
    """

    lowered = name.lower()
    replaced = _INVALID_CHARS.sub("_", lowered)
    collapsed = _REPEATED_UNDERSCORES.sub("_", replaced)
    return collapsed.strip("_")
