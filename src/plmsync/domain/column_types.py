"""Storage type inference for dynamically discovered fields."""

from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal
from enum import StrEnum


class ColumnType(StrEnum):
    BOOLEAN = "boolean"
    INTEGER = "integer"
    DECIMAL = "decimal"
    JSON = "json"
    TEXT = "text"


def infer_column_type(value: object) -> ColumnType:
    """Return the storage type a column for ``value`` should be created with.

    ``None`` maps to TEXT so that a nullable column can still be created.
    """

    if value is None:
        return ColumnType.TEXT
    # bool is a subclass of int, so it has to be checked first
    if isinstance(value, bool):
        return ColumnType.BOOLEAN
    if isinstance(value, int):
        return ColumnType.INTEGER
    if isinstance(value, float | Decimal):
        return ColumnType.INTEGER if _is_integral(value) else ColumnType.DECIMAL
    if isinstance(value, Mapping | list | tuple):
        return ColumnType.JSON
    return ColumnType.TEXT


def _is_integral(value: float | Decimal) -> bool:
    if isinstance(value, float):
        return value.is_integer()
    return value.is_finite() and value == value.to_integral_value()
