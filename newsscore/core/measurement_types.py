"""Canonical measurement types and value normalisation helpers."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, FrozenSet

__all__ = [
    "DEFAULT_INTEGRAL_TYPES",
    "DEFAULT_REQUIRED_TYPES",
    "MeasurementType",
    "is_whole_number",
    "normalize_type",
    "to_decimal",
]


class MeasurementType(str, Enum):
    TEMP = "TEMP"
    HR = "HR"
    RR = "RR"


DEFAULT_REQUIRED_TYPES: FrozenSet[str] = frozenset(t.value for t in MeasurementType)
# Heart and respiratory rates are counted per minute.
DEFAULT_INTEGRAL_TYPES: FrozenSet[str] = frozenset({MeasurementType.HR.value, MeasurementType.RR.value})


def normalize_type(measurement_type: str) -> str:
    """Return the case-insensitive key used to match ranges."""

    return (measurement_type or "").strip().upper()


def to_decimal(value: Any) -> Decimal:
    """Coerce ints, floats and numeric strings to :class:`Decimal` without binary noise."""

    if isinstance(value, bool):
        raise TypeError("Boolean is not a numeric measurement")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation as exc:
            raise ValueError(f"Not a number: {value!r}") from exc
    if not result.is_finite():
        raise ValueError(f"Not a finite number: {value!r}")
    return result


def is_whole_number(value: Decimal) -> bool:
    return value == value.to_integral_value()
