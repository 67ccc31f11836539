"""Domain records shared by the catalog, the engine and the API layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Tuple

from .errors import InvalidRangeError
from .measurement_types import is_whole_number, to_decimal


@dataclass(frozen=True)
class Measurement:
    type: str
    value: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", to_decimal(self.value))


def _whole_score(score) -> int:
    try:
        value = to_decimal(score)
    except (TypeError, ValueError) as exc:
        raise InvalidRangeError(f"score must be an integer, got {score!r}") from exc
    if not is_whole_number(value):
        raise InvalidRangeError(f"score must be an integer, got {score!r}")
    return int(value)


@dataclass(frozen=True)
class ScoreRange:
    """Scored interval ``(min_value, max_value]`` for one measurement type."""

    measurement_type: str
    min_value: Decimal
    max_value: Decimal
    score: int
    id: Optional[int] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "min_value", to_decimal(self.min_value))
        object.__setattr__(self, "max_value", to_decimal(self.max_value))
        object.__setattr__(self, "score", _whole_score(self.score))

    @property
    def bounds(self) -> Tuple[Decimal, Decimal]:
        return self.min_value, self.max_value

    def contains(self, value: Decimal) -> bool:
        return self.min_value < value <= self.max_value

    def overlaps(self, other: "ScoreRange") -> bool:
        return self.min_value < other.max_value and self.max_value > other.min_value


class ValidationErrorKind(str, Enum):
    NON_INTEGRAL_VALUE = "non_integral_value"
    OUT_OF_RANGE = "out_of_range"


@dataclass(frozen=True)
class ValidationError:
    """Per-measurement problem reported alongside the score, never raised."""

    kind: ValidationErrorKind
    message: str
    measurement_type: str
    invalid_value: Decimal
    available_ranges: List[Tuple[Decimal, Decimal]] = field(default_factory=list)

    @classmethod
    def non_integral(cls, measurement: Measurement) -> "ValidationError":
        return cls(
            kind=ValidationErrorKind.NON_INTEGRAL_VALUE,
            message=(
                f"Invalid value {measurement.value} for measurement type {measurement.type}. "
                f"{measurement.type} must be a whole number (integer)."
            ),
            measurement_type=measurement.type,
            invalid_value=measurement.value,
        )

    @classmethod
    def out_of_range(cls, measurement: Measurement, ranges: List[ScoreRange]) -> "ValidationError":
        return cls(
            kind=ValidationErrorKind.OUT_OF_RANGE,
            message=(
                f"Invalid value {measurement.value} for measurement type {measurement.type}. "
                "Value is outside defined ranges."
            ),
            measurement_type=measurement.type,
            invalid_value=measurement.value,
            available_ranges=[r.bounds for r in sorted(ranges, key=lambda r: r.min_value)],
        )


@dataclass(frozen=True)
class ScoreResult:
    total_score: int
    errors: List[ValidationError] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors
