"""Exceptions raised by the range catalog and the score engine."""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable, List, Sequence, Tuple

__all__ = [
    "CalculationCancelled",
    "InvalidRangeError",
    "LookupUnavailableError",
    "MeasurementRequestError",
    "NewsScoreError",
    "NotFoundError",
    "OverlapError",
    "RangeBatchError",
]

Bounds = Tuple[Decimal, Decimal]


class NewsScoreError(Exception):
    """Base class for every error raised by the package."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class InvalidRangeError(NewsScoreError):
    """A proposed range has ``min_value >= max_value`` or no measurement type."""


class OverlapError(NewsScoreError):
    """A proposed range intersects stored ranges of the same measurement type."""

    def __init__(self, measurement_type: str, proposed: Bounds, conflicts: Sequence[Bounds]):
        self.measurement_type = measurement_type
        self.proposed = proposed
        self.conflicts = list(conflicts)
        super().__init__("; ".join(self.messages()))

    def messages(self) -> List[str]:
        low, high = self.proposed
        return [
            f"Range for {self.measurement_type} ({low}, {high}] overlaps with existing range ({c_low}, {c_high}]"
            for c_low, c_high in self.conflicts
        ]


class NotFoundError(NewsScoreError):
    """One or more range ids do not exist."""

    def __init__(self, missing_ids: Iterable[int]):
        self.missing_ids = list(missing_ids)
        if len(self.missing_ids) == 1:
            message = f"Range with id {self.missing_ids[0]} not found"
        else:
            message = f"Ranges with ids {', '.join(str(i) for i in self.missing_ids)} not found"
        super().__init__(message)


class RangeBatchError(NewsScoreError):
    """Bulk creation rejected; ``errors`` holds every problem found in the batch."""

    def __init__(self, errors: Sequence[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class LookupUnavailableError(NewsScoreError):
    """The range storage could not be queried."""


class CalculationCancelled(NewsScoreError):
    """A score calculation was aborted through its cancel signal."""


class MeasurementRequestError(NewsScoreError):
    """The batch of measurements is unusable as a whole (empty, missing types)."""
