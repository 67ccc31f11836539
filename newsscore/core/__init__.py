"""Scoring core: range catalog and score engine, free of any storage or HTTP concern."""

from .catalog import InMemoryRangeCatalog, RangeCatalog, standard_ranges
from .engine import ScoreEngine, calculate
from .measurement_types import MeasurementType
from .models import Measurement, ScoreRange, ScoreResult, ValidationError, ValidationErrorKind

__all__ = [
    "InMemoryRangeCatalog",
    "Measurement",
    "MeasurementType",
    "RangeCatalog",
    "ScoreEngine",
    "ScoreRange",
    "ScoreResult",
    "ValidationError",
    "ValidationErrorKind",
    "calculate",
    "standard_ranges",
]
