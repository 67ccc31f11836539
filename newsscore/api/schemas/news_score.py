"""Pydantic schemas for score calculation and range administration."""
from __future__ import annotations

from decimal import Decimal
from typing import Annotated, List, Optional

from pydantic import BaseModel, Field, PlainSerializer
from pydantic.config import ConfigDict
from pydantic.functional_validators import field_validator

from ...core.models import Measurement, ScoreRange, ValidationError

# Decimals travel as JSON numbers, not strings.
JsonDecimal = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class MeasurementIn(BaseModel):
    type: str = Field(..., min_length=1, max_length=10)
    value: Decimal

    @field_validator("value")
    @classmethod
    def ensure_finite(cls, value: Decimal) -> Decimal:
        if not value.is_finite():
            raise ValueError("value must be a finite number")
        return value

    def to_domain(self) -> Measurement:
        return Measurement(type=self.type, value=self.value)


class NewsScoreRequest(BaseModel):
    measurements: List[MeasurementIn] = Field(default_factory=list)


class NewsScoreResponse(BaseModel):
    score: int


class RangeInfo(BaseModel):
    min_value: JsonDecimal
    max_value: JsonDecimal


class ValidationErrorOut(BaseModel):
    error: str
    measurement_type: str
    invalid_value: JsonDecimal
    available_ranges: List[RangeInfo] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, error: ValidationError) -> "ValidationErrorOut":
        return cls(
            error=error.message,
            measurement_type=error.measurement_type,
            invalid_value=error.invalid_value,
            available_ranges=[RangeInfo(min_value=low, max_value=high) for low, high in error.available_ranges],
        )


class ValidationErrorsResponse(BaseModel):
    errors: List[ValidationErrorOut]


class ScoreRangeIn(BaseModel):
    id: Optional[int] = None
    measurement_type: str = Field(default="", max_length=10)
    min_value: Decimal
    max_value: Decimal
    score: int

    model_config = ConfigDict(extra="forbid")

    def to_domain(self) -> ScoreRange:
        return ScoreRange(
            measurement_type=self.measurement_type,
            min_value=self.min_value,
            max_value=self.max_value,
            score=self.score,
        )


class ScoreRangeOut(BaseModel):
    id: int
    measurement_type: str
    min_value: JsonDecimal
    max_value: JsonDecimal
    score: int

    @classmethod
    def from_domain(cls, item: ScoreRange) -> "ScoreRangeOut":
        return cls(
            id=item.id,
            measurement_type=item.measurement_type,
            min_value=item.min_value,
            max_value=item.max_value,
            score=item.score,
        )


class CreateRangesRequest(BaseModel):
    ranges: List[ScoreRangeIn] = Field(default_factory=list)


class RangeErrorsResponse(BaseModel):
    errors: List[str]
