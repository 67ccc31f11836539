"""Score engine: validate a batch of measurements and sum the matched range scores."""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Iterable, List, Optional, Sequence

from .catalog import RangeCatalog
from .errors import CalculationCancelled
from .measurement_types import DEFAULT_INTEGRAL_TYPES, is_whole_number, normalize_type
from .models import Measurement, ScoreResult, ValidationError

__all__ = ["ScoreEngine", "calculate"]

logger = logging.getLogger(__name__)


async def _resolve(result: Any) -> Any:
    if inspect.isawaitable(result):
        return await result
    return result


class ScoreEngine:
    """Stateless scorer; every call only reads from the catalog it is given."""

    def __init__(self, integral_types: Iterable[str] = DEFAULT_INTEGRAL_TYPES):
        self.integral_types = frozenset(normalize_type(t) for t in integral_types)

    async def calculate(
        self,
        measurements: Sequence[Measurement],
        catalog: RangeCatalog,
        *,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> ScoreResult:
        """Score *measurements* in order, collecting one error per unusable measurement.

        Invalid measurements contribute nothing and never stop the batch. Storage
        failures raised by the catalog propagate unchanged.
        """

        errors: List[ValidationError] = []
        total = 0
        for position, measurement in enumerate(measurements):
            if cancel_event is not None and cancel_event.is_set():
                raise CalculationCancelled(
                    f"Calculation cancelled after {position} of {len(measurements)} measurements"
                )
            key = normalize_type(measurement.type)

            if key in self.integral_types and not is_whole_number(measurement.value):
                logger.warning(
                    "Invalid decimal value for %s: %s. Must be a whole number.",
                    measurement.type,
                    measurement.value,
                )
                errors.append(ValidationError.non_integral(measurement))
                continue

            match = await _resolve(catalog.lookup(key, measurement.value))
            if match is None:
                logger.warning(
                    "Value %s for %s is outside defined ranges.", measurement.value, measurement.type
                )
                available = await _resolve(catalog.list_by_type(key))
                errors.append(ValidationError.out_of_range(measurement, list(available)))
                continue
            total += match.score

        if not errors:
            logger.info(
                "Calculated NEWS score %s for %s measurements", total, len(measurements)
            )
        return ScoreResult(total_score=total, errors=errors)


_default_engine = ScoreEngine()


async def calculate(
    measurements: Sequence[Measurement],
    catalog: RangeCatalog,
    *,
    cancel_event: Optional[asyncio.Event] = None,
) -> ScoreResult:
    return await _default_engine.calculate(measurements, catalog, cancel_event=cancel_event)
