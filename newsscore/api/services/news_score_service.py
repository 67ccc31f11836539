"""Score calculation orchestration: request policy in front of the score engine."""
from __future__ import annotations

import asyncio
import logging
from typing import Iterable, List, Optional, Sequence

from ...core.catalog import RangeCatalog
from ...core.engine import ScoreEngine
from ...core.errors import MeasurementRequestError
from ...core.measurement_types import normalize_type
from ...core.models import Measurement, ScoreResult
from ..core.config import settings

logger = logging.getLogger(__name__)


class NewsScoreService:
    """Check the batch as a whole, then delegate per-measurement scoring to the engine."""

    def __init__(
        self,
        *,
        engine: Optional[ScoreEngine] = None,
        required_types: Optional[Iterable[str]] = None,
    ) -> None:
        self.engine = engine or ScoreEngine(settings.integral_types)
        types = settings.required_types if required_types is None else required_types
        self.required_types = tuple(normalize_type(t) for t in types)

    def missing_types(self, measurements: Sequence[Measurement]) -> List[str]:
        provided = {normalize_type(m.type) for m in measurements}
        return [kind for kind in self.required_types if kind not in provided]

    def check_request(self, measurements: Sequence[Measurement]) -> None:
        if not measurements:
            logger.warning("Calculate score request received with no measurements")
            raise MeasurementRequestError("Measurements are required")
        missing = self.missing_types(measurements)
        if missing:
            logger.warning("Calculate score request missing measurement types: %s", ", ".join(missing))
            raise MeasurementRequestError(
                f"All measurement types ({', '.join(self.required_types)}) are required. "
                f"Missing: {', '.join(missing)}"
            )

    async def calculate(
        self,
        catalog: RangeCatalog,
        measurements: Sequence[Measurement],
        *,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> ScoreResult:
        self.check_request(measurements)
        result = await self.engine.calculate(measurements, catalog, cancel_event=cancel_event)
        if result.errors:
            logger.warning("Score calculation failed with %s validation errors", len(result.errors))
        return result


news_score_service = NewsScoreService()
