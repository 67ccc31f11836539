"""Administration of the score range table."""
from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Union

from ...core.catalog import InMemoryRangeCatalog
from ...core.models import ScoreRange
from ..repositories.range_repo import RangeRepository

logger = logging.getLogger(__name__)

AdminCatalog = Union[RangeRepository, InMemoryRangeCatalog]


class RangeService:
    """Thin layer over a range catalog used by the admin endpoints."""

    def list_ranges(self, repo: AdminCatalog, measurement_type: Optional[str] = None) -> List[ScoreRange]:
        if measurement_type:
            return repo.list_by_type(measurement_type)
        return repo.list_all()

    def create_ranges(self, repo: AdminCatalog, ranges: Sequence[ScoreRange]) -> List[ScoreRange]:
        if not ranges:
            logger.warning("Create ranges request received with no ranges")
            raise ValueError("At least one range is required")
        return repo.add_many(ranges)

    def update_range(self, repo: AdminCatalog, range_id: int, candidate: ScoreRange) -> ScoreRange:
        return repo.update(range_id, candidate)

    def delete_range(self, repo: AdminCatalog, range_id: int) -> None:
        repo.remove(range_id)

    def delete_ranges(self, repo: AdminCatalog, ids: Sequence[int]) -> None:
        if not ids:
            raise ValueError("At least one id is required")
        repo.remove_many(ids)


range_service = RangeService()
