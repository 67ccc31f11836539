"""Range catalog contract, overlap validation and the in-memory catalog."""

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from decimal import Decimal
from typing import Awaitable, Dict, Iterable, List, Optional, Protocol, Sequence, Tuple, Union

from .errors import InvalidRangeError, NotFoundError, OverlapError, RangeBatchError
from .measurement_types import normalize_type
from .models import ScoreRange

__all__ = [
    "InMemoryRangeCatalog",
    "RangeCatalog",
    "STANDARD_RANGES",
    "check_bounds",
    "find_overlaps",
    "prepare_range",
    "ranges_overlap",
    "standard_ranges",
    "validate_batch",
]

logger = logging.getLogger(__name__)

MaybeAwaitable = Union[ScoreRange, None, Awaitable[Optional[ScoreRange]]]


class RangeCatalog(Protocol):
    """Read side of a range catalog, as consumed by the score engine.

    Implementations may return plain values or awaitables.
    """

    def lookup(self, measurement_type: str, value: Decimal) -> MaybeAwaitable: ...

    def list_by_type(self, measurement_type: str) -> Union[List[ScoreRange], Awaitable[List[ScoreRange]]]: ...


# (type, min, max, score): reference NEWS table for temperature, heart and respiratory rate.
STANDARD_RANGES: Tuple[Tuple[str, int, int, int], ...] = (
    ("TEMP", 31, 35, 3),
    ("TEMP", 35, 36, 1),
    ("TEMP", 36, 38, 0),
    ("TEMP", 38, 39, 1),
    ("TEMP", 39, 42, 2),
    ("HR", 25, 40, 3),
    ("HR", 40, 50, 1),
    ("HR", 50, 90, 0),
    ("HR", 90, 110, 1),
    ("HR", 110, 130, 2),
    ("HR", 130, 220, 3),
    ("RR", 3, 8, 3),
    ("RR", 8, 11, 1),
    ("RR", 11, 20, 0),
    ("RR", 20, 24, 2),
    ("RR", 24, 60, 3),
)


def standard_ranges() -> List[ScoreRange]:
    return [
        ScoreRange(measurement_type=kind, min_value=low, max_value=high, score=score)
        for kind, low, high, score in STANDARD_RANGES
    ]


def ranges_overlap(min1: Decimal, max1: Decimal, min2: Decimal, max2: Decimal) -> bool:
    return min1 < max2 and max1 > min2


def check_bounds(candidate: ScoreRange) -> None:
    """Raise :class:`InvalidRangeError` for an empty interval or a missing type."""

    if candidate.min_value >= candidate.max_value:
        raise InvalidRangeError(
            f"Range for {candidate.measurement_type}: min_value ({candidate.min_value}) "
            f"must be less than max_value ({candidate.max_value})"
        )
    if not normalize_type(candidate.measurement_type):
        raise InvalidRangeError("measurement_type is required for all ranges")


def prepare_range(candidate: ScoreRange, range_id: Optional[int] = None) -> ScoreRange:
    """Validate bounds and return a copy keyed by the normalised type."""

    check_bounds(candidate)
    return replace(
        candidate,
        measurement_type=normalize_type(candidate.measurement_type),
        id=range_id if range_id is not None else candidate.id,
    )


def find_overlaps(
    candidate: ScoreRange,
    existing: Iterable[ScoreRange],
    *,
    exclude_id: Optional[int] = None,
) -> List[ScoreRange]:
    key = normalize_type(candidate.measurement_type)
    return [
        other
        for other in existing
        if normalize_type(other.measurement_type) == key
        and (exclude_id is None or other.id != exclude_id)
        and candidate.overlaps(other)
    ]


def _overlap_error(candidate: ScoreRange, conflicts: Sequence[ScoreRange]) -> OverlapError:
    return OverlapError(candidate.measurement_type, candidate.bounds, [c.bounds for c in conflicts])


def validate_batch(candidates: Sequence[ScoreRange], existing: Iterable[ScoreRange]) -> List[ScoreRange]:
    """Check every candidate against stored ranges and the rest of the batch.

    Returns the prepared ranges or raises :class:`RangeBatchError` listing all problems.
    """

    stored = list(existing)
    accepted: List[ScoreRange] = []
    errors: List[str] = []
    for candidate in candidates:
        try:
            prepared = prepare_range(candidate)
        except InvalidRangeError as exc:
            errors.append(exc.message)
            continue
        conflicts = find_overlaps(prepared, stored) + find_overlaps(prepared, accepted)
        if conflicts:
            errors.extend(_overlap_error(candidate, conflicts).messages())
            continue
        accepted.append(prepared)
    if errors:
        raise RangeBatchError(errors)
    return accepted


def _sorted(ranges: Iterable[ScoreRange]) -> Tuple[ScoreRange, ...]:
    return tuple(sorted(ranges, key=lambda r: (r.min_value, r.max_value)))


class InMemoryRangeCatalog:
    """Thread-safe catalog kept in process memory.

    Writers are serialised by one lock; each measurement type maps to an immutable
    tuple that is swapped on commit, so readers never block.
    """

    def __init__(self, ranges: Iterable[ScoreRange] = ()):
        self._lock = threading.RLock()
        self._by_type: Dict[str, Tuple[ScoreRange, ...]] = {}
        self._index: Dict[int, ScoreRange] = {}
        self._next_id = 1
        initial = list(ranges)
        if initial:
            self.add_many(initial)

    @classmethod
    def with_standard_ranges(cls) -> "InMemoryRangeCatalog":
        return cls(standard_ranges())

    # Reads -------------------------------------------------------------

    def lookup(self, measurement_type: str, value: Decimal) -> Optional[ScoreRange]:
        for candidate in self._by_type.get(normalize_type(measurement_type), ()):
            if candidate.contains(value):
                return candidate
        return None

    def list_by_type(self, measurement_type: str) -> List[ScoreRange]:
        return list(self._by_type.get(normalize_type(measurement_type), ()))

    def list_all(self) -> List[ScoreRange]:
        snapshot = dict(self._by_type)
        return [item for key in sorted(snapshot) for item in snapshot[key]]

    def get(self, range_id: int) -> Optional[ScoreRange]:
        return self._index.get(range_id)

    def __len__(self) -> int:
        return len(self._index)

    # Writes ------------------------------------------------------------

    def add(self, candidate: ScoreRange) -> ScoreRange:
        with self._lock:
            prepared = prepare_range(candidate)
            conflicts = find_overlaps(prepared, self._by_type.get(prepared.measurement_type, ()))
            if conflicts:
                raise _overlap_error(candidate, conflicts)
            stored = self._store(prepared)
        logger.info("Added range id=%s type=%s", stored.id, stored.measurement_type)
        return stored

    def add_many(self, candidates: Sequence[ScoreRange]) -> List[ScoreRange]:
        with self._lock:
            prepared = validate_batch(candidates, self._index.values())
            created = [self._store(item) for item in prepared]
        logger.info("Added %s ranges", len(created))
        return created

    def update(self, range_id: int, candidate: ScoreRange) -> ScoreRange:
        with self._lock:
            current = self._index.get(range_id)
            if current is None:
                raise NotFoundError([range_id])
            prepared = prepare_range(candidate, range_id)
            conflicts = find_overlaps(
                prepared,
                self._by_type.get(prepared.measurement_type, ()),
                exclude_id=range_id,
            )
            if conflicts:
                raise _overlap_error(candidate, conflicts)
            self._discard(current)
            self._index[range_id] = prepared
            self._put(prepared)
        logger.info("Updated range id=%s type=%s", range_id, prepared.measurement_type)
        return prepared

    def remove(self, range_id: int) -> None:
        self.remove_many([range_id])

    def remove_many(self, ids: Iterable[int]) -> None:
        wanted = list(dict.fromkeys(ids))
        with self._lock:
            missing = [range_id for range_id in wanted if range_id not in self._index]
            if missing:
                raise NotFoundError(missing)
            for range_id in wanted:
                self._discard(self._index.pop(range_id))
        logger.info("Removed ranges %s", wanted)

    # Helpers (caller holds the lock) -----------------------------------

    def _store(self, prepared: ScoreRange) -> ScoreRange:
        stored = replace(prepared, id=self._next_id)
        self._next_id += 1
        self._index[stored.id] = stored
        self._put(stored)
        return stored

    def _put(self, item: ScoreRange) -> None:
        key = item.measurement_type
        self._by_type[key] = _sorted(self._by_type.get(key, ()) + (item,))

    def _discard(self, item: ScoreRange) -> None:
        key = item.measurement_type
        remaining = tuple(r for r in self._by_type.get(key, ()) if r.id != item.id)
        if remaining:
            self._by_type[key] = remaining
        else:
            self._by_type.pop(key, None)
