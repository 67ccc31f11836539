"""Repository for score ranges using sqlite3."""
from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager
from decimal import Decimal
from typing import Iterable, Iterator, List, Optional, Sequence

from ...core.catalog import find_overlaps, prepare_range, standard_ranges, validate_batch
from ...core.errors import LookupUnavailableError, NotFoundError, OverlapError
from ...core.measurement_types import normalize_type
from ...core.models import ScoreRange

logger = logging.getLogger(__name__)

# Every connection in the process shares one writer; BEGIN IMMEDIATE covers other processes.
_WRITE_LOCK = threading.Lock()


@contextmanager
def _storage_errors(action: str) -> Iterator[None]:
    try:
        yield
    except sqlite3.Error as exc:
        logger.error("Range storage failure during %s: %s", action, exc)
        raise LookupUnavailableError(f"Score ranges are unavailable ({action})") from exc


class RangeRepository:
    """Persistent range catalog; implements the same contract as the in-memory catalog."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    # Reads -------------------------------------------------------------

    def lookup(self, measurement_type: str, value: Decimal) -> Optional[ScoreRange]:
        for candidate in self.list_by_type(measurement_type):
            if candidate.contains(value):
                return candidate
        return None

    def list_by_type(self, measurement_type: str) -> List[ScoreRange]:
        with _storage_errors("list"):
            cursor = self.conn.execute(
                "SELECT * FROM score_ranges WHERE measurement_type = ?",
                (normalize_type(measurement_type),),
            )
            rows = cursor.fetchall()
        return sorted((self._row_to_model(row) for row in rows), key=lambda r: (r.min_value, r.max_value))

    def list_all(self) -> List[ScoreRange]:
        with _storage_errors("list"):
            rows = self.conn.execute("SELECT * FROM score_ranges").fetchall()
        ranges = [self._row_to_model(row) for row in rows]
        return sorted(ranges, key=lambda r: (r.measurement_type, r.min_value, r.max_value))

    def get(self, range_id: int) -> Optional[ScoreRange]:
        with _storage_errors("get"):
            row = self.conn.execute("SELECT * FROM score_ranges WHERE id = ?", (range_id,)).fetchone()
        if not row:
            return None
        return self._row_to_model(row)

    def count(self) -> int:
        with _storage_errors("count"):
            return int(self.conn.execute("SELECT COUNT(1) FROM score_ranges").fetchone()[0])

    # Writes ------------------------------------------------------------

    def add(self, candidate: ScoreRange) -> ScoreRange:
        prepared = prepare_range(candidate)
        with self._transaction("add"):
            conflicts = find_overlaps(prepared, self.list_by_type(prepared.measurement_type))
            if conflicts:
                raise OverlapError(candidate.measurement_type, candidate.bounds, [c.bounds for c in conflicts])
            stored = self._insert(prepared)
        logger.info("Created range id=%s type=%s", stored.id, stored.measurement_type)
        return stored

    def add_many(self, candidates: Sequence[ScoreRange]) -> List[ScoreRange]:
        with self._transaction("add_many"):
            types = {normalize_type(c.measurement_type) for c in candidates}
            existing = [item for kind in sorted(types) for item in self.list_by_type(kind)]
            prepared = validate_batch(candidates, existing)
            created = [self._insert(item) for item in prepared]
        logger.info("Created %s new score ranges", len(created))
        return created

    def update(self, range_id: int, candidate: ScoreRange) -> ScoreRange:
        with self._transaction("update"):
            if self.get(range_id) is None:
                raise NotFoundError([range_id])
            prepared = prepare_range(candidate, range_id)
            conflicts = find_overlaps(
                prepared, self.list_by_type(prepared.measurement_type), exclude_id=range_id
            )
            if conflicts:
                raise OverlapError(candidate.measurement_type, candidate.bounds, [c.bounds for c in conflicts])
            self.conn.execute(
                """
                UPDATE score_ranges
                SET measurement_type = ?, min_value = ?, max_value = ?, score = ?
                WHERE id = ?
                """,
                (
                    prepared.measurement_type,
                    str(prepared.min_value),
                    str(prepared.max_value),
                    prepared.score,
                    range_id,
                ),
            )
        logger.info("Updated range id=%s type=%s", range_id, prepared.measurement_type)
        return prepared

    def remove(self, range_id: int) -> None:
        self.remove_many([range_id])

    def remove_many(self, ids: Iterable[int]) -> None:
        wanted = list(dict.fromkeys(ids))
        if not wanted:
            return
        placeholders = ", ".join("?" for _ in wanted)
        with self._transaction("remove"):
            rows = self.conn.execute(
                f"SELECT id FROM score_ranges WHERE id IN ({placeholders})", wanted
            ).fetchall()
            found = {row["id"] for row in rows}
            missing = [range_id for range_id in wanted if range_id not in found]
            if missing:
                raise NotFoundError(missing)
            self.conn.execute(f"DELETE FROM score_ranges WHERE id IN ({placeholders})", wanted)
        logger.info("Deleted ranges %s", wanted)

    # Helpers -----------------------------------------------------------

    @contextmanager
    def _transaction(self, action: str) -> Iterator[None]:
        with _WRITE_LOCK, _storage_errors(action):
            self.conn.execute("BEGIN IMMEDIATE")
            try:
                yield
            except BaseException:
                self.conn.rollback()
                raise
            self.conn.commit()

    def _insert(self, prepared: ScoreRange) -> ScoreRange:
        cursor = self.conn.execute(
            """
            INSERT INTO score_ranges (measurement_type, min_value, max_value, score)
            VALUES (?, ?, ?, ?)
            """,
            (prepared.measurement_type, str(prepared.min_value), str(prepared.max_value), prepared.score),
        )
        return ScoreRange(
            id=cursor.lastrowid,
            measurement_type=prepared.measurement_type,
            min_value=prepared.min_value,
            max_value=prepared.max_value,
            score=prepared.score,
        )

    def _row_to_model(self, row: sqlite3.Row) -> ScoreRange:
        return ScoreRange(
            id=row["id"],
            measurement_type=row["measurement_type"],
            min_value=Decimal(row["min_value"]),
            max_value=Decimal(row["max_value"]),
            score=row["score"],
        )


def seed_standard_ranges(conn: sqlite3.Connection) -> int:
    """Insert the reference NEWS table into an empty catalog; return the number of rows added."""

    repo = RangeRepository(conn)
    if repo.count():
        return 0
    created = repo.add_many(standard_ranges())
    logger.info("Seeded %s standard score ranges", len(created))
    return len(created)
