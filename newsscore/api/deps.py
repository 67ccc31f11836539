"""Common FastAPI dependencies."""
from __future__ import annotations

import logging
import sqlite3
from typing import AsyncGenerator

from fastapi import HTTPException, status

from .core import config
from .repositories.range_repo import RangeRepository

logger = logging.getLogger(__name__)


def open_connection() -> sqlite3.Connection:
    """Connect to the range store, answering 503 when it cannot be opened."""

    try:
        return config.connect()
    except sqlite3.Error as exc:
        logger.error("Cannot open range storage: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Score ranges are unavailable (connect)",
        ) from exc


async def get_range_catalog() -> AsyncGenerator[RangeRepository, None]:
    conn = open_connection()
    try:
        yield RangeRepository(conn)
    finally:
        conn.close()
