"""Health check endpoint."""
from __future__ import annotations

import sqlite3

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ..core import config

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/")
async def healthcheck():
    try:
        conn = config.connect()
        try:
            conn.execute("SELECT 1").fetchone()
        finally:
            conn.close()
    except sqlite3.Error as exc:
        return JSONResponse(status_code=503, content={"status": "unavailable", "database": str(exc)})
    return {
        "status": "ok",
        "database": "ok",
        "required_types": list(config.settings.required_types),
    }
