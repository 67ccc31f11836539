"""Logging helpers for the NEWS score service."""
from __future__ import annotations

import logging
import time
from typing import Callable, Iterable, Union

from fastapi import FastAPI, Request

QUIET_PATHS = ("/health",)


class QuietPathFilter(logging.Filter):
    """Drop access-log records for polled endpoints such as the health check."""

    def __init__(self, paths: Iterable[str] = QUIET_PATHS):
        super().__init__()
        self.paths = tuple(paths)

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        # uvicorn.access args: (client, method, path, http_version, status)
        args = record.args if isinstance(record.args, tuple) else ()
        if len(args) >= 3 and isinstance(args[2], str):
            path = args[2].split("?", 1)[0]
            return not any(path == p or path.startswith(p + "/") for p in self.paths)
        return True


def setup_logging(level: Union[int, str] = logging.INFO) -> None:
    """Configure global logging handlers."""

    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    logging.getLogger("newsscore").setLevel(level)
    access = logging.getLogger("uvicorn.access")
    if not any(isinstance(f, QuietPathFilter) for f in access.filters):
        access.addFilter(QuietPathFilter())


async def timing_middleware(request: Request, call_next: Callable):
    """Log HTTP request duration."""

    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    logging.getLogger("newsscore.request").info(
        "%s %s -> %s in %.2f ms", request.method, request.url.path, response.status_code, duration_ms
    )
    return response


def register_middleware(app: FastAPI) -> None:
    app.middleware("http")(timing_middleware)
