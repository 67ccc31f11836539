"""FastAPI application bootstrap."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .. import __version__
from .core import config
from .core.logging import register_middleware, setup_logging
from .core.security import enable_cors
from .repositories.range_repo import seed_standard_ranges
from .routers import health, news_score

setup_logging(config.settings.log_level)
logger = logging.getLogger("newsscore")


def prepare_storage() -> None:
    """Create the range table and seed the reference ranges when configured."""

    config.init_db()
    if not config.settings.seed_standard_ranges:
        return
    for conn in config.get_session():
        seed_standard_ranges(conn)


@asynccontextmanager
async def lifespan(_: FastAPI):
    prepare_storage()
    logger.info("NEWS score API started; required types %s", ", ".join(config.settings.required_types))
    yield


app = FastAPI(title="NEWS Score API", version=__version__, lifespan=lifespan)

register_middleware(app)
enable_cors(app, config.settings.allowed_origins)

app.include_router(health.router)
app.include_router(news_score.router)


@app.get("/")
def root() -> dict[str, str]:
    return {"message": "NEWS Score API", "health": "/health"}
