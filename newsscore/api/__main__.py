"""Run the API with uvicorn: ``python -m newsscore.api``."""
from __future__ import annotations

import uvicorn

from .core.config import settings


def main() -> None:
    uvicorn.run("newsscore.api.main:app", host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    main()
