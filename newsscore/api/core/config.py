"""Application configuration and database utilities."""
from __future__ import annotations

import sqlite3
from functools import lru_cache
from pathlib import Path
from typing import Generator, List, Tuple

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


def _split_types(value: str) -> Tuple[str, ...]:
    return tuple(item.strip().upper() for item in value.split(",") if item.strip())


class Settings(BaseSettings):
    """Central application settings loaded from environment variables."""

    db_url: str = Field(default="sqlite:///./newsscore/data/newsscore.db", alias="DB_URL")
    db_timeout: float = Field(default=30.0, alias="DB_TIMEOUT_SECONDS")
    api_host: str = Field(default="127.0.0.1", alias="API_HOST")
    api_port: int = Field(default=8000, alias="API_PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    required_measurement_types: str = Field(default="TEMP,HR,RR", alias="REQUIRED_MEASUREMENT_TYPES")
    integral_measurement_types: str = Field(default="HR,RR", alias="INTEGRAL_MEASUREMENT_TYPES")
    seed_standard_ranges: bool = Field(default=True, alias="SEED_STANDARD_RANGES")
    cors_allow_origins: str = Field(default="*", alias="CORS_ALLOW_ORIGINS")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @field_validator("db_timeout", mode="after")
    @classmethod
    def _ensure_positive_float(cls, value: float) -> float:
        return max(0.1, float(value))

    @field_validator("log_level", mode="after")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.strip().upper() or "INFO"

    @property
    def required_types(self) -> Tuple[str, ...]:
        return _split_types(self.required_measurement_types)

    @property
    def integral_types(self) -> Tuple[str, ...]:
        return _split_types(self.integral_measurement_types)

    @property
    def allowed_origins(self) -> List[str]:
        items = [item.strip() for item in self.cors_allow_origins.split(",") if item.strip()]
        return items or ["*"]


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()


def _db_path() -> Path:
    if settings.db_url.startswith("sqlite:///"):
        path_str = settings.db_url.replace("sqlite:///", "")
        return Path(path_str).resolve()
    raise ValueError("Unsupported DB_URL")


def connect() -> sqlite3.Connection:
    conn = sqlite3.connect(_db_path(), timeout=settings.db_timeout, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    return conn


def init_db() -> None:
    path = _db_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    with sqlite3.connect(path) as conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS score_ranges (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                measurement_type TEXT NOT NULL,
                min_value TEXT NOT NULL,
                max_value TEXT NOT NULL,
                score INTEGER NOT NULL
            )
            """
        )
        conn.execute(
            "CREATE INDEX IF NOT EXISTS ix_score_ranges_type ON score_ranges (measurement_type)"
        )
        conn.commit()


def get_session() -> Generator[sqlite3.Connection, None, None]:
    conn = connect()
    try:
        yield conn
    finally:
        conn.close()
