from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from newsscore.api.core import config
from newsscore.core.catalog import InMemoryRangeCatalog


@pytest.fixture
def catalog() -> InMemoryRangeCatalog:
    return InMemoryRangeCatalog.with_standard_ranges()


@pytest.fixture
def db_settings(tmp_path, monkeypatch: pytest.MonkeyPatch) -> config.Settings:
    test_settings = config.Settings(DB_URL=f"sqlite:///{tmp_path / 'newsscore.db'}")
    monkeypatch.setattr(config, "settings", test_settings)
    config.init_db()
    return test_settings


@pytest.fixture
def conn(db_settings):
    connection = config.connect()
    yield connection
    connection.close()


@pytest.fixture
def client(db_settings):
    from newsscore.api.main import app

    with TestClient(app) as test_client:
        yield test_client
