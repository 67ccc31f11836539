from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from newsscore.api.core import config
from newsscore.api.deps import get_range_catalog
from newsscore.api.main import app
from newsscore.core.catalog import InMemoryRangeCatalog
from newsscore.core.errors import LookupUnavailableError

CALCULATE = "/api/newsscore/calculate"
RANGES = "/api/newsscore/ranges"


def measurements(**values):
    return {"measurements": [{"type": kind, "value": value} for kind, value in values.items()]}


def test_calculate_returns_score(client: TestClient):
    response = client.post(CALCULATE, json=measurements(TEMP=37, HR=60, RR=5))
    assert response.status_code == 200
    assert response.json() == {"score": 3}


def test_calculate_requires_measurements(client: TestClient):
    response = client.post(CALCULATE, json={"measurements": []})
    assert response.status_code == 400
    assert response.json()["detail"] == "Measurements are required"


def test_calculate_requires_all_types(client: TestClient):
    response = client.post(CALCULATE, json=measurements(TEMP=37, HR=60))
    assert response.status_code == 400
    assert "Missing: RR" in response.json()["detail"]


def test_calculate_reports_validation_errors(client: TestClient):
    response = client.post(CALCULATE, json=measurements(temp=31, HR=60.5, RR=15))
    assert response.status_code == 400
    errors = response.json()["errors"]
    assert [e["measurement_type"] for e in errors] == ["temp", "HR"]
    assert errors[0]["invalid_value"] == 31
    assert errors[0]["available_ranges"][0] == {"min_value": 31, "max_value": 35}
    assert "whole number" in errors[1]["error"]
    assert errors[1]["invalid_value"] == 60.5
    assert errors[1]["available_ranges"] == []


def test_calculate_rejects_long_type(client: TestClient):
    payload = {"measurements": [{"type": "TEMPERATURE1", "value": 37}]}
    assert client.post(CALCULATE, json=payload).status_code == 422


def test_list_ranges_filtered_and_ordered(client: TestClient):
    response = client.get(RANGES, params={"measurement_type": "rr"})
    assert response.status_code == 200
    data = response.json()
    assert [item["min_value"] for item in data] == [3, 8, 11, 20, 24]
    assert all(item["measurement_type"] == "RR" for item in data)
    assert len(client.get(RANGES).json()) == 16


def test_create_ranges(client: TestClient):
    payload = {
        "ranges": [
            {"measurement_type": "SPO2", "min_value": 0, "max_value": 91, "score": 3},
            {"measurement_type": "SPO2", "min_value": 91, "max_value": 93, "score": 2},
        ]
    }
    response = client.post(RANGES, json=payload)
    assert response.status_code == 201
    created = response.json()
    assert [item["score"] for item in created] == [3, 2]
    assert all(isinstance(item["id"], int) for item in created)


def test_create_ranges_collects_errors(client: TestClient):
    payload = {
        "ranges": [
            {"measurement_type": "TEMP", "min_value": 34, "max_value": 37, "score": 2},
            {"measurement_type": "HR", "min_value": 300, "max_value": 250, "score": 1},
            {"measurement_type": "", "min_value": 1, "max_value": 2, "score": 1},
        ]
    }
    response = client.post(RANGES, json=payload)
    assert response.status_code == 400
    errors = response.json()["errors"]
    assert any("overlaps with existing range (31, 35]" in e for e in errors)
    assert any("must be less than max_value" in e for e in errors)
    assert "measurement_type is required for all ranges" in errors
    assert len(client.get(RANGES).json()) == 16


def test_create_ranges_requires_payload(client: TestClient):
    response = client.post(RANGES, json={"ranges": []})
    assert response.status_code == 400


def test_update_range(client: TestClient):
    target = client.get(RANGES, params={"measurement_type": "TEMP"}).json()[2]
    body = {"measurement_type": "TEMP", "min_value": 36, "max_value": 37.5, "score": 0}
    response = client.put(f"{RANGES}/{target['id']}", json=body)
    assert response.status_code == 200
    assert response.json()["max_value"] == 37.5

    overlapping = dict(body, max_value=38.5)
    response = client.put(f"{RANGES}/{target['id']}", json=overlapping)
    assert response.status_code == 400
    assert "overlaps" in response.json()["detail"]

    assert client.put(f"{RANGES}/9999", json=body).status_code == 404


def test_delete_range(client: TestClient):
    target = client.get(RANGES, params={"measurement_type": "HR"}).json()[0]
    assert client.delete(f"{RANGES}/{target['id']}").status_code == 204
    assert client.delete(f"{RANGES}/{target['id']}").status_code == 404


def test_delete_many_ranges(client: TestClient):
    ids = [item["id"] for item in client.get(RANGES, params={"measurement_type": "RR"}).json()]
    response = client.request("DELETE", RANGES, json=ids + [5000])
    assert response.status_code == 404
    assert "5000" in response.json()["detail"]
    assert len(client.get(RANGES, params={"measurement_type": "RR"}).json()) == 5

    assert client.request("DELETE", RANGES, json=[]).status_code == 400
    assert client.request("DELETE", RANGES, json=ids).status_code == 204
    assert client.get(RANGES, params={"measurement_type": "RR"}).json() == []


def test_in_memory_catalog_can_replace_storage(client: TestClient):
    memory = InMemoryRangeCatalog.with_standard_ranges()
    app.dependency_overrides[get_range_catalog] = lambda: memory
    try:
        response = client.post(CALCULATE, json=measurements(TEMP=33, HR=30, RR=5))
    finally:
        app.dependency_overrides.clear()
    assert response.status_code == 200
    assert response.json() == {"score": 9}


def test_unavailable_catalog_returns_503(client: TestClient):
    class BrokenCatalog:
        def lookup(self, measurement_type, value):
            raise LookupUnavailableError("Score ranges are unavailable (list)")

        def list_by_type(self, measurement_type):
            raise LookupUnavailableError("Score ranges are unavailable (list)")

    app.dependency_overrides[get_range_catalog] = lambda: BrokenCatalog()
    try:
        response = client.post(CALCULATE, json=measurements(TEMP=37, HR=60, RR=5))
    finally:
        app.dependency_overrides.clear()
    assert response.status_code == 503


def test_health(client: TestClient):
    response = client.get("/health/")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.json()["required_types"] == ["TEMP", "HR", "RR"]


def test_calculate_huge_rate_returns_validation_error(client: TestClient):
    response = client.post(CALCULATE, json=measurements(TEMP=37, HR=1e30, RR=15))
    assert response.status_code == 400
    errors = response.json()["errors"]
    assert [e["measurement_type"] for e in errors] == ["HR"]
    assert "outside defined ranges" in errors[0]["error"]


def test_unreachable_database_returns_503(client: TestClient, tmp_path, monkeypatch: pytest.MonkeyPatch):
    unreachable = tmp_path / "missing" / "nested" / "newsscore.db"
    monkeypatch.setattr(config, "settings", config.Settings(DB_URL=f"sqlite:///{unreachable}"))

    health = client.get("/health/")
    assert health.status_code == 503
    assert health.json()["status"] == "unavailable"

    response = client.post(CALCULATE, json=measurements(TEMP=37, HR=60, RR=5))
    assert response.status_code == 503
    assert "unavailable" in response.json()["detail"]
    assert client.get(RANGES).status_code == 503
