import pytest
from fastapi.testclient import TestClient

from smart_laundry.enterprise.config.settings import AppSettings, StorageSettings
from smart_laundry.server.app import create_app
from smart_laundry.services import build_runtime


@pytest.fixture
def runtime(clock):
    settings = AppSettings(storage=StorageSettings(backend="memory"))
    return build_runtime(settings, clock=clock)


@pytest.fixture
def client(runtime) -> TestClient:
    return TestClient(create_app(runtime=runtime, start_poller=False))


def test_health_endpoints(client) -> None:
    live = client.get("/api/v1/health/live")
    assert live.status_code == 200
    assert live.json()["status"] == "ok"

    ready = client.get("/api/v1/health/ready")
    assert ready.status_code == 200
    assert ready.json()["status"] == "ready"


def test_list_machines_starts_available(client) -> None:
    response = client.get("/api/v1/machines")
    assert response.status_code == 200
    payload = response.json()
    assert [m["id"] for m in payload] == ["washer1", "washer2", "dryer1", "dryer2"]
    assert all(m["status"] == "available" for m in payload)
    assert payload[2]["default_duration_minutes"] == 60


def test_claim_and_conflict(client, clock) -> None:
    created = client.post("/api/v1/machines/washer1/claim", json={"duration_minutes": 30})
    assert created.status_code == 201
    assert created.json()["in_use"] is True

    clock.advance(minutes=20)
    machine = client.get("/api/v1/machines/washer1").json()
    assert machine["status"] == "in_use"
    assert machine["minutes_remaining"] == 10

    conflict = client.post("/api/v1/machines/washer1/claim", json={"duration_minutes": 15})
    assert conflict.status_code == 409
    assert conflict.json()["machine_id"] == "washer1"


def test_claim_rejects_bad_input(client) -> None:
    assert client.post("/api/v1/machines/washer1/claim", json={"duration_minutes": 200}).status_code == 422
    assert client.post("/api/v1/machines/washer1/claim", json={}).status_code == 422
    assert client.post("/api/v1/machines/washer9/claim", json={"duration_minutes": 30}).status_code == 404
    assert client.get("/api/v1/machines/washer9").status_code == 404


def test_scan_returns_duration_picker(client) -> None:
    scan = client.post("/api/v1/machines/dryer2/scan")
    assert scan.status_code == 200
    assert scan.json() == {
        "machine_id": "dryer2",
        "minutes": 60,
        "min_minutes": 5,
        "max_minutes": 90,
        "step_minutes": 5,
    }

    client.post("/api/v1/machines/dryer2/claim", json={"duration_minutes": 60})
    assert client.post("/api/v1/machines/dryer2/scan").status_code == 409


def test_release_and_sweep(client, clock, runtime) -> None:
    client.post("/api/v1/machines/dryer1/claim", json={"duration_minutes": 45})
    assert client.post("/api/v1/machines/dryer1/release").status_code == 204
    assert client.get("/api/v1/machines/dryer1").json()["status"] == "available"

    client.post("/api/v1/machines/washer2/claim", json={"duration_minutes": 30})
    clock.advance(minutes=31)
    sweep = client.post("/api/v1/machines/sweep")
    assert sweep.status_code == 200
    assert sweep.json() == {"expired": ["washer2"]}
    assert runtime.engine.store.get("washer2").in_use is False


def test_fired_alerts_are_listed(client, clock, runtime) -> None:
    client.post("/api/v1/machines/washer1/claim", json={"duration_minutes": 30})
    clock.advance(minutes=20)
    runtime.poller.tick()

    alerts = client.get("/api/v1/alerts")
    assert alerts.status_code == 200
    assert alerts.json()[0]["body"] == "Your laundry in washer1 will be done in 10 minutes"


def test_observability_metrics(client) -> None:
    client.post("/api/v1/machines/washer1/claim", json={"duration_minutes": 30})
    response = client.get("/api/v1/observability/metrics")
    assert response.status_code == 200
    assert "smart_laundry_api_requests_total" in response.text
    assert 'smart_laundry_claims_total{outcome="claimed"}' in response.text
