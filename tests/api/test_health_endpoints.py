# This file tests API health, readiness, and version endpoints.
# The tests confirm request IDs and version metadata are always returned.

from __future__ import annotations

from tests.api.support import FakeStore, api_test_client, build_test_config


def test_health_endpoint_returns_expected_fields() -> None:
    config = build_test_config()
    with api_test_client(config=config, store=FakeStore()) as client:
        response = client.get("/health")

    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "ok"
    assert payload["environment"] == "test"
    assert payload["service_name"] == config.api_name
    assert payload["api_version"] == "v1"
    assert payload["schema_version"] == config.schema_version
    assert payload["request_id"]
    assert "timestamp" in payload
    assert response.headers["x-request-id"] == payload["request_id"]
    assert "x-response-time-ms" in response.headers


def test_ready_endpoint_reflects_table_status() -> None:
    config = build_test_config()
    with api_test_client(config=config, store=FakeStore(connected=True)) as client:
        response = client.get("/ready")

    assert response.status_code == 200
    payload = response.json()
    assert payload["db_connected"] is True
    assert payload["functions_table_ready"] is True
    assert payload["pings_table_ready"] is True
    assert payload["ready"] is True


def test_ready_endpoint_reports_missing_ping_table() -> None:
    store = FakeStore(existing_tables={"monitored_functions"})
    with api_test_client(config=build_test_config(), store=store) as client:
        payload = client.get("/ready").json()

    assert payload["functions_table_ready"] is True
    assert payload["pings_table_ready"] is False
    assert payload["ready"] is False


def test_ready_endpoint_with_unreachable_store() -> None:
    with api_test_client(config=build_test_config(), store=FakeStore(connected=False)) as client:
        payload = client.get("/ready").json()

    assert payload["db_connected"] is False
    assert payload["database"] == "unreachable"
    assert payload["ready"] is False


def test_version_endpoint_returns_version_metadata() -> None:
    config = build_test_config()
    with api_test_client(config=config, store=FakeStore()) as client:
        response = client.get("/version", headers={"x-request-id": "req-123"})

    assert response.status_code == 200
    payload = response.json()
    assert payload["request_id"] == "req-123"
    assert payload["api_version_path"] == "/api/v1"
    assert payload["schema_version"] == config.schema_version
    assert payload["app_version"] == config.app_version
    assert payload["project"] == config.api_name
    assert payload["version"] == config.app_version


def test_metrics_endpoint_exposes_request_counters() -> None:
    with api_test_client(config=build_test_config(), store=FakeStore()) as client:
        client.get("/health")
        response = client.get("/metrics")

    assert response.status_code == 200
    assert "api_http_requests_total" in response.text
