# This file provides shared helpers for API endpoint tests.
# Tests override the store and service providers so no real database server is needed.
# The helpers build consistent config objects and scoped TestClient contexts.

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from fastapi.testclient import TestClient

from src.api.api_config import ApiConfig
from src.api.app import app
from src.api.dependencies import (
    get_config,
    get_monitoring_data_service,
    get_monitoring_store,
    get_registration_service,
)
from src.monitoring.store import StoreError


def build_test_config(*, store_max_workers: int = 4) -> ApiConfig:
    """Create deterministic API config for tests."""

    return ApiConfig(
        api_name="Test Monitor API",
        api_version_path="/api/v1",
        schema_version="1.0.0",
        host="0.0.0.0",
        port=8000,
        environment="test",
        database_url="sqlite+pysqlite:///:memory:",
        allowed_origins=[],
        function_table_name="monitored_functions",
        ping_table_name="function_pings",
        store_max_workers=store_max_workers,
        auto_create_schema=False,
        app_version="0.1.0",
    )


class FakeStore:
    """Store double for health/readiness tests."""

    def __init__(self, *, connected: bool = True, existing_tables: set[str] | None = None) -> None:
        self._connected = connected
        self._tables = existing_tables if existing_tables is not None else {
            "monitored_functions",
            "function_pings",
        }

    def can_connect(self) -> bool:
        return self._connected

    def table_exists(self, table_name: str) -> bool:
        return self._connected and table_name in self._tables


@contextmanager
def api_test_client(
    *,
    config: ApiConfig | None = None,
    store: Any | None = None,
    registration_service: Any | None = None,
    monitoring_data_service: Any | None = None,
) -> Iterator[TestClient]:
    """Yield a TestClient with scoped dependency overrides."""

    resolved_config = config or build_test_config()

    app.dependency_overrides[get_config] = lambda: resolved_config
    if store is not None:
        app.dependency_overrides[get_monitoring_store] = lambda: store
    if registration_service is not None:
        app.dependency_overrides[get_registration_service] = lambda: registration_service
    if monitoring_data_service is not None:
        app.dependency_overrides[get_monitoring_data_service] = lambda: monitoring_data_service

    try:
        with TestClient(app) as client:
            yield client
    finally:
        app.dependency_overrides.clear()


class FlakyStore:
    """Wraps a real store and raises StoreError for the selected operations or function ids."""

    def __init__(
        self,
        store: Any,
        *,
        failing_operations: set[str] | None = None,
        failing_ids: set[str] | None = None,
    ) -> None:
        self._store = store
        self.failing_operations = failing_operations or set()
        self.failing_ids = failing_ids or set()

    def __getattr__(self, name: str) -> Any:
        return getattr(self._store, name)

    def _check(self, operation: str, function_id: str | None = None) -> None:
        if operation in self.failing_operations or (function_id is not None and function_id in self.failing_ids):
            raise StoreError(operation, "simulated outage")

    def find_functions(self, filters: Any) -> Any:
        self._check("find_functions")
        return self._store.find_functions(filters)

    def add_function(self, payload: Any) -> str:
        self._check("add_function")
        return self._store.add_function(payload)

    def merge_function(self, function_id: str, payload: Any) -> None:
        self._check("merge_function", function_id)
        self._store.merge_function(function_id, payload)

    def list_pings(self, function_id: str) -> Any:
        self._check("list_pings", function_id)
        return self._store.list_pings(function_id)
