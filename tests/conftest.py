"""
Shared test configuration.
It provides the environment the settings loaders require and a monitoring store backed by a temporary SQLite file.
These tests are executed by `pytest` locally and in CI and should remain deterministic.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

TEST_ENV_DEFAULTS = {
    "PROJECT_NAME": "test-project",
    "ENV": "test",
    "LOG_LEVEL": "INFO",
    "DATABASE_URL": "sqlite+pysqlite:///:memory:",
    "API_HOST": "0.0.0.0",
    "API_PORT": "8000",
}

# The API app is built at import time, which happens during collection.
for _key, _value in TEST_ENV_DEFAULTS.items():
    os.environ.setdefault(_key, _value)

from src.common.db import create_database_engine  # noqa: E402
from src.monitoring.store import MonitoringStore  # noqa: E402


@pytest.fixture(autouse=True)
def base_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure required environment variables are present during tests."""

    for key, value in TEST_ENV_DEFAULTS.items():
        if os.getenv(key) is None:
            monkeypatch.setenv(key, value)


@pytest.fixture
def monitoring_store(tmp_path: Path) -> Iterator[MonitoringStore]:
    store = MonitoringStore(engine=create_database_engine(f"sqlite:///{tmp_path / 'monitoring.db'}"))
    store.create_schema()
    try:
        yield store
    finally:
        store.close()
