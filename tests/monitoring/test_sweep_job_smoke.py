# This test file provides a smoke check for the ping sweep scheduling job wiring.
# Prefect and network side effects are mocked so tests remain deterministic.
# The suite verifies flow execution, store lifecycle, and deployment registration arguments.

from __future__ import annotations

from pathlib import Path
from typing import Any

from src.common.db import create_database_engine
from src.monitoring import sweep_job
from src.monitoring.store import MonitoringStore
from src.monitoring.sweep_config import SweepConfig


def test_sweep_flow_runs_with_mocked_sweep(monkeypatch: Any) -> None:
    class _LoggerStub:
        def info(self, *_args: Any, **_kwargs: Any) -> None:
            return None

    monkeypatch.setattr(
        sweep_job,
        "run_scheduled_sweep",
        lambda: {"status": "succeeded", "run_id": "test", "recorded_count": 0, "failed_count": 0},
    )
    monkeypatch.setattr(sweep_job, "get_run_logger", lambda: _LoggerStub())
    logging_calls: list[bool] = []
    monkeypatch.setattr(sweep_job, "configure_logging", lambda: logging_calls.append(True))

    result = sweep_job.sweep_flow.fn()
    assert result["status"] == "succeeded"
    assert result["run_id"] == "test"
    assert logging_calls == [True]


def test_run_scheduled_sweep_probes_registered_functions(monkeypatch: Any, tmp_path: Path) -> None:
    database_url = f"sqlite:///{tmp_path / 'sweep.db'}"
    seed_store = MonitoringStore(engine=create_database_engine(database_url))
    seed_store.create_schema()
    function_id = seed_store.add_function(
        {
            "function_name": "f1",
            "project_id": "p1",
            "region": "us",
            "tag": None,
            "function_url": "https://x",
            "enabled": True,
        }
    )

    closed: list[bool] = []
    prober_kwargs: dict[str, Any] = {}

    class _ProberStub:
        def __init__(self, **kwargs: Any) -> None:
            prober_kwargs.update(kwargs)

        def measure(self, url: str) -> int | None:
            return 42

        def close(self) -> None:
            closed.append(True)

    monkeypatch.setattr(sweep_job, "TimingProber", _ProberStub)
    config = SweepConfig(
        database_url=database_url,
        function_table_name="monitored_functions",
        ping_table_name="function_pings",
        max_workers=2,
    )

    result = sweep_job.run_scheduled_sweep(config)

    assert result["status"] == "succeeded"
    assert result["recorded_count"] == 1
    assert closed == [True]
    assert prober_kwargs["pool_size"] == 2
    pings = seed_store.list_pings(function_id)
    assert len(pings) == 1
    assert pings[0].response_duration == 42
    seed_store.close()


def test_apply_deployment_builds_from_flow(monkeypatch: Any) -> None:
    captured: dict[str, Any] = {}
    applied = {"called": False}

    class _DeploymentStub:
        def apply(self) -> None:
            applied["called"] = True

    def _build_from_flow(**kwargs: Any) -> _DeploymentStub:
        captured.update(kwargs)
        return _DeploymentStub()

    monkeypatch.setattr(sweep_job.Deployment, "build_from_flow", staticmethod(_build_from_flow))
    sweep_job.apply_deployment(every_minutes=15, work_pool="monitoring-process", work_queue="monitoring")

    assert captured["name"] == "scheduled"
    assert captured["work_pool_name"] == "monitoring-process"
    assert captured["work_queue_name"] == "monitoring"
    assert captured["entrypoint"] == "src/monitoring/sweep_job.py:sweep_flow"
    assert captured["schedule"].interval.total_seconds() == 15 * 60
    assert applied["called"] is True


def test_sweep_flow_has_execution_ceiling() -> None:
    assert sweep_job.sweep_flow.timeout_seconds == 540
