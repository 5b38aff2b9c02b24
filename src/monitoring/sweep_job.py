# This module defines the scheduled ping sweep job using Prefect.
# The flow opens the monitoring store, runs one sweep, and closes the store again.
# A small CLI applies the 15-minute interval deployment or runs a single sweep in-process.

from __future__ import annotations

import argparse
import json
from datetime import timedelta
from pathlib import Path
from typing import Any, cast

from prefect import flow, get_run_logger
from prefect.deployments import Deployment
from prefect.server.schemas.schedules import IntervalSchedule

from src.common.db import create_database_engine
from src.common.logging import configure_logging
from src.monitoring.prober import TimingProber
from src.monitoring.store import MonitoringStore
from src.monitoring.sweep import run_sweep
from src.monitoring.sweep_config import SweepConfig, load_sweep_config

# Hosting ceiling for one sweep; probed targets may have long cold starts.
SWEEP_TIMEOUT_SECONDS = 540


def run_scheduled_sweep(config: SweepConfig | None = None) -> dict[str, Any]:
    cfg = config or load_sweep_config()
    store = MonitoringStore(
        engine=create_database_engine(cfg.database_url),
        function_table_name=cfg.function_table_name,
        ping_table_name=cfg.ping_table_name,
    )
    prober = TimingProber(
        timeout_seconds=cfg.request_timeout_seconds,
        payload=cfg.probe_payload,
        pool_size=cfg.max_workers,
    )
    try:
        summary = run_sweep(store=store, prober=prober, max_workers=cfg.max_workers)
    finally:
        prober.close()
        store.close()
    return summary.to_dict()


@flow(name="function-monitor-ping-sweep", timeout_seconds=SWEEP_TIMEOUT_SECONDS)
def sweep_flow() -> dict[str, Any]:
    configure_logging()
    logger = get_run_logger()
    result = run_scheduled_sweep()
    logger.info(
        "sweep completed status=%s run_id=%s recorded=%s failed=%s",
        result.get("status"),
        result.get("run_id"),
        result.get("recorded_count"),
        result.get("failed_count"),
    )
    return result


def apply_deployment(*, every_minutes: int, work_pool: str, work_queue: str) -> None:
    schedule = IntervalSchedule(interval=cast(Any, timedelta(minutes=every_minutes)))
    repo_root = str(Path(__file__).resolve().parents[2])
    deployment = cast(
        Any,
        Deployment.build_from_flow(
            flow=sweep_flow,
            name="scheduled",
            schedule=schedule,
            work_pool_name=work_pool,
            work_queue_name=work_queue,
            tags=["monitoring", "ping-sweep"],
            path=repo_root,
            entrypoint="src/monitoring/sweep_job.py:sweep_flow",
            load_existing=False,
        ),
    )
    deployment.apply()


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Prefect ping sweep job utilities")
    parser.add_argument("--apply-deployment", action="store_true", help="Register or refresh scheduled deployment")
    parser.add_argument("--run-once", action="store_true", help="Run one sweep now without Prefect")
    parser.add_argument("--create-schema", action="store_true", help="Create monitoring tables if missing")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    configure_logging()
    cfg = load_sweep_config()
    if args.create_schema:
        store = MonitoringStore(
            engine=create_database_engine(cfg.database_url),
            function_table_name=cfg.function_table_name,
            ping_table_name=cfg.ping_table_name,
        )
        try:
            store.create_schema()
        finally:
            store.close()
        print(f"Schema ready: {cfg.function_table_name}, {cfg.ping_table_name}")
    if args.apply_deployment:
        apply_deployment(
            every_minutes=cfg.prefect_schedule_minutes,
            work_pool=cfg.prefect_work_pool,
            work_queue=cfg.prefect_work_queue,
        )
        print(
            "Deployment applied. Start a worker with: "
            f"prefect worker start --pool {cfg.prefect_work_pool} --work-queue {cfg.prefect_work_queue}"
        )
    if args.run_once:
        print(json.dumps(run_scheduled_sweep(cfg), indent=2))


if __name__ == "__main__":
    main()
