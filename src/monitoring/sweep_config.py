# This file defines runtime configuration for the scheduled ping sweep.
# The loader reads `.env` from the working directory, then merges YAML defaults with MONITOR_* environment
# overrides and validates the result.
# Scheduled runs and one-off CLI runs share this single configuration surface.

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import find_dotenv, load_dotenv

_IDENTIFIER_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "configs" / "monitoring.yaml"


def _load_yaml(path: str | Path) -> dict[str, Any]:
    with open(path, encoding="utf-8") as handle:
        loaded = yaml.safe_load(handle) or {}
    if not isinstance(loaded, dict):
        raise ValueError(f"Config at {path} must be a mapping, got: {type(loaded).__name__}")
    return dict(loaded)


def _env_str(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value


def _env_float(name: str, default: float | None = None) -> float | None:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return float(value)


def _env_int(name: str, default: int | None = None) -> int | None:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return int(value)


@dataclass(frozen=True)
class SweepConfig:
    database_url: str
    function_table_name: str
    ping_table_name: str

    probe_payload: dict[str, Any] = field(default_factory=lambda: {"warmUp": True})
    request_timeout_seconds: float = 540.0
    max_workers: int = 32

    prefect_schedule_minutes: int = 15
    prefect_work_pool: str = "monitoring-process"
    prefect_work_queue: str = "monitoring"

    def to_dict(self) -> dict[str, Any]:
        return {
            "function_table_name": self.function_table_name,
            "ping_table_name": self.ping_table_name,
            "probe_payload": dict(self.probe_payload),
            "request_timeout_seconds": self.request_timeout_seconds,
            "max_workers": self.max_workers,
            "prefect_schedule_minutes": self.prefect_schedule_minutes,
            "prefect_work_pool": self.prefect_work_pool,
            "prefect_work_queue": self.prefect_work_queue,
        }


def load_sweep_config(*, config_path: str | Path = DEFAULT_CONFIG_PATH, load_env: bool = True) -> SweepConfig:
    if load_env:
        load_dotenv(find_dotenv(usecwd=True))

    cfg = _load_yaml(config_path)
    probe_cfg = dict(cfg.get("probe", {}))
    prefect_cfg = dict(cfg.get("prefect", {}))

    database_url = str(_env_str("DATABASE_URL", str(cfg.get("database_url", ""))))
    function_table_name = str(
        _env_str("MONITOR_FUNCTION_TABLE_NAME", str(cfg.get("function_table_name", "monitored_functions")))
    )
    ping_table_name = str(_env_str("MONITOR_PING_TABLE_NAME", str(cfg.get("ping_table_name", "function_pings"))))

    probe_payload = probe_cfg.get("payload", {"warmUp": True})
    request_timeout_seconds = float(
        _env_float("MONITOR_REQUEST_TIMEOUT_SECONDS", float(probe_cfg.get("request_timeout_seconds", 540)))
    )
    max_workers = int(_env_int("MONITOR_MAX_WORKERS", int(probe_cfg.get("max_workers", 32))))

    prefect_schedule_minutes = int(
        _env_int("MONITOR_SCHEDULE_MINUTES", int(prefect_cfg.get("schedule_minutes", 15)))
    )
    prefect_work_pool = str(
        _env_str("MONITOR_PREFECT_WORK_POOL", str(prefect_cfg.get("work_pool", "monitoring-process")))
    )
    prefect_work_queue = str(
        _env_str("MONITOR_PREFECT_WORK_QUEUE", str(prefect_cfg.get("work_queue", "monitoring")))
    )

    if not database_url:
        raise ValueError("DATABASE_URL is required for the monitoring sweep.")
    for table_name in (function_table_name, ping_table_name):
        if not _IDENTIFIER_RE.match(table_name):
            raise ValueError(f"Unsafe SQL identifier: {table_name!r}")
    if not isinstance(probe_payload, dict):
        raise ValueError("probe.payload must be a mapping")
    if request_timeout_seconds <= 0:
        raise ValueError("request_timeout_seconds must be > 0")
    if max_workers <= 0:
        raise ValueError("max_workers must be > 0")
    if prefect_schedule_minutes <= 0:
        raise ValueError("prefect schedule_minutes must be > 0")

    return SweepConfig(
        database_url=database_url,
        function_table_name=function_table_name,
        ping_table_name=ping_table_name,
        probe_payload=dict(probe_payload),
        request_timeout_seconds=request_timeout_seconds,
        max_workers=max_workers,
        prefect_schedule_minutes=prefect_schedule_minutes,
        prefect_work_pool=prefect_work_pool,
        prefect_work_queue=prefect_work_queue,
    )
