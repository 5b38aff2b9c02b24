# This test file checks YAML defaults and environment overrides for the sweep configuration.

from __future__ import annotations

from pathlib import Path

import pytest

from src.monitoring.sweep_config import load_sweep_config


def test_load_sweep_config_uses_repo_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "sqlite+pysqlite:///:memory:")
    for name in ("MONITOR_SCHEDULE_MINUTES", "MONITOR_MAX_WORKERS", "MONITOR_REQUEST_TIMEOUT_SECONDS"):
        monkeypatch.delenv(name, raising=False)

    cfg = load_sweep_config(load_env=False)

    assert cfg.prefect_schedule_minutes == 15
    assert cfg.request_timeout_seconds == 540
    assert cfg.probe_payload == {"warmUp": True}
    assert cfg.function_table_name == "monitored_functions"


def test_env_overrides_yaml(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    config_path = tmp_path / "monitoring.yaml"
    config_path.write_text("probe:\n  max_workers: 4\nprefect:\n  schedule_minutes: 30\n", encoding="utf-8")
    monkeypatch.setenv("DATABASE_URL", "sqlite+pysqlite:///:memory:")
    monkeypatch.setenv("MONITOR_MAX_WORKERS", "8")
    monkeypatch.delenv("MONITOR_SCHEDULE_MINUTES", raising=False)

    cfg = load_sweep_config(config_path=config_path, load_env=False)

    assert cfg.max_workers == 8
    assert cfg.prefect_schedule_minutes == 30
    assert cfg.to_dict()["max_workers"] == 8


def test_invalid_values_are_rejected(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    config_path = tmp_path / "monitoring.yaml"
    config_path.write_text("ping_table_name: 'bad name'\n", encoding="utf-8")
    monkeypatch.setenv("DATABASE_URL", "sqlite+pysqlite:///:memory:")
    monkeypatch.delenv("MONITOR_PING_TABLE_NAME", raising=False)

    with pytest.raises(ValueError, match="Unsafe SQL identifier"):
        load_sweep_config(config_path=config_path, load_env=False)


def test_database_url_is_required(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    config_path = tmp_path / "monitoring.yaml"
    config_path.write_text("{}\n", encoding="utf-8")
    monkeypatch.setenv("DATABASE_URL", "")

    with pytest.raises(ValueError, match="DATABASE_URL is required"):
        load_sweep_config(config_path=config_path, load_env=False)


def test_dotenv_in_working_directory_is_loaded(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    database_url = f"sqlite:///{tmp_path / 'from_dotenv.db'}"
    (tmp_path / ".env").write_text(f"DATABASE_URL={database_url}\n", encoding="utf-8")
    config_path = tmp_path / "monitoring.yaml"
    config_path.write_text("{}\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("DATABASE_URL", raising=False)

    cfg = load_sweep_config(config_path=config_path)

    assert cfg.database_url == database_url


@pytest.mark.parametrize(
    "name",
    ["MONITOR_MAX_WORKERS", "MONITOR_SCHEDULE_MINUTES", "MONITOR_REQUEST_TIMEOUT_SECONDS"],
)
def test_zero_override_is_rejected(monkeypatch: pytest.MonkeyPatch, tmp_path: Path, name: str) -> None:
    config_path = tmp_path / "monitoring.yaml"
    config_path.write_text("{}\n", encoding="utf-8")
    monkeypatch.setenv("DATABASE_URL", "sqlite+pysqlite:///:memory:")
    monkeypatch.setenv(name, "0")

    with pytest.raises(ValueError, match="must be > 0"):
        load_sweep_config(config_path=config_path, load_env=False)
