# This module runs one ping sweep over every monitored function.
# Each enabled function with a URL is probed and gets one ping appended, concurrently and independently;
# a probe that raises still yields a ping without a duration. Only a failed ping write counts as a failed unit.

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Protocol

from src.common.fan_out import fan_out
from src.monitoring.models import FunctionPing, MonitoredFunction
from src.monitoring.store import MonitoringStore

LOGGER = logging.getLogger("monitoring.sweep")


class Prober(Protocol):
    def measure(self, url: str) -> int | None: ...


def epoch_millis() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class SweepSummary:
    run_id: str
    status: str
    started_at: datetime
    ended_at: datetime
    monitored_count: int
    eligible_count: int
    recorded_count: int
    failed_count: int
    missing_duration_count: int
    latency_ms: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "status": self.status,
            "started_at": self.started_at.isoformat(),
            "ended_at": self.ended_at.isoformat(),
            "monitored_count": self.monitored_count,
            "eligible_count": self.eligible_count,
            "recorded_count": self.recorded_count,
            "failed_count": self.failed_count,
            "missing_duration_count": self.missing_duration_count,
            "latency_ms": self.latency_ms,
        }


def run_sweep(
    *,
    store: MonitoringStore,
    prober: Prober,
    max_workers: int = 32,
    now_ms: Callable[[], int] = epoch_millis,
) -> SweepSummary:
    """Probe every eligible function once and append the resulting ping."""

    run_id = str(uuid.uuid4())
    started_at = datetime.now(tz=UTC)
    started = time.perf_counter()

    functions = store.list_functions()
    eligible = [fn for fn in functions if fn.is_probe_eligible]
    LOGGER.info(
        "sweep started run_id=%s monitored=%s eligible=%s",
        run_id,
        len(functions),
        len(eligible),
    )

    def probe_and_record(fn: MonitoredFunction) -> FunctionPing:
        try:
            duration = prober.measure(str(fn.function_url))
        except Exception:
            LOGGER.exception("probe raised run_id=%s function_id=%s", run_id, fn.id)
            duration = None
        ping = FunctionPing(timestamp=now_ms(), response_duration=duration)
        store.add_ping(fn.id, ping)
        return ping

    outcomes = fan_out(eligible, probe_and_record, max_workers=max_workers, label="sweep-probe")

    recorded = [outcome.result for outcome in outcomes if outcome.ok and outcome.result is not None]
    failed = [outcome for outcome in outcomes if not outcome.ok]
    for outcome in failed:
        LOGGER.error(
            "ping not recorded run_id=%s function_id=%s error=%s",
            run_id,
            outcome.item.id,
            outcome.error,
        )

    summary = SweepSummary(
        run_id=run_id,
        status="succeeded" if not failed else "partial",
        started_at=started_at,
        ended_at=datetime.now(tz=UTC),
        monitored_count=len(functions),
        eligible_count=len(eligible),
        recorded_count=len(recorded),
        failed_count=len(failed),
        missing_duration_count=sum(1 for ping in recorded if ping.response_duration is None),
        latency_ms=round((time.perf_counter() - started) * 1000.0, 3),
    )
    LOGGER.info(
        "sweep finished run_id=%s status=%s recorded=%s failed=%s",
        summary.run_id,
        summary.status,
        summary.recorded_count,
        summary.failed_count,
    )
    return summary
