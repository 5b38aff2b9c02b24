# This file implements the monitoring data query for the API.
# It matches monitored functions by equality on the fields present in the filter and
# attaches every recorded ping of each match, oldest first.

from __future__ import annotations

from typing import Any

from src.api.api_config import ApiConfig
from src.api.error_handlers import APIError
from src.common.fan_out import fan_out
from src.monitoring.models import FunctionPing, MonitoredFunction
from src.monitoring.store import MonitoringStore, StoreError


class MonitoringDataService:
    """Read-only queries over monitored functions and their pings."""

    def __init__(self, *, config: ApiConfig, store: MonitoringStore) -> None:
        self.config = config
        self.store = store

    def query(self, filters: dict[str, Any]) -> list[dict[str, Any]]:
        try:
            functions = self.store.find_functions(filters)
        except StoreError as exc:
            raise APIError(
                status_code=500,
                error_code="QUERY_FAILED",
                message="Cannot find monitored functions in the store",
                details={"phase": "query", "reason": str(exc)},
            ) from exc
        if not functions:
            return []

        def fetch_pings(fn: MonitoredFunction) -> list[FunctionPing]:
            return self.store.list_pings(fn.id)

        outcomes = fan_out(
            functions,
            fetch_pings,
            max_workers=self.config.store_max_workers,
            label="ping-fetch",
        )
        failed = [outcome for outcome in outcomes if not outcome.ok]
        if failed:
            raise APIError(
                status_code=500,
                error_code="PINGS_FETCH_FAILED",
                message="Cannot retrieve function pings from the store",
                details={
                    "phase": "pings",
                    "failed_ids": [outcome.item.id for outcome in failed],
                    "reasons": [str(outcome.error) for outcome in failed],
                },
            )

        data: list[dict[str, Any]] = []
        for outcome in outcomes:
            pings = sorted(outcome.result or [], key=lambda ping: ping.timestamp)
            data.append(
                {
                    "fn": outcome.item.to_dict(),
                    "pings": [ping.to_dict() for ping in pings],
                }
            )
        return data
