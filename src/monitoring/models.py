# This module defines the records persisted by the monitoring store.
# A monitored function is identified by name, project, region and tag; pings hang off one function.
# Field names are snake_case here and map to camelCase only at the API boundary.

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

IDENTITY_FIELDS: tuple[str, ...] = ("function_name", "project_id", "region", "tag")
FUNCTION_FIELDS: tuple[str, ...] = IDENTITY_FIELDS + ("function_url", "enabled")


@dataclass(frozen=True)
class MonitoredFunction:
    id: str
    function_name: str
    project_id: str
    region: str
    tag: str | None
    function_url: str | None
    enabled: bool

    @property
    def identity(self) -> dict[str, Any]:
        return {field: getattr(self, field) for field in IDENTITY_FIELDS}

    @property
    def is_probe_eligible(self) -> bool:
        return bool(self.enabled) and bool(self.function_url)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "function_name": self.function_name,
            "project_id": self.project_id,
            "region": self.region,
            "tag": self.tag,
            "function_url": self.function_url,
            "enabled": self.enabled,
        }


@dataclass(frozen=True)
class FunctionPing:
    timestamp: int
    response_duration: int | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "response_duration": self.response_duration,
        }
