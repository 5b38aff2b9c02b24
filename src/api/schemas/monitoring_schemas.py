# This file defines request and response contracts for the monitoring endpoints.
# Wire names are camelCase (`functionName`, `responseDuration`); Python names stay snake_case.
# Request models reject unknown, missing, and mistyped fields before any store access.

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class MonitoredFunctionRequestV1(BaseModel):
    """Registration body: identity fields plus the desired monitoring state."""

    model_config = ConfigDict(alias_generator=to_camel, extra="forbid", strict=True)

    function_name: str = Field(min_length=1)
    project_id: str = Field(min_length=1)
    region: str = Field(min_length=1)
    tag: str | None
    function_url: str | None = None
    enabled: bool

    def identity(self) -> dict[str, Any]:
        return {
            "function_name": self.function_name,
            "project_id": self.project_id,
            "region": self.region,
            "tag": self.tag,
        }

    def to_payload(self) -> dict[str, Any]:
        # functionUrl is left out when the caller did not send it, so a merge keeps the stored URL.
        return self.model_dump(exclude_unset=True)


class MonitoringDataFilterV1(BaseModel):
    """Partial equality filter; only fields present in the body constrain the query."""

    model_config = ConfigDict(alias_generator=to_camel, extra="forbid", strict=True)

    function_name: str | None = None
    function_url: str | None = None
    project_id: str | None = None
    tag: str | None = None
    region: str | None = None
    enabled: bool | None = None

    def to_filters(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class MonitoringIdsResponseV1(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    monitoring_ids: list[str]


class MonitoredFunctionV1(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    function_name: str
    project_id: str
    region: str
    tag: str | None = None
    function_url: str | None = None
    enabled: bool


class FunctionPingV1(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    timestamp: int
    response_duration: int | None = None


class MonitoringDataEntryV1(BaseModel):
    fn: MonitoredFunctionV1
    pings: list[FunctionPingV1]


class MonitoringDataResponseV1(BaseModel):
    data: list[MonitoringDataEntryV1]
