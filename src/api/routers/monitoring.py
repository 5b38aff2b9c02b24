# This file defines the two monitoring endpoints under the versioned API path.
# `monitored-function` registers or toggles a monitored function; `monitoring-data` returns
# matching functions with their recorded pings.

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from src.api.dependencies import get_monitoring_data_service, get_registration_service
from src.api.schemas.common import ErrorResponse
from src.api.schemas.monitoring_schemas import (
    MonitoredFunctionRequestV1,
    MonitoringDataFilterV1,
    MonitoringDataResponseV1,
    MonitoringIdsResponseV1,
)
from src.api.services.monitoring_data_service import MonitoringDataService
from src.api.services.registration_service import RegistrationService

router = APIRouter(tags=["monitoring"], responses={500: {"model": ErrorResponse}})
RegistrationServiceDep = Annotated[RegistrationService, Depends(get_registration_service)]
MonitoringDataServiceDep = Annotated[MonitoringDataService, Depends(get_monitoring_data_service)]


@router.post("/monitored-function", response_model=MonitoringIdsResponseV1)
def register_monitored_function(
    body: MonitoredFunctionRequestV1,
    service: RegistrationServiceDep,
) -> dict[str, object]:
    return {"monitoring_ids": service.register(body)}


@router.post("/monitoring-data", response_model=MonitoringDataResponseV1)
def monitoring_data(
    body: MonitoringDataFilterV1,
    service: MonitoringDataServiceDep,
) -> dict[str, object]:
    return {"data": service.query(body.to_filters())}
