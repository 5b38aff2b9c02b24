# This file provides dependency factories for FastAPI routes and middleware.
# The monitoring store is built once per process from the API config and shared by all services.
# Services resolve the store through `Depends`, so tests can override one provider to swap the backend.

from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from src.api.api_config import ApiConfig, get_api_config
from src.api.services.monitoring_data_service import MonitoringDataService
from src.api.services.registration_service import RegistrationService
from src.common.db import create_database_engine
from src.monitoring.store import MonitoringStore


@lru_cache(maxsize=1)
def get_monitoring_store() -> MonitoringStore:
    config = get_api_config()
    return MonitoringStore(
        engine=create_database_engine(config.database_url),
        function_table_name=config.function_table_name,
        ping_table_name=config.ping_table_name,
    )


def close_monitoring_store() -> None:
    if get_monitoring_store.cache_info().currsize:
        get_monitoring_store().close()
        get_monitoring_store.cache_clear()


def get_config() -> ApiConfig:
    return get_api_config()


def get_registration_service(
    config: Annotated[ApiConfig, Depends(get_config)],
    store: Annotated[MonitoringStore, Depends(get_monitoring_store)],
) -> RegistrationService:
    return RegistrationService(config=config, store=store)


def get_monitoring_data_service(
    config: Annotated[ApiConfig, Depends(get_config)],
    store: Annotated[MonitoringStore, Depends(get_monitoring_store)],
) -> MonitoringDataService:
    return MonitoringDataService(config=config, store=store)
