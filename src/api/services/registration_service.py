# This file implements monitored-function registration for the API.
# A registration either creates a new monitored function or toggles `enabled` on the existing
# functions that share its identity (name, project, region, tag).
# Store failures are reported with the phase that failed: lookup, create, or update.

from __future__ import annotations

import logging

from src.api.api_config import ApiConfig
from src.api.error_handlers import APIError
from src.api.schemas.monitoring_schemas import MonitoredFunctionRequestV1
from src.common.fan_out import fan_out
from src.monitoring.models import MonitoredFunction
from src.monitoring.store import MonitoringStore, StoreError

LOGGER = logging.getLogger("api.registration")


class RegistrationService:
    """Create-or-toggle logic behind the monitored-function endpoint."""

    def __init__(self, *, config: ApiConfig, store: MonitoringStore) -> None:
        self.config = config
        self.store = store

    def register(self, request: MonitoredFunctionRequestV1) -> list[str]:
        """Return the ids created or toggled by this registration."""

        try:
            matches = self.store.find_functions(request.identity())
        except StoreError as exc:
            raise APIError(
                status_code=500,
                error_code="LOOKUP_FAILED",
                message="Cannot look up monitored functions in the store",
                details={"phase": "lookup", "reason": str(exc)},
            ) from exc

        payload = request.to_payload()
        if not matches:
            try:
                function_id = self.store.add_function(payload)
            except StoreError as exc:
                raise APIError(
                    status_code=500,
                    error_code="CREATE_FAILED",
                    message="Cannot add new monitored function to the store",
                    details={"phase": "create", "reason": str(exc)},
                ) from exc
            return [function_id]

        to_toggle = [fn for fn in matches if fn.enabled != request.enabled]
        LOGGER.info(
            "registration matched name=%s matches=%s toggling=%s enabled=%s",
            request.function_name,
            len(matches),
            len(to_toggle),
            request.enabled,
        )

        def toggle(fn: MonitoredFunction) -> str:
            self.store.merge_function(fn.id, payload)
            return fn.id

        outcomes = fan_out(
            to_toggle,
            toggle,
            max_workers=self.config.store_max_workers,
            label="registration-toggle",
        )
        updated_ids = [outcome.item.id for outcome in outcomes if outcome.ok]
        failed = [outcome for outcome in outcomes if not outcome.ok]
        if failed:
            raise APIError(
                status_code=500,
                error_code="UPDATE_FAILED",
                message="Cannot update monitored functions in the store",
                details={
                    "phase": "update",
                    "updated_ids": updated_ids,
                    "failed_ids": [outcome.item.id for outcome in failed],
                    "reasons": [str(outcome.error) for outcome in failed],
                },
            )
        return updated_ids
