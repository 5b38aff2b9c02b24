# This file defines shared schema pieces reused by multiple API endpoints.
# It exists so version metadata and error payloads stay consistent across routers.
# These classes are also used by tests to validate response shape stability.

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel


class ErrorDetail(BaseModel):
    code: str
    details: Any | None = None


class ErrorResponse(BaseModel):
    message: str
    error: ErrorDetail
    request_id: str
    timestamp: datetime
