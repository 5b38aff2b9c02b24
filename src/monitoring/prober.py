# This module times a single warm-up POST against a monitored function URL.
# The elapsed time is the signal: HTTP error statuses and network failures after dispatch still
# produce a duration. Only a request that fails before it is sent yields no duration at all.

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from typing import Any

import requests
from requests.adapters import HTTPAdapter

LOGGER = logging.getLogger("monitoring.probe")

WARM_UP_PAYLOAD: dict[str, Any] = {"warmUp": True}

# Raised by requests while preparing or routing a request, before anything hits the network.
_PRE_DISPATCH_ERRORS: tuple[type[Exception], ...] = (
    requests.exceptions.MissingSchema,
    requests.exceptions.InvalidSchema,
    requests.exceptions.InvalidURL,
    requests.exceptions.InvalidHeader,
)


class TimingProber:
    """POST a warm-up payload and report round-trip milliseconds."""

    def __init__(
        self,
        *,
        timeout_seconds: float | None = None,
        payload: Mapping[str, Any] | None = None,
        session: requests.Session | None = None,
        pool_size: int | None = None,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self.timeout_seconds = timeout_seconds
        self.payload = dict(payload if payload is not None else WARM_UP_PAYLOAD)
        self.session = session or requests.Session()
        if pool_size is not None:
            # One pooled connection per concurrent sweep worker.
            adapter = HTTPAdapter(pool_connections=pool_size, pool_maxsize=pool_size)
            self.session.mount("http://", adapter)
            self.session.mount("https://", adapter)
        self._clock = clock

    def measure(self, url: str) -> int | None:
        """Return elapsed milliseconds for one POST to `url`, or None if it was never sent."""

        try:
            prepared = self.session.prepare_request(requests.Request("POST", url, json=self.payload))
        except (requests.RequestException, ValueError) as exc:
            LOGGER.warning("probe not dispatched url=%s error=%s", url, exc)
            return None

        started = self._clock()
        try:
            response = self.session.send(prepared, timeout=self.timeout_seconds)
        except _PRE_DISPATCH_ERRORS as exc:
            LOGGER.warning("probe not dispatched url=%s error=%s", url, exc)
            return None
        except requests.RequestException as exc:
            duration_ms = self._elapsed_ms(started)
            LOGGER.info("probe failed url=%s duration_ms=%s error=%s", url, duration_ms, exc)
            return duration_ms

        duration_ms = self._elapsed_ms(started)
        LOGGER.debug(
            "probe completed url=%s status_code=%s duration_ms=%s",
            url,
            response.status_code,
            duration_ms,
        )
        response.close()
        return duration_ms

    def close(self) -> None:
        self.session.close()

    def _elapsed_ms(self, started: float) -> int:
        return max(0, round((self._clock() - started) * 1000.0))
