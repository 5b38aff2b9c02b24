"""
Logging configuration helpers.
Both the API process and the sweep job call `configure_logging` once at startup.
"""

from __future__ import annotations

import logging

from src.common.settings import get_settings

_LOGGING_CONFIGURED = False


def configure_logging() -> None:
    """Configure process-wide logging from environment settings."""

    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED:
        return

    settings = get_settings()
    level_name = settings.LOG_LEVEL.upper()
    level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    # basicConfig is a no-op when a host such as a Prefect worker already installed root handlers.
    logging.getLogger().setLevel(level)
    _LOGGING_CONFIGURED = True
