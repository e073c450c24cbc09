"""
progress_config -- console settings.

``get_settings()`` is the entry point; it reads the packaged defaults, the
file named by ``PROGRESS_CONFIG`` if set, and ``PROGRESS_*`` overrides from
the process environment.
"""

from __future__ import annotations

import os
from pathlib import Path

from progress_config.loader import load_settings, parse_settings
from progress_config.schema import ConsoleSettings
from progress_kernel.logging_config import get_logger

logger = get_logger("config")


def get_settings(path: Path | None = None) -> ConsoleSettings:
    settings = load_settings(path, os.environ)
    logger.debug(
        "console_settings_loaded",
        extra={"api_base_url": settings.api_base_url, "log_level": settings.log_level},
    )
    return settings


__all__ = ["ConsoleSettings", "get_settings", "load_settings", "parse_settings"]
