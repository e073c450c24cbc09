"""
Console settings schema.

One frozen dataclass; the loader fills it from YAML and environment
overrides.  Nothing else in the tree reads configuration files.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class ConsoleSettings:
    api_base_url: str
    request_timeout: float
    session_file: Path
    log_level: str = "INFO"
    log_file: Path | None = None
