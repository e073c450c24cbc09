"""
Settings loader (``progress_config.loader``).

Responsibility
--------------
Reads the packaged ``console.yaml``, an optional override file, and
``PROGRESS_*`` environment variables, and produces a ``ConsoleSettings``.

Invariants enforced
-------------------
* Precedence: environment > override file > packaged defaults.
* ``api_base_url`` is stored without a trailing slash.
* ``request_timeout`` is positive; ``log_level`` is a known level name.

Failure modes
-------------
* Missing override file -> ``FileNotFoundError`` propagates.
* Malformed YAML -> ``yaml.YAMLError`` propagates.
* Bad values -> ``ValueError`` naming the key.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from progress_config.schema import LOG_LEVELS, ConsoleSettings

DEFAULTS_FILE = Path(__file__).parent / "console.yaml"

CONFIG_FILE_ENV = "PROGRESS_CONFIG"

ENV_OVERRIDES = {
    "PROGRESS_API_BASE_URL": "api_base_url",
    "PROGRESS_REQUEST_TIMEOUT": "request_timeout",
    "PROGRESS_SESSION_FILE": "session_file",
    "PROGRESS_LOG_LEVEL": "log_level",
    "PROGRESS_LOG_FILE": "log_file",
}


def load_yaml_file(path: Path) -> dict[str, Any]:
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _path(value: Any) -> Path | None:
    if value is None or str(value).strip() == "":
        return None
    return Path(str(value)).expanduser()


def parse_settings(data: Mapping[str, Any]) -> ConsoleSettings:
    base_url = str(data["api_base_url"]).strip().rstrip("/")
    if not base_url.startswith(("http://", "https://")):
        raise ValueError(f"api_base_url must be an http(s) URL, got {base_url!r}")

    try:
        timeout = float(data.get("request_timeout", 30))
    except (TypeError, ValueError) as e:
        raise ValueError(f"request_timeout must be a number, got {data.get('request_timeout')!r}") from e
    if timeout <= 0:
        raise ValueError(f"request_timeout must be positive, got {timeout}")

    level = str(data.get("log_level", "INFO")).upper()
    if level not in LOG_LEVELS:
        raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}, got {level!r}")

    session_file = _path(data.get("session_file"))
    if session_file is None:
        raise ValueError("session_file is required")

    return ConsoleSettings(
        api_base_url=base_url,
        request_timeout=timeout,
        session_file=session_file,
        log_level=level,
        log_file=_path(data.get("log_file")),
    )


def load_settings(
    path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> ConsoleSettings:
    environ = environ if environ is not None else {}
    data = load_yaml_file(DEFAULTS_FILE)

    override = path or (Path(environ[CONFIG_FILE_ENV]) if environ.get(CONFIG_FILE_ENV) else None)
    if override is not None:
        data.update(load_yaml_file(override.expanduser()))

    for env_key, field_name in ENV_OVERRIDES.items():
        if env_key in environ:
            data[field_name] = environ[env_key]

    return parse_settings(data)
