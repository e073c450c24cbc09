"""
Session store -- the only state the console persists locally.

Responsibility
--------------
Holds the access token, refresh token, user profile and tenant info as a
small key/value map.  ``FileSessionStore`` keeps it in a JSON file readable
only by the current user so a console restart does not force a new login;
``InMemorySessionStore`` is used by tests and one-shot scripts.

Invariants enforced
-------------------
* Only ``SESSION_KEYS`` are stored.
* ``clear()`` removes every key (logout and unrecoverable refresh failure).
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from progress_kernel.logging_config import get_logger

logger = get_logger("client.session_store")

TOKEN_KEY = "token"
REFRESH_TOKEN_KEY = "refreshToken"
USER_KEY = "user"
TENANT_KEY = "tenantInfo"

SESSION_KEYS = (TOKEN_KEY, REFRESH_TOKEN_KEY, USER_KEY, TENANT_KEY)


@runtime_checkable
class SessionStore(Protocol):
    def get(self, key: str) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...

    def remove(self, key: str) -> None: ...

    def clear(self) -> None: ...


def _check_key(key: str) -> None:
    if key not in SESSION_KEYS:
        raise KeyError(f"Not a session key: {key}")


class InMemorySessionStore:
    """Dict-backed store; lost when the process exits."""

    def __init__(self, initial: dict[str, Any] | None = None):
        self._data: dict[str, Any] = {}
        for key, value in (initial or {}).items():
            self.set(key, value)

    def get(self, key: str) -> Any:
        _check_key(key)
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        _check_key(key)
        self._data[key] = value

    def remove(self, key: str) -> None:
        _check_key(key)
        self._data.pop(key, None)

    def clear(self) -> None:
        self._data.clear()

    def snapshot(self) -> dict[str, Any]:
        return dict(self._data)


class FileSessionStore:
    """JSON file store, rewritten on every change (mode 0600)."""

    def __init__(self, path: Path):
        self.path = Path(path).expanduser()
        self._data: dict[str, Any] = self._load()

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            # A corrupt file is equivalent to being logged out.
            logger.warning(
                "session_file_unreadable",
                extra={"path": str(self.path), "error": str(exc)},
            )
            return {}
        if not isinstance(data, dict):
            return {}
        return {k: v for k, v in data.items() if k in SESSION_KEYS}

    def _flush(self) -> None:
        if not self._data:
            if self.path.exists():
                self.path.unlink()
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(self._data, f, indent=2)
        os.replace(tmp, self.path)

    def get(self, key: str) -> Any:
        _check_key(key)
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        _check_key(key)
        self._data[key] = value
        self._flush()

    def remove(self, key: str) -> None:
        _check_key(key)
        if self._data.pop(key, None) is not None:
            self._flush()

    def clear(self) -> None:
        self._data.clear()
        self._flush()
