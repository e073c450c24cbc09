"""Structured JSON logging for the progress console."""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from contextvars import ContextVar
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Context propagation
# ---------------------------------------------------------------------------


class LogContext:
    """Context holder for session- and request-scoped log fields."""

    _request_id: ContextVar[str | None] = ContextVar("log_request_id", default=None)
    _tenant_code: ContextVar[str | None] = ContextVar("log_tenant_code", default=None)
    _user_email: ContextVar[str | None] = ContextVar("log_user_email", default=None)
    _task_id: ContextVar[str | None] = ContextVar("log_task_id", default=None)
    _wbs_id: ContextVar[str | None] = ContextVar("log_wbs_id", default=None)

    _FIELD_NAMES = ("request_id", "tenant_code", "user_email", "task_id", "wbs_id")

    @classmethod
    def set(cls, **fields: Any) -> None:
        """Set context fields. None values are ignored, unknown names rejected."""
        for name, val in fields.items():
            if name not in cls._FIELD_NAMES:
                raise KeyError(f"Unknown log context field: {name}")
            if val is not None:
                getattr(cls, f"_{name}").set(str(val))

    @classmethod
    def get_all(cls) -> dict[str, str]:
        """Return every non-None context field."""
        return {
            name: val
            for name in cls._FIELD_NAMES
            if (val := getattr(cls, f"_{name}").get()) is not None
        }

    @classmethod
    def clear(cls) -> None:
        for name in cls._FIELD_NAMES:
            getattr(cls, f"_{name}").set(None)

    @classmethod
    def bind(cls, **fields: Any) -> "_BoundContext":
        """Context manager: set fields on entry, restore previous values on exit."""
        return _BoundContext(fields)


class _BoundContext:
    def __init__(self, fields: dict[str, Any]):
        self._fields = fields
        self._tokens: list[tuple[ContextVar, Any]] = []

    def __enter__(self) -> type[LogContext]:
        for name, val in self._fields.items():
            var = getattr(LogContext, f"_{name}", None)
            if var is not None and val is not None:
                self._tokens.append((var, var.set(str(val))))
        return LogContext

    def __exit__(self, *exc: Any) -> None:
        for var, token in reversed(self._tokens):
            var.reset(token)
        self._tokens.clear()


# ---------------------------------------------------------------------------
# JSON Formatter
# ---------------------------------------------------------------------------

_RESERVED_KEYS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "taskName"}


def _json_default(obj: Any) -> Any:
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, Enum):
        return obj.value
    return str(obj)


class StructuredFormatter(logging.Formatter):
    """Renders each record as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(LogContext.get_all())

        for key, val in vars(record).items():
            if key not in _RESERVED_KEYS and key not in payload:
                payload[key] = val

        if record.exc_info and record.exc_info[1] is not None:
            exc = record.exc_info[1]
            payload["exc_type"] = type(exc).__name__
            payload["exc_message"] = str(exc)
            code = getattr(exc, "code", None)
            if code is not None:
                payload["exc_code"] = code
            # Structured attributes of ProgressConsoleError subclasses
            for k, v in vars(exc).items():
                if not k.startswith("_") and k != "code":
                    payload[f"exc_{k}"] = v
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_json_default)


# ---------------------------------------------------------------------------
# Logger factory
# ---------------------------------------------------------------------------

_LOGGER_PREFIX = "progress_console"


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the progress_console namespace."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


# ---------------------------------------------------------------------------
# Initialization
# ---------------------------------------------------------------------------

_configured = False
_lock = threading.Lock()


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """Attach a JSON handler to the progress_console hierarchy (idempotent)."""
    global _configured
    with _lock:
        if _configured:
            return
        _configured = True

    base = logging.getLogger(_LOGGER_PREFIX)
    base.setLevel(level)
    base.propagate = False

    h = handler if handler is not None else logging.StreamHandler(stream or sys.stderr)
    h.setFormatter(StructuredFormatter())
    base.addHandler(h)


def reset_logging() -> None:
    """Drop handlers and configuration state. FOR TESTING ONLY."""
    global _configured
    with _lock:
        _configured = False
    base = logging.getLogger(_LOGGER_PREFIX)
    base.handlers.clear()
    base.setLevel(logging.WARNING)
