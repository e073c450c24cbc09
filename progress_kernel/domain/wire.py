"""
Wire value conversion (``progress_kernel.domain.wire``).

The backend speaks camelCase JSON with ISO dates and numbers for
quantities.  These helpers convert in both directions so that model code
only ever holds ``date`` and ``Decimal``.  Quantities go out as strings so no
binary float ever touches them.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

ZERO = Decimal("0")


def parse_date(value: Any) -> date | None:
    """ISO date (or the date part of an ISO datetime) -> date; None passes through."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value.strip()[:10])
    if isinstance(value, (list, tuple)) and len(value) >= 3:
        # Jackson without JavaTimeModule config: [yyyy, m, d]
        return date(int(value[0]), int(value[1]), int(value[2]))
    raise ValueError(f"Cannot parse date from {value!r}")


def parse_datetime(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        return datetime.fromisoformat(value.strip())
    raise ValueError(f"Cannot parse datetime from {value!r}")


def parse_decimal(value: Any, default: Decimal | None = ZERO) -> Decimal | None:
    """Number or numeric string -> Decimal.  None and "" give ``default``."""
    if value is None or value == "":
        return default
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    try:
        return Decimal(str(value).strip())
    except InvalidOperation as e:
        raise ValueError(f"Cannot parse decimal from {value!r}") from e


def parse_bool(value: Any, default: bool = False) -> bool:
    if value is None:
        return default
    return bool(value)


def date_to_wire(value: date | None) -> str | None:
    return value.isoformat() if value is not None else None


def decimal_to_wire(value: Decimal | None) -> str | None:
    return str(value) if value is not None else None


def drop_none(payload: dict[str, Any]) -> dict[str, Any]:
    """Remove keys whose value is None (the backend treats absent as null)."""
    return {k: v for k, v in payload.items() if v is not None}
