"""
Confirmation (freeze) models (``progress_modules.confirmation.models``).

Responsibility
--------------
Value objects for WBS confirmations, the per-WBS summary (which doubles as
the read-only preview for a candidate date), and the lock banner.

Invariants enforced
-------------------
* ``lock_banner`` depends only on the lock date and the ``today`` it is
  given; blocking versus informational is decided at render time, never
  stored.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from progress_kernel.domain.wire import parse_date, parse_datetime, parse_decimal


@dataclass(frozen=True)
class Confirmation:
    confirmation_id: int
    wbs_id: int
    confirmation_date: date
    confirmed_qty: Decimal
    remarks: str | None = None
    created_by: int | None = None
    created_on: datetime | None = None
    wbs_code: str | None = None
    wbs_name: str | None = None
    lock_date: date | None = None

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> Confirmation:
        return cls(
            confirmation_id=data["confirmationId"],
            wbs_id=data.get("wbsId"),
            confirmation_date=parse_date(data["confirmationDate"]),
            confirmed_qty=parse_decimal(data.get("confirmedQty")),
            remarks=data.get("remarks"),
            created_by=data.get("createdBy"),
            created_on=parse_datetime(data.get("createdOn")),
            wbs_code=data.get("wbsCode"),
            wbs_name=data.get("wbsName"),
            lock_date=parse_date(data.get("lockDate")),
        )


@dataclass(frozen=True)
class ConfirmationSummary:
    wbs_id: int
    wbs_code: str | None
    wbs_name: str | None
    last_confirmation_date: date | None
    lock_date: date | None
    planned_qty: Decimal
    actual_qty: Decimal
    confirmed_qty_to_date: Decimal
    variance: Decimal
    preview_date: date | None = None
    preview_actual_qty: Decimal | None = None

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> ConfirmationSummary:
        return cls(
            wbs_id=data.get("wbsId"),
            wbs_code=data.get("wbsCode"),
            wbs_name=data.get("wbsName"),
            last_confirmation_date=parse_date(data.get("lastConfirmationDate")),
            lock_date=parse_date(data.get("lockDate")),
            planned_qty=parse_decimal(data.get("plannedQty")),
            actual_qty=parse_decimal(data.get("actualQty")),
            confirmed_qty_to_date=parse_decimal(data.get("confirmedQtyToDate")),
            variance=parse_decimal(data.get("variance")),
            preview_date=parse_date(data.get("previewDate")),
            preview_actual_qty=parse_decimal(data.get("previewActualQty"), None),
        )


class LockLevel(str, Enum):
    NONE = "none"
    INFORMATIONAL = "informational"
    BLOCKING = "blocking"


@dataclass(frozen=True)
class LockBanner:
    level: LockLevel
    lock_date: date | None
    text: str


def lock_banner(lock_date: date | None, today: date) -> LockBanner:
    if lock_date is None:
        return LockBanner(LockLevel.NONE, None, "No confirmation lock is active. Updates are editable.")
    if lock_date >= today:
        return LockBanner(
            LockLevel.BLOCKING,
            lock_date,
            f"Locked through {lock_date.isoformat()}. Task updates before this date are frozen.",
        )
    return LockBanner(
        LockLevel.INFORMATIONAL,
        lock_date,
        f"Locked through {lock_date.isoformat()}. Future dates remain editable.",
    )


@dataclass(frozen=True)
class ConfirmationPrompt:
    """What the second-step dialog restates before the freeze is sent."""

    wbs_id: int
    wbs_name: str | None
    confirmation_date: date
    preview_qty: Decimal | None
    remarks: str | None

    @property
    def text(self) -> str:
        qty = "unknown" if self.preview_qty is None else f"{self.preview_qty:,}"
        target = self.wbs_name or f"WBS {self.wbs_id}"
        return (
            f"Freeze {target} as of {self.confirmation_date.isoformat()} "
            f"with actual quantity {qty}? This locks all earlier updates."
        )
