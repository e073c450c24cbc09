"""
Day-wise progress models (``progress_modules.daywise.models``).

Responsibility
--------------
``DayWiseRow`` is one calendar date of a task's plan/actual record as the
grid holds it.  ``DayWiseSummary`` totals a set of rows for the footer.
``TaskUpdate`` is a stored record from the plain update list, and
``TaskUpdateDraft`` is a single-date save outside the grid.

Invariants enforced
-------------------
* ``variance`` is a property computed from ``actual_qty - planned_qty``; it
  is never a stored field, so it cannot drift from the quantities.  The
  backend's own ``variance`` value is ignored on read.
* ``planned_qty`` and ``actual_qty`` are ``Decimal`` and non-negative.
* Rows are frozen; an edit produces a new row via ``with_actual`` or
  ``with_remarks``, which refuse to touch a row that is not editable.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from progress_kernel.domain.wire import (
    ZERO,
    date_to_wire,
    decimal_to_wire,
    drop_none,
    parse_date,
    parse_datetime,
    parse_decimal,
)
from progress_kernel.exceptions import InputValidationError


@dataclass(frozen=True)
class DayWiseRow:
    update_date: date
    planned_qty: Decimal
    actual_qty: Decimal = ZERO
    remarks: str | None = None
    is_locked: bool = False
    can_edit: bool = True
    update_id: int | None = None

    def __post_init__(self) -> None:
        if self.planned_qty < 0:
            raise ValueError(f"planned_qty must be non-negative, got {self.planned_qty}")
        if self.actual_qty < 0:
            raise ValueError(f"actual_qty must be non-negative, got {self.actual_qty}")

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> DayWiseRow:
        return cls(
            update_date=parse_date(data["updateDate"]),
            planned_qty=parse_decimal(data.get("planQty")),
            actual_qty=parse_decimal(data.get("actualQty")),
            remarks=data.get("remarks"),
            is_locked=bool(data.get("isLocked")),
            can_edit=data.get("canEdit") is not False,
            update_id=data.get("updateId"),
        )

    @property
    def variance(self) -> Decimal:
        return self.actual_qty - self.planned_qty

    @property
    def is_editable(self) -> bool:
        return self.can_edit and not self.is_locked

    @property
    def is_over_plan(self) -> bool:
        return self.actual_qty > self.planned_qty

    @property
    def belongs_in_batch(self) -> bool:
        """Editable rows with an actual to record or a server record to update."""
        return self.is_editable and (self.actual_qty > 0 or self.update_id is not None)

    def with_actual(self, actual_qty: Decimal) -> DayWiseRow:
        if not self.is_editable:
            raise ValueError(f"Row {self.update_date} is not editable")
        return replace(self, actual_qty=actual_qty)

    def with_remarks(self, remarks: str | None) -> DayWiseRow:
        if not self.is_editable:
            raise ValueError(f"Row {self.update_date} is not editable")
        return replace(self, remarks=remarks or None)

    def to_update_payload(self) -> dict[str, Any]:
        return {
            "updateDate": date_to_wire(self.update_date),
            "planQty": decimal_to_wire(self.planned_qty),
            "actualQty": decimal_to_wire(self.actual_qty),
            "remarks": self.remarks or None,
        }


@dataclass(frozen=True)
class DayWiseSummary:
    row_count: int
    total_planned: Decimal
    total_actual: Decimal
    over_plan_count: int
    locked_count: int

    @property
    def total_variance(self) -> Decimal:
        return self.total_actual - self.total_planned

    @classmethod
    def of(cls, rows: Iterable[DayWiseRow]) -> DayWiseSummary:
        rows = list(rows)
        return cls(
            row_count=len(rows),
            total_planned=sum((r.planned_qty for r in rows), ZERO),
            total_actual=sum((r.actual_qty for r in rows), ZERO),
            over_plan_count=sum(1 for r in rows if r.is_editable and r.is_over_plan),
            locked_count=sum(1 for r in rows if r.is_locked),
        )


@dataclass(frozen=True)
class TaskUpdate:
    """One stored update record, as the per-task update list returns it."""

    update_id: int
    task_id: int | None
    update_date: date
    planned_qty: Decimal | None
    actual_qty: Decimal
    daily_update_qty: Decimal | None = None
    remarks: str | None = None
    updated_on: datetime | None = None

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> TaskUpdate:
        return cls(
            update_id=data["updateId"],
            task_id=data.get("taskId"),
            update_date=parse_date(data["updateDate"]),
            planned_qty=parse_decimal(data.get("plannedQty"), None),
            actual_qty=parse_decimal(data.get("actualQty")),
            daily_update_qty=parse_decimal(data.get("dailyUpdateQty"), None),
            remarks=data.get("remarks"),
            updated_on=parse_datetime(data.get("updatedOn") or data.get("createdOn")),
        )


@dataclass(frozen=True)
class TaskUpdateDraft:
    """
    A single-date upsert: the backend updates the record for
    ``(task_id, update_date)`` when one exists and creates it otherwise.
    ``daily_update_qty`` left as None is derived by the backend.
    """

    task_id: int
    update_date: date | None
    actual_qty: Decimal | None
    planned_qty: Decimal | None = None
    daily_update_qty: Decimal | None = None
    remarks: str | None = None

    def validate(self) -> None:
        errors: dict[str, str] = {}
        if self.update_date is None:
            errors["updateDate"] = "Update date is required"
        if self.actual_qty is None:
            errors["actualQty"] = "Actual quantity is required"
        elif self.actual_qty < 0:
            errors["actualQty"] = "Actual quantity cannot be negative"
        if self.planned_qty is not None and self.planned_qty < 0:
            errors["plannedQty"] = "Planned quantity cannot be negative"
        if errors:
            raise InputValidationError(errors)

    def to_payload(self) -> dict[str, Any]:
        return drop_none({
            "taskId": self.task_id,
            "updateDate": date_to_wire(self.update_date),
            "plannedQty": decimal_to_wire(self.planned_qty),
            "actualQty": decimal_to_wire(self.actual_qty),
            "dailyUpdateQty": decimal_to_wire(self.daily_update_qty),
            "remarks": self.remarks or None,
        })
