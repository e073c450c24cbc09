"""
Plan version models (``progress_modules.planning.models``).

Responsibility
--------------
Frozen value objects for plan versions, their lines, the three creation
inputs, and the backend's version comparison.

Invariants enforced
-------------------
* Each creation input type corresponds to exactly one ``CreationMode``;
  ``PlanCreation.to_payload`` emits only that mode's block.
* ``DateRangeSplit.validate`` checks the custom split count against the
  supplied quantities before anything is sent.
* Comparison rows are carried as the backend computed them; nothing here
  diffs versions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Union

from progress_kernel.domain.wire import (
    date_to_wire,
    decimal_to_wire,
    parse_date,
    parse_datetime,
    parse_decimal,
)
from progress_kernel.exceptions import CustomSplitMismatchError, InputValidationError


class CreationMode(str, Enum):
    DAILY_ENTRY = "DAILY_ENTRY"
    DATE_RANGE_SPLIT = "DATE_RANGE_SPLIT"
    SINGLE_LINE_QUICK = "SINGLE_LINE_QUICK"


class SplitType(str, Enum):
    EQUAL_SPLIT = "EQUAL_SPLIT"
    WEEKLY_SPLIT = "WEEKLY_SPLIT"
    MONTHLY_SPLIT = "MONTHLY_SPLIT"
    CUSTOM_SPLIT = "CUSTOM_SPLIT"


class ChangeStatus(str, Enum):
    SAME = "SAME"
    INCREASED = "INCREASED"
    DECREASED = "DECREASED"
    NEW = "NEW"
    REMOVED = "REMOVED"


# ---------------------------------------------------------------------------
# Versions and lines
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PlanVersion:
    version_id: int
    task_id: int | None
    version_no: int
    version_date: date | None = None
    description: str | None = None
    is_active: bool = False
    created_by: int | None = None
    created_on: datetime | None = None

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> PlanVersion:
        return cls(
            version_id=data["planVersionId"],
            task_id=data.get("taskId"),
            version_no=int(data.get("versionNo") or 0),
            version_date=parse_date(data.get("versionDate")),
            description=data.get("description"),
            is_active=bool(data.get("isActive")),
            created_by=data.get("createdBy"),
            created_on=parse_datetime(data.get("createdOn")),
        )


@dataclass(frozen=True)
class PlanLine:
    line_number: int
    planned_date: date
    planned_qty: Decimal
    description: str | None = None
    line_id: int | None = None

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> PlanLine:
        return cls(
            line_number=int(data.get("lineNumber") or 0),
            planned_date=parse_date(data["plannedDate"]),
            planned_qty=parse_decimal(data.get("plannedQty")),
            description=data.get("description"),
            line_id=data.get("lineId"),
        )


# ---------------------------------------------------------------------------
# Creation inputs
# ---------------------------------------------------------------------------


def _require_quantity(qty: Decimal | None, name: str) -> None:
    if qty is None:
        raise InputValidationError({name: "Quantity is required"})
    if qty < 0:
        raise InputValidationError({name: "Quantity cannot be negative"})


@dataclass(frozen=True)
class DailyPlanLine:
    planned_date: date
    planned_qty: Decimal
    description: str | None = None

    def to_payload(self) -> dict[str, Any]:
        return {
            "plannedDate": date_to_wire(self.planned_date),
            "plannedQty": decimal_to_wire(self.planned_qty),
            "description": self.description or None,
        }


@dataclass(frozen=True)
class DailyEntry:
    mode = CreationMode.DAILY_ENTRY

    lines: tuple[DailyPlanLine, ...]

    def validate(self) -> None:
        if not self.lines:
            raise InputValidationError({"dailyLines": "At least one plan line with date and quantity is required"})
        seen: set[date] = set()
        for line in self.lines:
            _require_quantity(line.planned_qty, "plannedQty")
            if line.planned_date in seen:
                raise InputValidationError({"dailyLines": f"Duplicate date {line.planned_date}"})
            seen.add(line.planned_date)

    def to_payload(self) -> dict[str, Any]:
        return {"dailyLines": [line.to_payload() for line in self.lines]}


@dataclass(frozen=True)
class DateRangeSplit:
    mode = CreationMode.DATE_RANGE_SPLIT

    start_date: date
    end_date: date
    total_qty: Decimal
    split_type: SplitType = SplitType.EQUAL_SPLIT
    split_count: int | None = None
    custom_quantities: tuple[Decimal, ...] = field(default_factory=tuple)

    def validate(self) -> None:
        if self.end_date < self.start_date:
            raise InputValidationError({"endDate": "End date must not be before start date"})
        _require_quantity(self.total_qty, "totalQty")
        if self.split_type is SplitType.CUSTOM_SPLIT:
            if not self.split_count or self.split_count < 1:
                raise InputValidationError({"splitCount": "Split count is required for a custom split"})
            if len(self.custom_quantities) != self.split_count:
                raise CustomSplitMismatchError(self.split_count, len(self.custom_quantities))
            for qty in self.custom_quantities:
                _require_quantity(qty, "customQuantities")

    def to_payload(self) -> dict[str, Any]:
        custom = self.split_type is SplitType.CUSTOM_SPLIT
        return {
            "rangeSplit": {
                "startDate": date_to_wire(self.start_date),
                "endDate": date_to_wire(self.end_date),
                "totalQty": decimal_to_wire(self.total_qty),
                "splitType": self.split_type.value,
                "splitCount": self.split_count if custom or self.split_type is SplitType.EQUAL_SPLIT else None,
                "customQuantities": [decimal_to_wire(q) for q in self.custom_quantities] if custom else None,
            }
        }


@dataclass(frozen=True)
class SingleLineQuick:
    mode = CreationMode.SINGLE_LINE_QUICK

    planned_date: date
    planned_qty: Decimal
    description: str | None = None

    def validate(self) -> None:
        _require_quantity(self.planned_qty, "plannedQty")

    def to_payload(self) -> dict[str, Any]:
        return {
            "singleLine": {
                "plannedDate": date_to_wire(self.planned_date),
                "plannedQty": decimal_to_wire(self.planned_qty),
                "description": self.description or None,
            }
        }


CreationPayload = Union[DailyEntry, DateRangeSplit, SingleLineQuick]


@dataclass(frozen=True)
class PlanCreation:
    """One ``create-with-mode`` request."""

    task_id: int
    mode: CreationMode
    payload: CreationPayload
    version_date: date
    description: str | None = None

    def validate(self) -> None:
        if self.payload.mode is not self.mode:
            raise InputValidationError(
                {"mode": f"{self.mode.value} does not accept {type(self.payload).__name__} input"}
            )
        self.payload.validate()

    def to_payload(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "taskId": self.task_id,
            "versionDate": date_to_wire(self.version_date),
            "description": self.description or None,
            "mode": self.mode.value,
        }
        body.update(self.payload.to_payload())
        return body

    def planned_dates(self) -> list[date]:
        """Dates the new version touches (start and end for a range split)."""
        if isinstance(self.payload, DailyEntry):
            return [line.planned_date for line in self.payload.lines]
        if isinstance(self.payload, DateRangeSplit):
            return [self.payload.start_date, self.payload.end_date]
        return [self.payload.planned_date]


# ---------------------------------------------------------------------------
# Comparison (server-computed)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ComparisonLine:
    planned_date: date
    qty_version1: Decimal | None
    qty_version2: Decimal | None
    difference: Decimal | None
    status: ChangeStatus

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> ComparisonLine:
        return cls(
            planned_date=parse_date(data["plannedDate"]),
            qty_version1=parse_decimal(data.get("qtyVersion1"), None),
            qty_version2=parse_decimal(data.get("qtyVersion2"), None),
            difference=parse_decimal(data.get("difference"), None),
            status=ChangeStatus(data.get("status") or "SAME"),
        )


@dataclass(frozen=True)
class ComparisonSummary:
    total_days_version1: int
    total_days_version2: int
    common_days: int
    new_days: int
    removed_days: int
    total_qty_version1: Decimal
    total_qty_version2: Decimal
    total_difference: Decimal
    change_statistics: dict[str, int]

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> ComparisonSummary:
        return cls(
            total_days_version1=int(data.get("totalDaysVersion1") or 0),
            total_days_version2=int(data.get("totalDaysVersion2") or 0),
            common_days=int(data.get("commonDays") or 0),
            new_days=int(data.get("newDays") or 0),
            removed_days=int(data.get("removedDays") or 0),
            total_qty_version1=parse_decimal(data.get("totalQtyVersion1")),
            total_qty_version2=parse_decimal(data.get("totalQtyVersion2")),
            total_difference=parse_decimal(data.get("totalDifference")),
            change_statistics=dict(data.get("changeStatistics") or {}),
        )


@dataclass(frozen=True)
class PlanComparison:
    version1: PlanVersion
    version2: PlanVersion
    lines: tuple[ComparisonLine, ...]
    summary: ComparisonSummary | None

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> PlanComparison:
        summary = data.get("summary")
        return cls(
            version1=PlanVersion.from_payload(data["version1"]),
            version2=PlanVersion.from_payload(data["version2"]),
            lines=tuple(ComparisonLine.from_payload(l) for l in data.get("comparisonLines") or ()),
            summary=ComparisonSummary.from_payload(summary) if summary else None,
        )
