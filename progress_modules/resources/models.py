"""
Resource allocation models (``progress_modules.resources.models``).

Responsibility
--------------
Manpower and equipment bookings against a WBS node, the request the form
sends, and the read-only cost values the backend computes (preview, WBS
summary).

Invariants enforced
-------------------
* ``AllocationRequest`` has no cost field, so ``to_payload`` cannot carry a
  locally held preview.  The backend derives ``totalCost`` on commit.
* Money and hours are ``Decimal``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

from progress_kernel.domain.wire import (
    date_to_wire,
    decimal_to_wire,
    parse_date,
    parse_decimal,
)


class ResourceType(str, Enum):
    MANPOWER = "manpower"
    EQUIPMENT = "equipment"

    @property
    def id_field(self) -> str:
        return "employeeId" if self is ResourceType.MANPOWER else "equipmentId"

    @property
    def name_field(self) -> str:
        return "employeeName" if self is ResourceType.MANPOWER else "equipmentName"

    @property
    def category_field(self) -> str:
        return "skillLevel" if self is ResourceType.MANPOWER else "equipmentType"


@dataclass(frozen=True)
class ResourceAllocation:
    allocation_id: int
    resource_type: ResourceType
    wbs_id: int
    resource_id: int
    resource_name: str
    start_date: date
    end_date: date
    category: str | None = None
    wbs_code: str | None = None
    duration_days: int | None = None
    hours_per_day: Decimal | None = None
    rate_per_day: Decimal | None = None
    total_cost: Decimal | None = None
    remarks: str | None = None

    @classmethod
    def from_payload(cls, resource_type: ResourceType, data: dict[str, Any]) -> ResourceAllocation:
        duration = data.get("durationDays")
        return cls(
            allocation_id=data["allocationId"],
            resource_type=resource_type,
            wbs_id=data.get("wbsId"),
            resource_id=data.get(resource_type.id_field),
            resource_name=data.get(resource_type.name_field) or "",
            start_date=parse_date(data.get("startDate")),
            end_date=parse_date(data.get("endDate")),
            category=data.get(resource_type.category_field),
            wbs_code=data.get("wbsCode"),
            duration_days=int(duration) if duration is not None else None,
            hours_per_day=parse_decimal(data.get("hoursPerDay"), None),
            rate_per_day=parse_decimal(data.get("ratePerDay"), None),
            total_cost=parse_decimal(data.get("totalCost"), None),
            remarks=data.get("remarks"),
        )


@dataclass(frozen=True)
class AllocationRequest:
    """What the allocation form submits."""

    resource_type: ResourceType
    wbs_id: int
    resource_id: int
    start_date: date
    end_date: date
    hours_per_day: Decimal | None = None
    remarks: str | None = None

    def to_payload(self) -> dict[str, Any]:
        return {
            "wbsId": self.wbs_id,
            self.resource_type.id_field: self.resource_id,
            "startDate": date_to_wire(self.start_date),
            "endDate": date_to_wire(self.end_date),
            "hoursPerDay": decimal_to_wire(self.hours_per_day),
            "remarks": self.remarks or None,
        }


@dataclass(frozen=True)
class ResourceOption:
    id: int
    name: str
    category: str | None = None
    rate_per_day: Decimal | None = None
    metadata: str | None = None

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> ResourceOption:
        return cls(
            id=data["id"],
            name=data.get("name") or "",
            category=data.get("category"),
            rate_per_day=parse_decimal(data.get("ratePerDay"), None),
            metadata=data.get("metadata"),
        )


@dataclass(frozen=True)
class CostPreview:
    """Backend estimate shown next to the form; never submitted."""

    total_days: int
    rate_per_day: Decimal
    total_cost: Decimal

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> CostPreview:
        return cls(
            total_days=int(data.get("totalDays") or 0),
            rate_per_day=parse_decimal(data.get("ratePerDay")),
            total_cost=parse_decimal(data.get("totalCost")),
        )


@dataclass(frozen=True)
class TimelineItem:
    resource_name: str
    resource_type: str
    start_date: date
    end_date: date
    duration_days: int

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> TimelineItem:
        return cls(
            resource_name=data.get("resourceName") or "",
            resource_type=data.get("resourceType") or "",
            start_date=parse_date(data.get("startDate")),
            end_date=parse_date(data.get("endDate")),
            duration_days=int(data.get("durationDays") or 0),
        )


@dataclass(frozen=True)
class WbsCostSummary:
    wbs_id: int
    manpower_cost: Decimal
    equipment_cost: Decimal
    total_cost: Decimal

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> WbsCostSummary:
        return cls(
            wbs_id=data.get("wbsId"),
            manpower_cost=parse_decimal(data.get("manpowerCost")),
            equipment_cost=parse_decimal(data.get("equipmentCost")),
            total_cost=parse_decimal(data.get("totalCost")),
        )
