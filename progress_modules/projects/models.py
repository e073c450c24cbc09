"""
Project structure models (``progress_modules.projects.models``).

Frozen value objects for the navigation hierarchy: project -> WBS -> task.
Each level has a draft that carries the create/update form; ``validate()``
applies the backend's required-field and length limits before any request.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any

from progress_kernel.domain.wire import (
    date_to_wire,
    decimal_to_wire,
    parse_bool,
    parse_date,
    parse_decimal,
)
from progress_kernel.exceptions import InputValidationError

CODE_MAX = 50
NAME_MAX = 200
STATUS_MAX = 50
UNIT_MAX = 20


def _check_text(errors: dict[str, str], key: str, label: str, value: str | None, limit: int, required: bool = True) -> None:
    if not (value or "").strip():
        if required:
            errors[key] = f"{label} is required"
    elif len(value) > limit:
        errors[key] = f"{label} must not exceed {limit} characters"


@dataclass(frozen=True)
class Project:
    project_id: int
    project_code: str
    project_name: str
    description: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    status: str | None = None

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> Project:
        return cls(
            project_id=data["projectId"],
            project_code=data.get("projectCode") or "",
            project_name=data.get("projectName") or "",
            description=data.get("description"),
            start_date=parse_date(data.get("startDate")),
            end_date=parse_date(data.get("endDate")),
            status=data.get("status"),
        )


@dataclass(frozen=True)
class Wbs:
    """A WBS node; ``children`` is populated only by the hierarchy endpoint."""

    wbs_id: int
    project_id: int | None
    wbs_code: str
    wbs_name: str
    parent_wbs_id: int | None = None
    level: int | None = None
    planned_qty: Decimal | None = None
    actual_qty: Decimal | None = None
    status: str | None = None
    is_locked: bool = False
    lock_date: date | None = None
    children: tuple[Wbs, ...] = ()

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> Wbs:
        return cls(
            wbs_id=data["wbsId"],
            project_id=data.get("projectId"),
            wbs_code=data.get("wbsCode") or "",
            wbs_name=data.get("wbsName") or "",
            parent_wbs_id=data.get("parentWbsId"),
            level=data.get("level"),
            planned_qty=parse_decimal(data.get("plannedQty"), None),
            actual_qty=parse_decimal(data.get("actualQty"), None),
            status=data.get("status"),
            is_locked=parse_bool(data.get("isLocked")),
            lock_date=parse_date(data.get("lockDate")),
            children=tuple(cls.from_payload(c) for c in data.get("children") or ()),
        )

    def walk(self, depth: int = 0):
        """Yield ``(depth, node)`` in pre-order."""
        yield depth, self
        for child in self.children:
            yield from child.walk(depth + 1)


@dataclass(frozen=True)
class Task:
    task_id: int
    task_code: str
    task_name: str
    project_id: int | None = None
    wbs_id: int | None = None
    start_date: date | None = None
    end_date: date | None = None
    planned_qty: Decimal | None = None
    actual_qty: Decimal | None = None
    unit: str | None = None
    status: str | None = None
    is_locked: bool = False
    lock_date: date | None = None

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> Task:
        return cls(
            task_id=data["taskId"],
            task_code=data.get("taskCode") or "",
            task_name=data.get("taskName") or "",
            project_id=data.get("projectId"),
            wbs_id=data.get("wbsId"),
            start_date=parse_date(data.get("startDate")),
            end_date=parse_date(data.get("endDate")),
            planned_qty=parse_decimal(data.get("plannedQty"), None),
            actual_qty=parse_decimal(data.get("actualQty"), None),
            unit=data.get("unit"),
            status=data.get("status"),
            is_locked=parse_bool(data.get("isLocked")),
            lock_date=parse_date(data.get("lockDate")),
        )

    @property
    def label(self) -> str:
        return f"{self.task_code} {self.task_name}".strip()


@dataclass(frozen=True)
class ProjectDraft:
    project_code: str
    project_name: str
    description: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    status: str | None = "ACTIVE"
    active: bool = True

    @classmethod
    def of(cls, project: Project) -> ProjectDraft:
        return cls(
            project_code=project.project_code,
            project_name=project.project_name,
            description=project.description,
            start_date=project.start_date,
            end_date=project.end_date,
            status=project.status,
        )

    def validate(self) -> None:
        errors: dict[str, str] = {}
        _check_text(errors, "projectCode", "Project code", self.project_code, CODE_MAX)
        _check_text(errors, "projectName", "Project name", self.project_name, NAME_MAX)
        _check_text(errors, "status", "Status", self.status, STATUS_MAX, required=False)
        if errors:
            raise InputValidationError(errors)

    def to_payload(self) -> dict[str, Any]:
        return {
            "projectCode": self.project_code.strip(),
            "projectName": self.project_name.strip(),
            "description": self.description or None,
            "startDate": date_to_wire(self.start_date),
            "endDate": date_to_wire(self.end_date),
            "status": self.status or None,
            "activateFlag": self.active,
        }


@dataclass(frozen=True)
class WbsDraft:
    """``parent_wbs_id`` is None for a root node."""

    project_id: int | None
    wbs_code: str
    wbs_name: str
    parent_wbs_id: int | None = None
    description: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    work_center: str | None = None
    cost_center: str | None = None
    planned_qty: Decimal | None = None
    status: str | None = "ACTIVE"
    active: bool = True

    @classmethod
    def of(cls, wbs: Wbs) -> WbsDraft:
        return cls(
            project_id=wbs.project_id,
            wbs_code=wbs.wbs_code,
            wbs_name=wbs.wbs_name,
            parent_wbs_id=wbs.parent_wbs_id,
            planned_qty=wbs.planned_qty,
            status=wbs.status,
        )

    def validate(self) -> None:
        errors: dict[str, str] = {}
        if self.project_id is None:
            errors["projectId"] = "Project ID is required"
        _check_text(errors, "wbsCode", "WBS code", self.wbs_code, CODE_MAX)
        _check_text(errors, "wbsName", "WBS name", self.wbs_name, NAME_MAX)
        _check_text(errors, "status", "Status", self.status, STATUS_MAX, required=False)
        if self.planned_qty is not None and self.planned_qty < 0:
            errors["plannedQty"] = "Planned quantity cannot be negative"
        if errors:
            raise InputValidationError(errors)

    def to_payload(self) -> dict[str, Any]:
        return {
            "projectId": self.project_id,
            "parentWbsId": self.parent_wbs_id,
            "wbsCode": self.wbs_code.strip(),
            "wbsName": self.wbs_name.strip(),
            "description": self.description or None,
            "startDate": date_to_wire(self.start_date),
            "endDate": date_to_wire(self.end_date),
            "workCenter": self.work_center or None,
            "costCenter": self.cost_center or None,
            "plannedQty": decimal_to_wire(self.planned_qty),
            "status": self.status or None,
            "activateFlag": self.active,
        }


@dataclass(frozen=True)
class TaskDraft:
    project_id: int | None
    wbs_id: int | None
    task_code: str
    task_name: str
    description: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    planned_qty: Decimal | None = None
    unit: str | None = None
    status: str | None = "ACTIVE"
    active: bool = True

    @classmethod
    def of(cls, task: Task) -> TaskDraft:
        return cls(
            project_id=task.project_id,
            wbs_id=task.wbs_id,
            task_code=task.task_code,
            task_name=task.task_name,
            start_date=task.start_date,
            end_date=task.end_date,
            planned_qty=task.planned_qty,
            unit=task.unit,
            status=task.status,
        )

    def validate(self) -> None:
        errors: dict[str, str] = {}
        if self.project_id is None:
            errors["projectId"] = "Project ID is required"
        if self.wbs_id is None:
            errors["wbsId"] = "WBS ID is required"
        _check_text(errors, "taskCode", "Task code", self.task_code, CODE_MAX)
        _check_text(errors, "taskName", "Task name", self.task_name, NAME_MAX)
        _check_text(errors, "unit", "Unit", self.unit, UNIT_MAX, required=False)
        _check_text(errors, "status", "Status", self.status, STATUS_MAX, required=False)
        if self.planned_qty is not None and self.planned_qty < 0:
            errors["plannedQty"] = "Planned quantity cannot be negative"
        if errors:
            raise InputValidationError(errors)

    def to_payload(self) -> dict[str, Any]:
        return {
            "projectId": self.project_id,
            "wbsId": self.wbs_id,
            "taskCode": self.task_code.strip(),
            "taskName": self.task_name.strip(),
            "description": self.description or None,
            "startDate": date_to_wire(self.start_date),
            "endDate": date_to_wire(self.end_date),
            "plannedQty": decimal_to_wire(self.planned_qty),
            "unit": self.unit or None,
            "status": self.status or None,
            "activateFlag": self.active,
        }
