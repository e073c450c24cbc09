"""
Allocation form model (``progress_modules.resources.form``).

Keeps the fields of one allocation being created or edited and a backend
cost preview for them.  The preview is refreshed whenever the resource or
either date changes and all three are set; a failed preview just clears
it.  ``submit`` builds an ``AllocationRequest`` from the fields alone, so the
displayed cost is never part of what is sent.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from progress_kernel.exceptions import InputValidationError, ProgressConsoleError, SessionError
from progress_kernel.logging_config import get_logger
from progress_modules.resources.models import (
    AllocationRequest,
    CostPreview,
    ResourceAllocation,
    ResourceType,
)
from progress_modules.resources.service import ResourceAllocationService

logger = get_logger("modules.resources.form")


class AllocationForm:
    def __init__(
        self,
        service: ResourceAllocationService,
        resource_type: ResourceType,
        wbs_id: int,
        allocation_id: int | None = None,
    ):
        self._service = service
        self.resource_type = resource_type
        self.wbs_id = wbs_id
        self.allocation_id = allocation_id
        self.resource_id: int | None = None
        self.start_date: date | None = None
        self.end_date: date | None = None
        self.hours_per_day: Decimal | None = None
        self.remarks: str | None = None
        self.preview: CostPreview | None = None

    @classmethod
    def for_existing(
        cls, service: ResourceAllocationService, allocation: ResourceAllocation
    ) -> AllocationForm:
        form = cls(service, allocation.resource_type, allocation.wbs_id, allocation.allocation_id)
        form.resource_id = allocation.resource_id
        form.start_date = allocation.start_date
        form.end_date = allocation.end_date
        form.hours_per_day = allocation.hours_per_day
        form.remarks = allocation.remarks
        form.refresh_preview()
        return form

    def set_resource(self, resource_id: int | None) -> CostPreview | None:
        self.resource_id = resource_id
        return self.refresh_preview()

    def set_dates(self, start_date: date | None, end_date: date | None) -> CostPreview | None:
        self.start_date = start_date
        self.end_date = end_date
        return self.refresh_preview()

    def refresh_preview(self) -> CostPreview | None:
        self.preview = None
        if self.resource_id is None or self.start_date is None or self.end_date is None:
            return None
        if self.end_date < self.start_date:
            return None
        try:
            self.preview = self._service.preview_cost(
                self.resource_type, self.resource_id, self.start_date, self.end_date
            )
        except SessionError:
            raise
        except ProgressConsoleError as exc:
            logger.debug("cost_preview_unavailable", extra={"error_code": exc.code})
        return self.preview

    def build_request(self) -> AllocationRequest:
        errors: dict[str, str] = {}
        if self.resource_id is None:
            errors[self.resource_type.id_field] = "Select a resource"
        if self.start_date is None:
            errors["startDate"] = "Start date is required"
        if self.end_date is None:
            errors["endDate"] = "End date is required"
        if self.start_date and self.end_date and self.end_date < self.start_date:
            errors["endDate"] = "End date must not be before start date"
        if self.hours_per_day is not None and self.hours_per_day < 0:
            errors["hoursPerDay"] = "Hours per day cannot be negative"
        if self.remarks and len(self.remarks) > 500:
            errors["remarks"] = "Remarks are limited to 500 characters"
        if errors:
            raise InputValidationError(errors)
        return AllocationRequest(
            resource_type=self.resource_type,
            wbs_id=self.wbs_id,
            resource_id=self.resource_id,
            start_date=self.start_date,
            end_date=self.end_date,
            hours_per_day=self.hours_per_day,
            remarks=self.remarks,
        )

    def submit(self) -> ResourceAllocation | None:
        request = self.build_request()
        if self.allocation_id is None:
            return self._service.create_allocation(request)
        return self._service.update_allocation(self.allocation_id, request)
