"""REST calls for manpower and equipment allocations."""

from __future__ import annotations

from datetime import date

from progress_client.transport import ApiClient
from progress_kernel.domain.wire import date_to_wire
from progress_kernel.logging_config import get_logger
from progress_modules.resources.models import (
    AllocationRequest,
    CostPreview,
    ResourceAllocation,
    ResourceOption,
    ResourceType,
    TimelineItem,
    WbsCostSummary,
)

logger = get_logger("modules.resources.service")

_BASE = "/api/resources"


class ResourceAllocationService:
    """
    ``/api/resources`` wrapper for both resource types.

    Contract:
        Allocation writes send ``AllocationRequest`` payloads only.
    Non-goals:
        No client-side cost arithmetic; previews come from the backend.
    """

    def __init__(self, client: ApiClient):
        self._client = client

    def list_allocations(self, resource_type: ResourceType, wbs_id: int) -> list[ResourceAllocation]:
        body = self._client.get(f"{_BASE}/{resource_type.value}/wbs/{wbs_id}")
        return [ResourceAllocation.from_payload(resource_type, a) for a in body or []]

    def create_allocation(self, request: AllocationRequest) -> ResourceAllocation | None:
        body = self._client.post(f"{_BASE}/{request.resource_type.value}", request.to_payload())
        logger.info(
            "allocation_created",
            extra={"resource_type": request.resource_type.value, "wbs_id": request.wbs_id},
        )
        return ResourceAllocation.from_payload(request.resource_type, body) if body else None

    def update_allocation(self, allocation_id: int, request: AllocationRequest) -> ResourceAllocation | None:
        body = self._client.put(
            f"{_BASE}/{request.resource_type.value}/{allocation_id}",
            request.to_payload(),
        )
        logger.info(
            "allocation_updated",
            extra={"resource_type": request.resource_type.value, "allocation_id": allocation_id},
        )
        return ResourceAllocation.from_payload(request.resource_type, body) if body else None

    def delete_allocation(self, resource_type: ResourceType, allocation_id: int) -> None:
        self._client.delete(f"{_BASE}/{resource_type.value}/{allocation_id}")
        logger.info(
            "allocation_deleted",
            extra={"resource_type": resource_type.value, "allocation_id": allocation_id},
        )

    def options(self, resource_type: ResourceType, search: str | None = None) -> list[ResourceOption]:
        body = self._client.get(f"{_BASE}/{resource_type.value}/options", {"search": search or None})
        return [ResourceOption.from_payload(o) for o in body or []]

    def preview_cost(
        self,
        resource_type: ResourceType,
        resource_id: int,
        start_date: date,
        end_date: date,
    ) -> CostPreview:
        body = self._client.get(
            f"{_BASE}/cost/{resource_type.value}/{resource_id}",
            {"startDate": date_to_wire(start_date), "endDate": date_to_wire(end_date)},
        )
        return CostPreview.from_payload(body or {})

    def timeline(self, wbs_id: int) -> list[TimelineItem]:
        body = self._client.get(f"{_BASE}/timeline/wbs/{wbs_id}")
        return [TimelineItem.from_payload(t) for t in body or []]

    def cost_summary(self, wbs_id: int) -> WbsCostSummary:
        return WbsCostSummary.from_payload(self._client.get(f"{_BASE}/cost/wbs/{wbs_id}") or {"wbsId": wbs_id})
