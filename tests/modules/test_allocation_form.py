"""Tests for resource allocations and the cost-preview form."""

from datetime import date
from decimal import Decimal

import pytest

from progress_kernel.exceptions import InputValidationError, SessionTerminatedError
from progress_modules.resources import (
    AllocationForm,
    ResourceAllocation,
    ResourceAllocationService,
    ResourceType,
)

WBS = 40
COST_PATH = "/api/resources/cost/manpower/3"


def _preview_body() -> dict:
    return {"totalDays": 5, "ratePerDay": "200.00", "totalCost": "1000.00"}


def _form(api_client, resource_type=ResourceType.MANPOWER) -> AllocationForm:
    return AllocationForm(ResourceAllocationService(api_client), resource_type, WBS)


# ---------------------------------------------------------------------------
# Cost preview
# ---------------------------------------------------------------------------


class TestCostPreview:
    """Preview is fetched once resource and both dates are set."""

    def test_no_request_until_complete(self, backend, api_client):
        form = _form(api_client)
        assert form.set_resource(3) is None
        assert backend.calls == []

    def test_preview_fetched_with_dates(self, backend, api_client):
        backend.route("GET", COST_PATH, (200, _preview_body()))
        form = _form(api_client)
        form.set_resource(3)
        preview = form.set_dates(date(2025, 11, 3), date(2025, 11, 7))
        assert preview.total_cost == Decimal("1000.00")
        assert backend.calls[0].params == {"startDate": "2025-11-03", "endDate": "2025-11-07"}

    def test_reversed_dates_skip_preview(self, backend, api_client):
        form = _form(api_client)
        form.set_resource(3)
        assert form.set_dates(date(2025, 11, 7), date(2025, 11, 3)) is None
        assert backend.calls == []

    def test_failure_clears_preview(self, backend, api_client):
        backend.route("GET", COST_PATH, (200, _preview_body()), (500, None))
        form = _form(api_client)
        form.set_resource(3)
        form.set_dates(date(2025, 11, 3), date(2025, 11, 7))
        assert form.preview is not None
        form.set_dates(date(2025, 11, 3), date(2025, 11, 9))
        assert form.preview is None

    def test_session_failure_propagates(self, backend, api_client, session_store):
        session_store.clear()
        backend.route("GET", COST_PATH, (401, None))
        form = _form(api_client)
        form.set_resource(3)
        with pytest.raises(SessionTerminatedError):
            form.set_dates(date(2025, 11, 3), date(2025, 11, 7))


# ---------------------------------------------------------------------------
# Submission
# ---------------------------------------------------------------------------


class TestSubmit:
    """Only form fields are sent; the backend computes cost."""

    def test_payload_never_contains_cost(self, backend, api_client):
        backend.route("GET", COST_PATH, (200, _preview_body()))
        backend.route(
            "POST",
            "/api/resources/manpower",
            (200, {"allocationId": 9, "wbsId": WBS, "employeeId": 3, "employeeName": "Lee",
                   "startDate": "2025-11-03", "endDate": "2025-11-07", "totalCost": "1000.00"}),
        )
        form = _form(api_client)
        form.set_resource(3)
        form.set_dates(date(2025, 11, 3), date(2025, 11, 7))
        form.hours_per_day = Decimal("8")

        allocation = form.submit()

        sent = backend.calls_to("POST", "/api/resources/manpower")[0].json
        assert sent == {
            "wbsId": WBS,
            "employeeId": 3,
            "startDate": "2025-11-03",
            "endDate": "2025-11-07",
            "hoursPerDay": "8",
            "remarks": None,
        }
        assert "totalCost" not in sent
        assert allocation.total_cost == Decimal("1000.00")

    def test_equipment_uses_equipment_id(self, backend, api_client):
        backend.route("POST", "/api/resources/equipment", (200, None))
        form = _form(api_client, ResourceType.EQUIPMENT)
        form.resource_id = 4
        form.start_date = form.end_date = date(2025, 11, 3)
        form.submit()
        assert backend.calls[0].json["equipmentId"] == 4

    def test_missing_fields(self, api_client):
        with pytest.raises(InputValidationError) as exc_info:
            _form(api_client).build_request()
        assert set(exc_info.value.field_errors) == {"employeeId", "startDate", "endDate"}

    def test_end_before_start(self, api_client):
        form = _form(api_client)
        form.resource_id = 3
        form.start_date = date(2025, 11, 7)
        form.end_date = date(2025, 11, 3)
        with pytest.raises(InputValidationError) as exc_info:
            form.build_request()
        assert "endDate" in exc_info.value.field_errors

    def test_existing_allocation_updates(self, backend, api_client):
        backend.route("GET", COST_PATH, (200, _preview_body()))
        backend.route("PUT", "/api/resources/manpower/9", (200, None))
        allocation = ResourceAllocation(
            allocation_id=9,
            resource_type=ResourceType.MANPOWER,
            wbs_id=WBS,
            resource_id=3,
            resource_name="Lee",
            start_date=date(2025, 11, 3),
            end_date=date(2025, 11, 7),
        )
        form = AllocationForm.for_existing(ResourceAllocationService(api_client), allocation)
        assert form.preview is not None
        form.submit()
        assert len(backend.calls_to("PUT", "/api/resources/manpower/9")) == 1


class TestAllocationService:
    def test_list_and_summary(self, backend, api_client):
        backend.route(
            "GET",
            f"/api/resources/equipment/wbs/{WBS}",
            (200, [{"allocationId": 1, "wbsId": WBS, "equipmentId": 2, "equipmentName": "Crane",
                    "equipmentType": "CRANE", "startDate": "2025-11-03", "endDate": "2025-11-04"}]),
        )
        backend.route(
            "GET",
            f"/api/resources/cost/wbs/{WBS}",
            (200, {"wbsId": WBS, "manpowerCost": "10", "equipmentCost": "5.5", "totalCost": "15.5"}),
        )
        service = ResourceAllocationService(api_client)
        allocations = service.list_allocations(ResourceType.EQUIPMENT, WBS)
        assert allocations[0].resource_name == "Crane"
        assert allocations[0].category == "CRANE"
        assert service.cost_summary(WBS).total_cost == Decimal("15.5")
