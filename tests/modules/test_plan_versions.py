"""Tests for plan version creation, activation, revert and comparison."""

from datetime import date
from decimal import Decimal

import pytest

from progress_kernel.exceptions import (
    CustomSplitMismatchError,
    InputValidationError,
    PlanVersionIntegrityError,
)
from progress_modules.business_rules import BusinessRuleService
from progress_modules.planning import (
    ChangeStatus,
    CreationMode,
    DailyEntry,
    DailyPlanLine,
    DateRangeSplit,
    PlanVersionBoard,
    PlanVersionService,
    SingleLineQuick,
    SplitType,
)
from progress_modules.projects.service import ProjectService

TASK = 12


def _version(version_id: int, no: int, active: bool) -> dict:
    return {"planVersionId": version_id, "taskId": TASK, "versionNo": no, "isActive": active}


def _service(api_client, clock) -> PlanVersionService:
    return PlanVersionService(api_client, clock)


def _board(backend, api_client, clock, versions, rules=None) -> PlanVersionBoard:
    backend.route("GET", f"/api/tasks/{TASK}", (200, {"taskId": TASK, "taskCode": "T-12", "taskName": "Pour"}))
    backend.route("GET", f"/api/plans/task/{TASK}", (200, versions))
    board = PlanVersionBoard(_service(api_client, clock), ProjectService(api_client), TASK, rules)
    board.refresh()
    return board


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------


class TestCreateVersion:
    """Local validation and request shape for the three modes."""

    def test_custom_split_mismatch_sends_nothing(self, backend, api_client, clock):
        split = DateRangeSplit(
            start_date=date(2025, 11, 3),
            end_date=date(2025, 11, 7),
            total_qty=Decimal("50"),
            split_type=SplitType.CUSTOM_SPLIT,
            split_count=3,
            custom_quantities=(Decimal("10"), Decimal("40")),
        )
        with pytest.raises(CustomSplitMismatchError) as exc_info:
            _service(api_client, clock).create_version(TASK, CreationMode.DATE_RANGE_SPLIT, split)
        assert exc_info.value.split_count == 3
        assert exc_info.value.supplied == 2
        assert backend.calls == []

    def test_mode_payload_mismatch(self, backend, api_client, clock):
        quick = SingleLineQuick(date(2025, 11, 3), Decimal("5"))
        with pytest.raises(InputValidationError):
            _service(api_client, clock).create_version(TASK, CreationMode.DAILY_ENTRY, quick)
        assert backend.calls == []

    def test_range_end_before_start(self, api_client, clock):
        split = DateRangeSplit(date(2025, 11, 7), date(2025, 11, 3), Decimal("5"))
        with pytest.raises(InputValidationError) as exc_info:
            _service(api_client, clock).create_version(TASK, CreationMode.DATE_RANGE_SPLIT, split)
        assert "endDate" in exc_info.value.field_errors

    def test_daily_entry_duplicate_date(self, api_client, clock):
        entry = DailyEntry(
            (
                DailyPlanLine(date(2025, 11, 3), Decimal("1")),
                DailyPlanLine(date(2025, 11, 3), Decimal("2")),
            )
        )
        with pytest.raises(InputValidationError):
            _service(api_client, clock).create_version(TASK, CreationMode.DAILY_ENTRY, entry)

    def test_daily_entry_payload(self, backend, api_client, clock):
        backend.route("POST", "/api/plans/create-with-mode", (200, {"planVersionId": 3}))
        entry = DailyEntry((DailyPlanLine(date(2025, 11, 3), Decimal("2.5"), "pour"),))
        _service(api_client, clock).create_version(
            TASK, CreationMode.DAILY_ENTRY, entry, description="Rebaseline"
        )
        assert backend.calls[0].json == {
            "taskId": TASK,
            "versionDate": "2025-11-01",
            "description": "Rebaseline",
            "mode": "DAILY_ENTRY",
            "dailyLines": [{"plannedDate": "2025-11-03", "plannedQty": "2.5", "description": "pour"}],
        }

    def test_custom_split_payload(self, backend, api_client, clock):
        backend.route("POST", "/api/plans/create-with-mode", (200, None))
        split = DateRangeSplit(
            date(2025, 11, 3),
            date(2025, 11, 4),
            Decimal("3"),
            SplitType.CUSTOM_SPLIT,
            2,
            (Decimal("1"), Decimal("2")),
        )
        _service(api_client, clock).create_version(TASK, CreationMode.DATE_RANGE_SPLIT, split)
        block = backend.calls[0].json["rangeSplit"]
        assert block["splitType"] == "CUSTOM_SPLIT"
        assert block["customQuantities"] == ["1", "2"]

    def test_weekly_split_omits_count(self, backend, api_client, clock):
        backend.route("POST", "/api/plans/create-with-mode", (200, None))
        split = DateRangeSplit(date(2025, 11, 3), date(2025, 11, 30), Decimal("40"), SplitType.WEEKLY_SPLIT, 4)
        _service(api_client, clock).create_version(TASK, CreationMode.DATE_RANGE_SPLIT, split)
        block = backend.calls[0].json["rangeSplit"]
        assert block["splitCount"] is None
        assert block["customQuantities"] is None


# ---------------------------------------------------------------------------
# Board
# ---------------------------------------------------------------------------


class TestPlanVersionBoard:
    """Mutations are always followed by a refetch."""

    def test_versions_sorted_newest_first(self, backend, api_client, clock):
        board = _board(backend, api_client, clock, [_version(1, 1, False), _version(2, 2, True)])
        assert [v.version_no for v in board.versions] == [2, 1]
        assert board.active_version.version_id == 2
        assert board.task.label == "T-12 Pour"

    def test_activate_refetches_list(self, backend, api_client, clock):
        board = _board(backend, api_client, clock, [_version(1, 1, True), _version(2, 2, False)])
        backend.route("PUT", "/api/plans/2/activate", (200, None))
        backend.route("GET", f"/api/plans/task/{TASK}", (200, [_version(1, 1, False), _version(2, 2, True)]))

        active = board.activate(2)

        assert active.version_id == 2
        assert not next(v for v in board.versions if v.version_id == 1).is_active
        assert len(backend.calls_to("GET", f"/api/plans/task/{TASK}")) == 2

    def test_multiple_active_is_integrity_error(self, backend, api_client, clock):
        board = _board(backend, api_client, clock, [_version(1, 1, True), _version(2, 2, True)])
        with pytest.raises(PlanVersionIntegrityError) as exc_info:
            board.active_version
        assert sorted(exc_info.value.active_version_ids) == [1, 2]

    def test_no_active_version(self, backend, api_client, clock):
        board = _board(backend, api_client, clock, [_version(1, 1, False)])
        assert board.active_version is None

    def test_select_loads_sorted_lines(self, backend, api_client, clock):
        board = _board(backend, api_client, clock, [_version(1, 1, True)])
        backend.route(
            "GET",
            "/api/plans/1/lines",
            (200, [
                {"lineNumber": 2, "plannedDate": "2025-11-04", "plannedQty": 3},
                {"lineNumber": 1, "plannedDate": "2025-11-03", "plannedQty": 2},
            ]),
        )
        lines = board.select(1)
        assert [l.line_number for l in lines] == [1, 2]

    def test_select_unknown_version(self, backend, api_client, clock):
        board = _board(backend, api_client, clock, [_version(1, 1, True)])
        with pytest.raises(KeyError):
            board.select(99)

    def test_revert_requires_confirmation(self, backend, api_client, clock):
        board = _board(backend, api_client, clock, [_version(1, 1, False), _version(2, 2, True)])
        assert not board.revert(1, confirm=lambda v: False)
        assert backend.calls_to("PUT", "/api/plans/1/revert") == []

    def test_revert_refetches_task_and_versions(self, backend, api_client, clock):
        board = _board(backend, api_client, clock, [_version(1, 1, False), _version(2, 2, True)])
        backend.route("PUT", "/api/plans/1/revert", (200, None))
        assert board.revert(1, confirm=lambda v: v.version_no == 1)
        assert len(backend.calls_to("GET", f"/api/tasks/{TASK}")) == 2

    def test_compare_uses_backend_result(self, backend, api_client, clock):
        board = _board(backend, api_client, clock, [_version(1, 1, False), _version(2, 2, True)])
        backend.route(
            "GET",
            "/api/plans/compare/1/2",
            (200, {
                "version1": _version(1, 1, False),
                "version2": _version(2, 2, True),
                "comparisonLines": [
                    {"plannedDate": "2025-11-03", "qtyVersion1": 2, "qtyVersion2": 4, "difference": 2, "status": "INCREASED"},
                    {"plannedDate": "2025-11-05", "qtyVersion2": 1, "difference": 1, "status": "NEW"},
                ],
                "summary": {"commonDays": 1, "newDays": 1, "totalDifference": 3},
            }),
        )
        comparison = board.compare(1, 2)
        assert [l.status for l in comparison.lines] == [ChangeStatus.INCREASED, ChangeStatus.NEW]
        assert comparison.lines[1].qty_version1 is None
        assert comparison.summary.total_difference == Decimal("3")


# ---------------------------------------------------------------------------
# Planned-date rule check before create
# ---------------------------------------------------------------------------

CHECK_PATH = "/api/business-rules/validate-single"
CREATE_PATH = "/api/plans/create-with-mode"


class TestCreateDateCheck:
    """Planned dates go through rule 201 before create-with-mode."""

    def _board(self, backend, api_client, clock):
        return _board(backend, api_client, clock, [_version(1, 1, True)], BusinessRuleService(api_client))

    def test_rejected_dates_abort_create(self, backend, api_client, clock):
        board = self._board(backend, api_client, clock)
        backend.route(
            "POST",
            CHECK_PATH,
            (400, {"valid": False, "ruleNumber": 201, "message": "Start date cannot be in the future"}),
        )

        created = board.create(CreationMode.SINGLE_LINE_QUICK, SingleLineQuick(date(2025, 11, 10), Decimal("5")))

        assert not created
        assert board.date_check.violation.rule_number == 201
        assert board.date_check.message == "Start date cannot be in the future"
        assert backend.calls_to("POST", CREATE_PATH) == []
        sent = backend.calls_to("POST", CHECK_PATH)[0].json
        assert sent == {"ruleNumber": 201, "context": {"taskId": TASK, "dates": ["2025-11-10"]}}

    def test_range_split_checks_start_and_end(self, backend, api_client, clock):
        board = self._board(backend, api_client, clock)
        backend.route("POST", CHECK_PATH, (200, {"valid": True, "message": "Validation passed"}))
        backend.route("POST", CREATE_PATH, (200, None))
        split = DateRangeSplit(date(2025, 10, 20), date(2025, 10, 24), Decimal("50"))

        assert board.create(CreationMode.DATE_RANGE_SPLIT, split)

        assert backend.calls_to("POST", CHECK_PATH)[0].json["context"]["dates"] == ["2025-10-20", "2025-10-24"]
        assert len(backend.calls_to("POST", CREATE_PATH)) == 1
        assert board.date_check.valid
        assert len(backend.calls_to("GET", f"/api/plans/task/{TASK}")) == 2

    def test_unavailable_check_does_not_block(self, backend, api_client, clock):
        board = self._board(backend, api_client, clock)
        backend.route("POST", CHECK_PATH, (500, {"error": "Validation failed: boom"}))
        backend.route("POST", CREATE_PATH, (200, None))

        assert board.create(CreationMode.SINGLE_LINE_QUICK, SingleLineQuick(date(2025, 10, 30), Decimal("5")))

        assert board.date_check is None
        assert len(backend.calls_to("POST", CREATE_PATH)) == 1

    def test_local_validation_precedes_check(self, backend, api_client, clock):
        board = self._board(backend, api_client, clock)
        with pytest.raises(InputValidationError):
            board.create(CreationMode.DAILY_ENTRY, DailyEntry(()))
        assert backend.calls_to("POST", CHECK_PATH) == []
