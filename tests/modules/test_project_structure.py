"""Tests for creating, editing and deleting projects, WBS nodes and tasks."""

from datetime import date
from decimal import Decimal

import pytest

from progress_kernel.exceptions import InputValidationError, RuleViolationError
from progress_modules.projects import (
    Project,
    ProjectDraft,
    ProjectService,
    Task,
    TaskDraft,
    Wbs,
    WbsDraft,
)
from tests.fakes import violation_body


@pytest.fixture
def service(api_client) -> ProjectService:
    return ProjectService(api_client)


# ---------------------------------------------------------------------------
# Drafts
# ---------------------------------------------------------------------------


class TestDraftValidation:
    def test_project_code_and_name_required(self):
        with pytest.raises(InputValidationError) as exc_info:
            ProjectDraft(project_code="  ", project_name="").validate()
        assert exc_info.value.field_errors == {
            "projectCode": "Project code is required",
            "projectName": "Project name is required",
        }

    def test_project_code_length_limit(self):
        with pytest.raises(InputValidationError) as exc_info:
            ProjectDraft(project_code="P" * 51, project_name="Tower").validate()
        assert exc_info.value.field_errors == {"projectCode": "Project code must not exceed 50 characters"}

    def test_wbs_requires_project(self):
        with pytest.raises(InputValidationError) as exc_info:
            WbsDraft(project_id=None, wbs_code="1", wbs_name="Site").validate()
        assert set(exc_info.value.field_errors) == {"projectId"}

    def test_task_requires_project_and_wbs(self):
        with pytest.raises(InputValidationError) as exc_info:
            TaskDraft(project_id=None, wbs_id=None, task_code="T1", task_name="Rebar").validate()
        assert set(exc_info.value.field_errors) == {"projectId", "wbsId"}

    def test_task_unit_limit_and_negative_plan(self):
        draft = TaskDraft(1, 10, "T1", "Rebar", unit="x" * 21, planned_qty=Decimal("-1"))
        with pytest.raises(InputValidationError) as exc_info:
            draft.validate()
        assert set(exc_info.value.field_errors) == {"unit", "plannedQty"}

    def test_task_payload(self):
        draft = TaskDraft(
            1, 10, " T1 ", "Rebar",
            start_date=date(2025, 11, 3),
            planned_qty=Decimal("120.5"),
            unit="kg",
        )
        assert draft.to_payload() == {
            "projectId": 1,
            "wbsId": 10,
            "taskCode": "T1",
            "taskName": "Rebar",
            "description": None,
            "startDate": "2025-11-03",
            "endDate": None,
            "plannedQty": "120.5",
            "unit": "kg",
            "status": "ACTIVE",
            "activateFlag": True,
        }

    def test_drafts_from_existing_records(self):
        task = Task(task_id=5, task_code="T5", task_name="Rebar", project_id=1, wbs_id=11, unit="kg")
        assert TaskDraft.of(task).wbs_id == 11
        wbs = Wbs(wbs_id=11, project_id=1, wbs_code="1.1", wbs_name="Footings", parent_wbs_id=10)
        assert WbsDraft.of(wbs).parent_wbs_id == 10
        project = Project(project_id=1, project_code="P1", project_name="Tower", status="ON_HOLD")
        assert ProjectDraft.of(project).status == "ON_HOLD"


# ---------------------------------------------------------------------------
# Service writes
# ---------------------------------------------------------------------------


class TestProjectWrites:
    def test_create_posts_payload(self, backend, service, captured_logs):
        backend.route("POST", "/api/projects", (201, {"projectId": 3, "projectCode": "P3", "projectName": "Depot"}))
        project = service.create_project(ProjectDraft("P3", "Depot", start_date=date(2025, 12, 1)))
        assert project.project_id == 3
        sent = backend.calls_to("POST", "/api/projects")[0].json
        assert sent["projectCode"] == "P3"
        assert sent["startDate"] == "2025-12-01"
        assert any(r["message"] == "project_created" and r["project_id"] == 3 for r in captured_logs())

    def test_invalid_draft_never_sent(self, backend, service):
        with pytest.raises(InputValidationError):
            service.create_project(ProjectDraft("", "Depot"))
        assert backend.calls == []

    def test_update_puts_to_project(self, backend, service):
        backend.route("PUT", "/api/projects/3", (200, {"projectId": 3, "projectCode": "P3", "projectName": "Depot 2"}))
        project = service.update_project(3, ProjectDraft("P3", "Depot 2"))
        assert project.project_name == "Depot 2"

    def test_delete_rejected_by_rule(self, backend, service, published):
        backend.route("DELETE", "/api/projects/3", (400, violation_body(305, "Project has confirmed progress")))
        with pytest.raises(RuleViolationError):
            service.delete_project(3)
        assert [v.rule_number for v in published] == [305]


class TestWbsWrites:
    def test_create_child_node(self, backend, service):
        backend.route("POST", "/api/wbs", (201, {"wbsId": 12, "projectId": 1, "wbsCode": "1.2", "wbsName": "Slab"}))
        wbs = service.create_wbs(WbsDraft(1, "1.2", "Slab", parent_wbs_id=10, planned_qty=Decimal("40")))
        assert wbs.wbs_id == 12
        sent = backend.calls_to("POST", "/api/wbs")[0].json
        assert sent["parentWbsId"] == 10
        assert sent["plannedQty"] == "40"

    def test_update_and_delete(self, backend, service):
        backend.route("PUT", "/api/wbs/12", (200, {"wbsId": 12, "wbsCode": "1.2", "wbsName": "Roof slab"}))
        backend.route("DELETE", "/api/wbs/12", (204, None))
        assert service.update_wbs(12, WbsDraft(1, "1.2", "Roof slab")).wbs_name == "Roof slab"
        service.delete_wbs(12)
        assert len(backend.calls_to("DELETE", "/api/wbs/12")) == 1


class TestTaskWrites:
    def test_create_task_under_wbs(self, backend, service):
        backend.route("POST", "/api/tasks", (201, {"taskId": 8, "taskCode": "T8", "taskName": "Pour", "wbsId": 12}))
        task = service.create_task(TaskDraft(1, 12, "T8", "Pour", unit="m3"))
        assert task.task_id == 8
        assert backend.calls_to("POST", "/api/tasks")[0].json["unit"] == "m3"

    def test_update_and_delete(self, backend, service):
        backend.route("PUT", "/api/tasks/8", (200, {"taskId": 8, "taskCode": "T8", "taskName": "Pour deck"}))
        backend.route("DELETE", "/api/tasks/8", (204, None))
        assert service.update_task(8, TaskDraft(1, 12, "T8", "Pour deck")).label == "T8 Pour deck"
        service.delete_task(8)
        assert len(backend.calls_to("DELETE", "/api/tasks/8")) == 1
