"""Lookups and maintenance for projects, WBS nodes and tasks."""

from __future__ import annotations

from typing import Any

from progress_client.transport import ApiClient
from progress_kernel.logging_config import get_logger
from progress_modules.projects.models import (
    Project,
    ProjectDraft,
    Task,
    TaskDraft,
    Wbs,
    WbsDraft,
)

logger = get_logger("modules.projects.service")


def _page_content(body: Any) -> list[dict[str, Any]]:
    """Spring ``Page`` bodies wrap rows in ``content``; plain lists pass through."""
    if isinstance(body, dict):
        return list(body.get("content") or [])
    return list(body or [])


class ProjectService:
    """
    ``/api/projects``, ``/api/wbs`` and ``/api/tasks`` wrapper.

    Contract:
        Writes validate the draft first; an invalid draft never reaches the
        backend.  Deleting a project or WBS node also removes what sits under
        it; the backend refuses when a rule forbids that.
    """

    def __init__(self, client: ApiClient):
        self._client = client

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    def list_projects(
        self,
        search: str | None = None,
        active_only: bool = False,
        page: int = 0,
        size: int = 20,
    ) -> list[Project]:
        body = self._client.get(
            "/api/projects",
            {"search": search or None, "activeOnly": str(active_only).lower(), "page": page, "size": size},
        )
        return [Project.from_payload(p) for p in _page_content(body)]

    def get_project(self, project_id: int) -> Project:
        return Project.from_payload(self._client.get(f"/api/projects/{project_id}"))

    def create_project(self, draft: ProjectDraft) -> Project:
        draft.validate()
        project = Project.from_payload(self._client.post("/api/projects", draft.to_payload()))
        logger.info("project_created", extra={"project_id": project.project_id})
        return project

    def update_project(self, project_id: int, draft: ProjectDraft) -> Project:
        draft.validate()
        project = Project.from_payload(self._client.put(f"/api/projects/{project_id}", draft.to_payload()))
        logger.info("project_updated", extra={"project_id": project_id})
        return project

    def delete_project(self, project_id: int) -> None:
        self._client.delete(f"/api/projects/{project_id}")
        logger.info("project_deleted", extra={"project_id": project_id})

    # ------------------------------------------------------------------
    # WBS
    # ------------------------------------------------------------------

    def wbs_hierarchy(self, project_id: int) -> list[Wbs]:
        body = self._client.get(f"/api/wbs/project/{project_id}/hierarchy")
        return [Wbs.from_payload(w) for w in body or []]

    def get_wbs(self, wbs_id: int) -> Wbs:
        return Wbs.from_payload(self._client.get(f"/api/wbs/{wbs_id}"))

    def create_wbs(self, draft: WbsDraft) -> Wbs:
        draft.validate()
        wbs = Wbs.from_payload(self._client.post("/api/wbs", draft.to_payload()))
        logger.info("wbs_created", extra={"wbs_id": wbs.wbs_id, "project_id": draft.project_id})
        return wbs

    def update_wbs(self, wbs_id: int, draft: WbsDraft) -> Wbs:
        draft.validate()
        wbs = Wbs.from_payload(self._client.put(f"/api/wbs/{wbs_id}", draft.to_payload()))
        logger.info("wbs_updated", extra={"wbs_id": wbs_id})
        return wbs

    def delete_wbs(self, wbs_id: int) -> None:
        self._client.delete(f"/api/wbs/{wbs_id}")
        logger.info("wbs_deleted", extra={"wbs_id": wbs_id})

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    def list_tasks(self, wbs_id: int) -> list[Task]:
        body = self._client.get(f"/api/tasks/wbs/{wbs_id}")
        return [Task.from_payload(t) for t in body or []]

    def get_task(self, task_id: int) -> Task:
        return Task.from_payload(self._client.get(f"/api/tasks/{task_id}"))

    def create_task(self, draft: TaskDraft) -> Task:
        draft.validate()
        task = Task.from_payload(self._client.post("/api/tasks", draft.to_payload()))
        logger.info("task_created", extra={"task_id": task.task_id, "wbs_id": draft.wbs_id})
        return task

    def update_task(self, task_id: int, draft: TaskDraft) -> Task:
        draft.validate()
        task = Task.from_payload(self._client.put(f"/api/tasks/{task_id}", draft.to_payload()))
        logger.info("task_updated", extra={"task_id": task_id})
        return task

    def delete_task(self, task_id: int) -> None:
        self._client.delete(f"/api/tasks/{task_id}")
        logger.info("task_deleted", extra={"task_id": task_id})
