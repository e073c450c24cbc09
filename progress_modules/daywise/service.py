"""REST calls for day-wise task updates."""

from __future__ import annotations

from collections.abc import Sequence

from progress_client.transport import ApiClient
from progress_kernel.exceptions import MalformedResponseError
from progress_kernel.logging_config import get_logger
from progress_modules.daywise.models import DayWiseRow, TaskUpdate, TaskUpdateDraft

logger = get_logger("modules.daywise.service")


class DayWiseUpdateService:
    """
    Thin wrapper over ``/api/task-updates``.

    Contract:
        Returns model objects; every failure is the transport's typed error.
        A row that cannot be parsed becomes ``MalformedResponseError``.
    """

    def __init__(self, client: ApiClient):
        self._client = client

    def fetch_rows(self, task_id: int) -> list[DayWiseRow]:
        path = f"/api/task-updates/task/{task_id}"
        body = self._client.get(path)
        try:
            return [DayWiseRow.from_payload(r) for r in body or []]
        except (KeyError, TypeError, ValueError) as exc:
            raise MalformedResponseError(path, str(exc)) from exc

    def submit_batch(self, task_id: int, rows: Sequence[DayWiseRow]) -> None:
        self._client.post(
            f"/api/task-updates/task/{task_id}",
            {"taskId": task_id, "updates": [r.to_update_payload() for r in rows]},
        )

    def list_updates(self, task_id: int) -> list[TaskUpdate]:
        """Stored records only, oldest first; dates without a record are absent."""
        path = f"/api/task-updates/task/{task_id}/list"
        body = self._client.get(path)
        try:
            updates = [TaskUpdate.from_payload(u) for u in body or []]
        except (KeyError, TypeError, ValueError) as exc:
            raise MalformedResponseError(path, str(exc)) from exc
        return sorted(updates, key=lambda u: u.update_date)

    def save_update(self, draft: TaskUpdateDraft) -> TaskUpdate:
        draft.validate()
        update = TaskUpdate.from_payload(self._client.post("/api/task-updates", draft.to_payload()))
        logger.info(
            "task_update_saved",
            extra={"task_id": draft.task_id, "update_id": update.update_id, "update_date": str(update.update_date)},
        )
        return update

    def delete_update(self, update_id: int) -> None:
        self._client.delete(f"/api/task-updates/{update_id}")
