"""
Plan version service (``progress_modules.planning.service``).

Responsibility
--------------
REST calls for plan versions: list, lines, create (three modes), activate,
revert and compare.

Invariants enforced
-------------------
* ``create_version`` validates the request locally (mode/payload match,
  custom split count) and raises before any request when it fails.
* Activation and revert return nothing: their effect on sibling versions is
  decided by the backend and must be read back, never inferred.
"""

from __future__ import annotations

from datetime import date

from progress_client.transport import ApiClient
from progress_kernel.domain.clock import Clock, SystemClock
from progress_kernel.logging_config import get_logger
from progress_modules.planning.models import (
    CreationMode,
    CreationPayload,
    PlanComparison,
    PlanCreation,
    PlanLine,
    PlanVersion,
)

logger = get_logger("modules.planning.service")


class PlanVersionService:
    def __init__(self, client: ApiClient, clock: Clock | None = None):
        self._client = client
        self._clock = clock or SystemClock()

    def list_versions(self, task_id: int) -> list[PlanVersion]:
        body = self._client.get(f"/api/plans/task/{task_id}")
        versions = [PlanVersion.from_payload(v) for v in body or []]
        return sorted(versions, key=lambda v: v.version_no, reverse=True)

    def get_version(self, version_id: int) -> PlanVersion:
        return PlanVersion.from_payload(self._client.get(f"/api/plans/{version_id}"))

    def get_lines(self, version_id: int) -> list[PlanLine]:
        body = self._client.get(f"/api/plans/{version_id}/lines")
        lines = [PlanLine.from_payload(l) for l in body or []]
        return sorted(lines, key=lambda l: (l.planned_date, l.line_number))

    def build_request(
        self,
        task_id: int,
        mode: CreationMode,
        payload: CreationPayload,
        *,
        version_date: date | None = None,
        description: str | None = None,
    ) -> PlanCreation:
        """Assemble and locally validate a create request; nothing is sent."""
        request = PlanCreation(
            task_id=task_id,
            mode=mode,
            payload=payload,
            version_date=version_date or self._clock.today(),
            description=description,
        )
        request.validate()
        return request

    def submit(self, request: PlanCreation) -> None:
        request.validate()
        self._client.post("/api/plans/create-with-mode", request.to_payload())
        logger.info(
            "plan_version_created",
            extra={"task_id": request.task_id, "mode": request.mode.value},
        )

    def create_version(
        self,
        task_id: int,
        mode: CreationMode,
        payload: CreationPayload,
        *,
        version_date: date | None = None,
        description: str | None = None,
    ) -> None:
        self.submit(
            self.build_request(
                task_id, mode, payload, version_date=version_date, description=description
            )
        )

    def activate_version(self, version_id: int) -> None:
        self._client.put(f"/api/plans/{version_id}/activate")
        logger.info("plan_version_activated", extra={"version_id": version_id})

    def revert_to_version(self, version_id: int) -> None:
        self._client.put(f"/api/plans/{version_id}/revert")
        logger.info("plan_version_reverted", extra={"version_id": version_id})

    def compare_versions(self, version_id1: int, version_id2: int) -> PlanComparison:
        body = self._client.get(f"/api/plans/compare/{version_id1}/{version_id2}")
        return PlanComparison.from_payload(body)
