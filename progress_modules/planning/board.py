"""
Plan version screen model (``progress_modules.planning.board``).

Holds a task, its versions and the selected version's lines.  Every
mutation is followed by a refetch of whatever it may have changed: the
version list after activate/create, the task and version list after a
revert.  Which version is active is therefore always what the backend
last reported.

Before a version is created its planned dates are checked against the
planned-date business rule; a failed check aborts the create with the
rule message.
"""

from __future__ import annotations

from collections.abc import Callable

from progress_kernel.exceptions import (
    PlanVersionIntegrityError,
    RuleViolationError,
    TransportError,
)
from progress_kernel.logging_config import LogContext, get_logger
from progress_modules.business_rules import BusinessRuleService, RuleCheck
from progress_modules.planning.models import (
    CreationMode,
    CreationPayload,
    PlanComparison,
    PlanCreation,
    PlanLine,
    PlanVersion,
)
from progress_modules.planning.service import PlanVersionService
from progress_modules.projects.models import Task
from progress_modules.projects.service import ProjectService

logger = get_logger("modules.planning.board")

# START_DATE_CANNOT_BE_IN_FUTURE
PLANNED_DATE_RULE = 201


class PlanVersionBoard:
    """
    Versions of one task.

    Contract:
        ``refresh()`` must succeed before the other operations are useful.
    Guarantees:
        ``active_version`` reflects the latest fetched list and raises
        ``PlanVersionIntegrityError`` if that list has several active rows.
    """

    def __init__(
        self,
        plans: PlanVersionService,
        projects: ProjectService,
        task_id: int,
        rules: BusinessRuleService | None = None,
    ):
        self._plans = plans
        self._projects = projects
        self._rules = rules
        self.date_check: RuleCheck | None = None
        self.task_id = task_id
        self.task: Task | None = None
        self.versions: list[PlanVersion] = []
        self.selected_version_id: int | None = None
        self.lines: list[PlanLine] = []

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    def refresh(self) -> None:
        with LogContext.bind(task_id=self.task_id):
            self.task = self._projects.get_task(self.task_id)
            self.refresh_versions()

    def refresh_versions(self) -> None:
        self.versions = self._plans.list_versions(self.task_id)
        known = {v.version_id for v in self.versions}
        if self.selected_version_id not in known:
            self.selected_version_id = None
            self.lines = []

    @property
    def active_version(self) -> PlanVersion | None:
        active = [v for v in self.versions if v.is_active]
        if len(active) > 1:
            logger.error(
                "plan_versions_multiple_active",
                extra={"task_id": self.task_id, "version_ids": [v.version_id for v in active]},
            )
            raise PlanVersionIntegrityError(self.task_id, [v.version_id for v in active])
        return active[0] if active else None

    def select(self, version_id: int) -> list[PlanLine]:
        if version_id not in {v.version_id for v in self.versions}:
            raise KeyError(f"Version {version_id} does not belong to task {self.task_id}")
        self.selected_version_id = version_id
        self.lines = self._plans.get_lines(version_id)
        return self.lines

    # ------------------------------------------------------------------
    # Mutations (always followed by a refetch)
    # ------------------------------------------------------------------

    def create(
        self,
        mode: CreationMode,
        payload: CreationPayload,
        *,
        description: str | None = None,
    ) -> bool:
        """Create a version; False when the planned-date rule rejects its dates."""
        request = self._plans.build_request(self.task_id, mode, payload, description=description)
        self.date_check = self._check_dates(request)
        if self.date_check is not None and not self.date_check.valid:
            logger.info(
                "plan_version_create_blocked",
                extra={"task_id": self.task_id, "rule_number": PLANNED_DATE_RULE},
            )
            return False
        self._plans.submit(request)
        self.refresh_versions()
        return True

    def _check_dates(self, request: PlanCreation) -> RuleCheck | None:
        if self._rules is None:
            return None
        try:
            return self._rules.validate_single(
                PLANNED_DATE_RULE, task_id=self.task_id, dates=request.planned_dates()
            )
        except RuleViolationError as exc:
            return RuleCheck(valid=False, message=str(exc), violation=exc.violation)
        except TransportError as exc:
            # Only a rule verdict blocks the create.
            logger.warning(
                "plan_date_check_skipped",
                extra={"task_id": self.task_id, "error_code": exc.code},
            )
            return None

    def activate(self, version_id: int) -> PlanVersion | None:
        self._plans.activate_version(version_id)
        self.refresh_versions()
        return self.active_version

    def revert(self, version_id: int, confirm: Callable[[PlanVersion], bool]) -> bool:
        version = next((v for v in self.versions if v.version_id == version_id), None)
        if version is None:
            raise KeyError(f"Version {version_id} does not belong to task {self.task_id}")
        if not confirm(version):
            return False
        self._plans.revert_to_version(version_id)
        self.refresh()
        if self.selected_version_id is not None:
            self.lines = self._plans.get_lines(self.selected_version_id)
        return True

    def compare(self, version_id1: int, version_id2: int) -> PlanComparison:
        return self._plans.compare_versions(version_id1, version_id2)
