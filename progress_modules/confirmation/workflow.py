"""
Confirmation workflow (``progress_modules.confirmation.workflow``).

Responsibility
--------------
Drives the freeze screen for one WBS: picking a date previews the quantity
that would be confirmed; confirming needs a second, explicit step that
restates date and quantity; undo is limited to administrators and to the
most recent confirmation.

Architecture position
---------------------
**Modules layer** -- screen model over ``ConfirmationService`` and the
kernel ``StagedAction`` gate.

Invariants enforced
-------------------
* A preview is a GET; no record exists until ``confirm()`` runs after
  ``begin_confirm()``.
* ``begin_confirm`` requires ``PAGE_CONFIRMATION_EDIT``; ``undo`` requires
  ``PAGE_CONFIRMATION_ADMIN``.  Both are checked before any request.
* A rule violation on confirm leaves the form usable with the staged date
  intact; the violation itself is shown by the global display.

Failure modes
-------------
* Missing permission -> ``AuthorizationDeniedError``.
* ``confirm`` / ``undo`` out of order -> ``WorkflowStateError``.
* Other backend failures set ``error_message`` and return ``None``/False.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import date
from decimal import Decimal

from progress_client.auth import AuthService
from progress_kernel.domain.clock import Clock, SystemClock
from progress_kernel.domain.permissions import PAGE_CONFIRMATION_ADMIN, PAGE_CONFIRMATION_EDIT
from progress_kernel.domain.staged import StagedAction, StageState
from progress_kernel.domain.violations import BusinessRuleViolation
from progress_kernel.exceptions import (
    InputValidationError,
    ProgressConsoleError,
    RuleViolationError,
    SessionError,
    WorkflowStateError,
)
from progress_kernel.logging_config import LogContext, get_logger
from progress_modules.confirmation.models import (
    Confirmation,
    ConfirmationPrompt,
    ConfirmationSummary,
    LockBanner,
    lock_banner,
)
from progress_modules.confirmation.service import ConfirmationService

logger = get_logger("modules.confirmation.workflow")


class ConfirmationWorkflow:
    """
    Preview-then-freeze flow for one WBS node.

    Contract:
        ``select_date`` -> ``begin_confirm`` -> ``confirm``.
    Guarantees:
        The freeze request carries the date whose preview was acknowledged.
    Non-goals:
        Does not compute quantities; the backend previews them.
    """

    def __init__(
        self,
        service: ConfirmationService,
        auth: AuthService,
        wbs_id: int,
        clock: Clock | None = None,
    ):
        self._service = service
        self._auth = auth
        self._clock = clock or SystemClock()
        self.wbs_id = wbs_id
        self.summary: ConfirmationSummary | None = None
        self.history: list[Confirmation] = []
        self.remarks: str | None = None
        self.error_message: str | None = None
        self.last_violation: BusinessRuleViolation | None = None
        self._staged: StagedAction[date, ConfirmationSummary, ConfirmationSummary | None] = StagedAction(
            "confirmation",
            preview=lambda day: self._service.summary(self.wbs_id, day),
            commit=lambda day: self._service.confirm(self.wbs_id, day, self.remarks),
        )

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self) -> bool:
        self.error_message = None
        with LogContext.bind(wbs_id=self.wbs_id):
            try:
                self.summary = self._service.summary(self.wbs_id)
                self.history = self._service.history(self.wbs_id)
            except SessionError:
                raise
            except ProgressConsoleError as exc:
                self.error_message = str(exc) or "Failed to load confirmation summary"
                return False
        return True

    @property
    def can_confirm(self) -> bool:
        return self._auth.has_permission(PAGE_CONFIRMATION_EDIT)

    @property
    def can_undo(self) -> bool:
        return self._auth.has_permission(PAGE_CONFIRMATION_ADMIN)

    @property
    def stage_state(self) -> StageState:
        return self._staged.state

    @property
    def selected_date(self) -> date | None:
        return self._staged.key

    @property
    def preview_qty(self) -> Decimal | None:
        preview = self._staged.preview
        return preview.preview_actual_qty if preview is not None else None

    def banner(self) -> LockBanner:
        lock = self.summary.lock_date if self.summary is not None else None
        return lock_banner(lock, self._clock.today())

    def latest_confirmation(self) -> Confirmation | None:
        if not self.history:
            return None
        return max(self.history, key=lambda c: (c.confirmation_date, c.confirmation_id))

    # ------------------------------------------------------------------
    # Preview and freeze
    # ------------------------------------------------------------------

    def select_date(self, confirmation_date: date | None = None) -> Decimal | None:
        """Preview the quantity for a date (today by default); creates nothing."""
        day = confirmation_date or self._clock.today()
        self.error_message = None
        try:
            preview = self._staged.stage(day)
        except RuleViolationError as exc:
            self.last_violation = exc.violation
            return None
        except SessionError:
            raise
        except ProgressConsoleError as exc:
            self.error_message = str(exc) or "Failed to load confirmation summary"
            return None
        self.summary = preview
        return preview.preview_actual_qty

    def begin_confirm(self) -> ConfirmationPrompt:
        """First step: check permission, return the dialog contents."""
        self._auth.require_permission(PAGE_CONFIRMATION_EDIT)
        if self._staged.state is not StageState.STAGED:
            raise InputValidationError({"confirmationDate": "Select a confirmation date first"})
        preview = self._staged.request_commit()
        return ConfirmationPrompt(
            wbs_id=self.wbs_id,
            wbs_name=preview.wbs_name,
            confirmation_date=self._staged.key,
            preview_qty=preview.preview_actual_qty,
            remarks=self.remarks,
        )

    def cancel_confirm(self) -> None:
        self._staged.cancel()

    def confirm(self) -> ConfirmationSummary | None:
        """Second step: send the freeze.  None when the backend refused it."""
        if self._staged.state is not StageState.AWAITING_CONFIRMATION:
            raise WorkflowStateError("confirmation", self._staged.state.value, "confirm")
        day = self._staged.key
        self.error_message = None
        with LogContext.bind(wbs_id=self.wbs_id):
            try:
                self._staged.commit()
            except RuleViolationError as exc:
                self.last_violation = exc.violation
                return None
            except SessionError:
                raise
            except ProgressConsoleError as exc:
                self.error_message = str(exc) or "Failed to confirm WBS"
                return None

            logger.info(
                "wbs_confirmed",
                extra={"wbs_id": self.wbs_id, "confirmation_date": day},
            )
            self.remarks = None
            self.last_violation = None
            self.load()
            return self.summary

    # ------------------------------------------------------------------
    # Undo
    # ------------------------------------------------------------------

    def undo(self, confirmation_id: int, confirm: Callable[[Confirmation], bool]) -> bool:
        self._auth.require_permission(PAGE_CONFIRMATION_ADMIN)
        latest = self.latest_confirmation()
        if latest is None or latest.confirmation_id != confirmation_id:
            raise InputValidationError(
                {"confirmationId": "Only the most recent confirmation can be undone"}
            )
        if not confirm(latest):
            return False

        self.error_message = None
        try:
            self._service.undo(confirmation_id)
        except RuleViolationError as exc:
            self.last_violation = exc.violation
            return False
        except SessionError:
            raise
        except ProgressConsoleError as exc:
            self.error_message = str(exc) or "Failed to undo confirmation"
            return False

        logger.info(
            "wbs_confirmation_undone",
            extra={"wbs_id": self.wbs_id, "confirmation_id": confirmation_id},
        )
        self.load()
        return True
