"""
Day-wise reconciliation grid (``progress_modules.daywise.grid``).

Responsibility
--------------
Holds one task's day-wise rows while the user reviews and corrects actual
quantities, guards the batch locally, submits it, and reloads from the
backend afterwards.

Architecture position
---------------------
**Modules layer** -- stateful screen model.  Talks to the backend only
through ``DayWiseUpdateService``; rendering lives in
``scripts.cli.views.daywise``.

State machine
-------------
::

    LOADING --ok--> READY <--> EDITING
       |              |  \\        |
       +--fail--> ERROR   +--> BULK_SELECTING --apply/cancel--> EDITING/READY
                          |
               READY/EDITING --submit (guard passes)--> SUBMITTING
                                 SUBMITTING --ok--> LOADING (refetch) --> READY
                                 SUBMITTING --fail--> READY/EDITING (edits kept)

Invariants enforced
-------------------
* ``variance`` is derived on every row (see ``DayWiseRow``).
* A locked or non-editable row is never replaced: ``edit_cell`` returns
  False and ``bulk_apply`` skips it even when it is selected.
* ``submit`` counts editable rows with ``actual > planned`` before any
  request; one or more aborts with a client-namespace violation.
* A successful submission always refetches; rows are never patched from the
  request that was sent.
* A failed submission keeps the user's edits.
* ``submit`` is refused while SUBMITTING.

Failure modes
-------------
* Invalid quantity text -> ``InputValidationError``; no row changes.
* A rows payload that cannot be parsed -> ERROR, like any failed load.
* Operation in a disallowed state -> ``WorkflowStateError`` (submit, bulk
  selection) or a False return (cell edits).
* ``SessionError`` from the transport propagates so the console can return
  to login.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from progress_kernel.domain.violations import (
    CLIENT_RULE_ACTUAL_EXCEEDS_PLAN,
    BusinessRuleViolation,
)
from progress_kernel.exceptions import (
    InputValidationError,
    ProgressConsoleError,
    RuleViolationError,
    SessionError,
    WorkflowStateError,
)
from progress_kernel.logging_config import LogContext, get_logger
from progress_modules.daywise.models import DayWiseRow, DayWiseSummary
from progress_modules.daywise.service import DayWiseUpdateService

logger = get_logger("modules.daywise.grid")

OVER_PLAN_HINT = "Please adjust actual quantities to be less than or equal to planned quantities."
NOTHING_TO_SUBMIT_MESSAGE = "No updates to save"

EDITABLE_FIELDS = ("actual_qty", "remarks")


class GridState(str, Enum):
    LOADING = "loading"
    READY = "ready"
    EDITING = "editing"
    BULK_SELECTING = "bulk_selecting"
    SUBMITTING = "submitting"
    ERROR = "error"


class SubmitOutcome(str, Enum):
    SUBMITTED = "submitted"
    BLOCKED_LOCALLY = "blocked_locally"
    NOTHING_TO_SUBMIT = "nothing_to_submit"
    REJECTED_BY_RULE = "rejected_by_rule"
    FAILED = "failed"


@dataclass(frozen=True)
class SubmitResult:
    outcome: SubmitOutcome
    submitted_count: int = 0
    offending_count: int = 0
    violation: BusinessRuleViolation | None = None
    message: str | None = None
    refreshed: bool = False

    @property
    def ok(self) -> bool:
        return self.outcome is SubmitOutcome.SUBMITTED


def over_plan_violation(offending_count: int) -> BusinessRuleViolation:
    return BusinessRuleViolation.client(
        CLIENT_RULE_ACTUAL_EXCEEDS_PLAN,
        f"Actual quantity cannot exceed planned quantity. Found {offending_count} violation(s).",
        OVER_PLAN_HINT,
    )


def parse_quantity(value: Any, field: str = "actual_qty") -> Decimal:
    """User input -> non-negative Decimal.  Blank means zero."""
    if isinstance(value, bool):
        raise InputValidationError({field: "Enter a number"})
    if value is None or (isinstance(value, str) and not value.strip()):
        return Decimal("0")
    try:
        qty = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except InvalidOperation:
        raise InputValidationError({field: "Enter a number"}) from None
    if not qty.is_finite():
        raise InputValidationError({field: "Enter a number"})
    if qty < 0:
        raise InputValidationError({field: "Quantity cannot be negative"})
    return qty


class DayWiseGrid:
    """
    Editable plan/actual grid for one task.

    Contract:
        ``rows`` always reflects the last successful load plus local edits.
    Guarantees:
        No request is sent by ``edit_cell``, ``bulk_apply`` or a blocked
        ``submit``.
    Non-goals:
        Does not cancel in-flight requests.
    """

    def __init__(self, service: DayWiseUpdateService, task_id: int):
        self._service = service
        self.task_id = task_id
        self._rows: list[DayWiseRow] = []
        self._state = GridState.LOADING
        self._selection: set[int] = set()
        self._dirty = False
        self.violation: BusinessRuleViolation | None = None
        self.error_message: str | None = None

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def state(self) -> GridState:
        return self._state

    @property
    def rows(self) -> tuple[DayWiseRow, ...]:
        return tuple(self._rows)

    @property
    def selection(self) -> frozenset[int]:
        return frozenset(self._selection)

    @property
    def dirty(self) -> bool:
        return self._dirty

    @property
    def can_submit(self) -> bool:
        return self._state in (GridState.READY, GridState.EDITING)

    def summary(self) -> DayWiseSummary:
        return DayWiseSummary.of(self._rows)

    def offending_rows(self) -> list[int]:
        """Indices of editable rows whose actual exceeds plan."""
        return [i for i, r in enumerate(self._rows) if r.is_editable and r.is_over_plan]

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load_rows(self, task_id: int | None = None) -> bool:
        """Fetch all rows; on failure show nothing and enter ERROR."""
        if task_id is not None:
            self.task_id = task_id
        self._state = GridState.LOADING
        self._selection.clear()
        self.error_message = None

        with LogContext.bind(task_id=self.task_id):
            try:
                rows = self._service.fetch_rows(self.task_id)
            except SessionError:
                self._rows = []
                self._state = GridState.ERROR
                raise
            except ProgressConsoleError as exc:
                self._rows = []
                self._state = GridState.ERROR
                self.error_message = str(exc) or "Failed to fetch day-wise updates"
                logger.warning("daywise_load_failed", extra={"error_code": exc.code})
                return False

            self._rows = rows
            self._dirty = False
            self._state = GridState.READY
            logger.debug("daywise_loaded", extra={"row_count": len(rows)})
            return True

    def retry(self) -> bool:
        return self.load_rows()

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def edit_cell(self, row_index: int, field: str, value: Any) -> bool:
        """Edit ``actual_qty`` or ``remarks``; False when the edit is not allowed."""
        if field not in EDITABLE_FIELDS:
            raise InputValidationError({field: "Field is not editable"})
        if self._state not in (GridState.READY, GridState.EDITING):
            return False
        if not 0 <= row_index < len(self._rows):
            raise IndexError(row_index)
        row = self._rows[row_index]
        if not row.is_editable:
            return False

        if field == "actual_qty":
            new_row = row.with_actual(parse_quantity(value))
        else:
            new_row = row.with_remarks(None if value is None else str(value))

        self._rows[row_index] = new_row
        self._dirty = True
        self._state = GridState.EDITING
        return True

    def begin_bulk_selection(self) -> None:
        if self._state not in (GridState.READY, GridState.EDITING):
            raise WorkflowStateError("daywise_grid", self._state.value, "start bulk selection")
        self._selection.clear()
        self._state = GridState.BULK_SELECTING

    def toggle_selection(self, row_index: int) -> bool:
        """Select or deselect a row; returns whether it is now selected."""
        if self._state is not GridState.BULK_SELECTING:
            raise WorkflowStateError("daywise_grid", self._state.value, "select rows")
        if not 0 <= row_index < len(self._rows):
            raise IndexError(row_index)
        if row_index in self._selection:
            self._selection.discard(row_index)
            return False
        self._selection.add(row_index)
        return True

    def cancel_bulk_selection(self) -> None:
        self._selection.clear()
        if self._state is GridState.BULK_SELECTING:
            self._state = GridState.EDITING if self._dirty else GridState.READY

    def bulk_apply(self, selected: Iterable[int] | None, value: Any) -> int:
        """Set ``actual_qty`` on every selected editable row; return how many changed."""
        if self._state not in (GridState.READY, GridState.EDITING, GridState.BULK_SELECTING):
            raise WorkflowStateError("daywise_grid", self._state.value, "bulk apply")
        if value is None or (isinstance(value, str) and not value.strip()):
            raise InputValidationError({"bulk_value": "Enter a valid number"})
        qty = parse_quantity(value, "bulk_value")
        indices = set(self._selection if selected is None else selected)

        applied = 0
        for index in sorted(indices):
            if not 0 <= index < len(self._rows):
                continue
            row = self._rows[index]
            if not row.is_editable:
                continue
            self._rows[index] = row.with_actual(qty)
            applied += 1

        self._selection.clear()
        if applied:
            self._dirty = True
        self._state = GridState.EDITING if self._dirty else GridState.READY
        logger.debug(
            "daywise_bulk_applied",
            extra={"selected": len(indices), "applied": applied},
        )
        return applied

    def dismiss_violation(self) -> None:
        self.violation = None

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def submit(self) -> SubmitResult:
        if not self.can_submit:
            raise WorkflowStateError("daywise_grid", self._state.value, "submit")

        self.error_message = None
        offending = self.offending_rows()
        if offending:
            self.violation = over_plan_violation(len(offending))
            logger.info(
                "daywise_submit_blocked",
                extra={"task_id": self.task_id, "offending_count": len(offending)},
            )
            return SubmitResult(
                SubmitOutcome.BLOCKED_LOCALLY,
                offending_count=len(offending),
                violation=self.violation,
            )

        batch = [r for r in self._rows if r.belongs_in_batch]
        if not batch:
            return SubmitResult(SubmitOutcome.NOTHING_TO_SUBMIT, message=NOTHING_TO_SUBMIT_MESSAGE)

        settled_state = self._state
        self._state = GridState.SUBMITTING
        with LogContext.bind(task_id=self.task_id):
            try:
                self._service.submit_batch(self.task_id, batch)
            except RuleViolationError as exc:
                # Already shown by the global display; edits stay for correction.
                self._state = settled_state
                return SubmitResult(
                    SubmitOutcome.REJECTED_BY_RULE,
                    violation=exc.violation,
                    message=str(exc),
                )
            except SessionError:
                self._state = settled_state
                raise
            except ProgressConsoleError as exc:
                self._state = settled_state
                self.error_message = str(exc) or "Failed to save updates"
                logger.warning("daywise_submit_failed", extra={"error_code": exc.code})
                return SubmitResult(SubmitOutcome.FAILED, message=self.error_message)

            logger.info(
                "daywise_submitted",
                extra={"task_id": self.task_id, "row_count": len(batch)},
            )
            self._dirty = False
            refreshed = self.load_rows()
            return SubmitResult(
                SubmitOutcome.SUBMITTED,
                submitted_count=len(batch),
                refreshed=refreshed,
            )

    def delete_row(self, update_id: int, confirm: Callable[[DayWiseRow], bool]) -> bool:
        """Delete a saved update after ``confirm(row)`` agrees; True when removed."""
        if self._state not in (GridState.READY, GridState.EDITING):
            raise WorkflowStateError("daywise_grid", self._state.value, "delete a row")
        row = next((r for r in self._rows if r.update_id == update_id), None)
        if row is None:
            raise KeyError(f"No row with update id {update_id}")
        if not confirm(row):
            return False

        self.error_message = None
        try:
            self._service.delete_update(update_id)
        except RuleViolationError:
            return False
        except SessionError:
            raise
        except ProgressConsoleError as exc:
            self.error_message = str(exc) or "Failed to delete update"
            return False

        self._rows = [r for r in self._rows if r.update_id != update_id]
        self._selection.clear()
        logger.info("daywise_row_deleted", extra={"task_id": self.task_id, "update_id": update_id})
        return True
