"""Day-wise plan/actual reconciliation."""

from progress_modules.daywise.grid import (
    DayWiseGrid,
    GridState,
    SubmitOutcome,
    SubmitResult,
)
from progress_modules.daywise.models import DayWiseRow, DayWiseSummary, TaskUpdate, TaskUpdateDraft
from progress_modules.daywise.service import DayWiseUpdateService

__all__ = [
    "DayWiseGrid",
    "DayWiseRow",
    "DayWiseSummary",
    "DayWiseUpdateService",
    "GridState",
    "SubmitOutcome",
    "SubmitResult",
    "TaskUpdate",
    "TaskUpdateDraft",
]
