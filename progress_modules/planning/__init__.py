"""Plan versions: create, activate, revert, compare."""

from progress_modules.planning.board import PlanVersionBoard
from progress_modules.planning.models import (
    ChangeStatus,
    ComparisonLine,
    ComparisonSummary,
    CreationMode,
    DailyEntry,
    DailyPlanLine,
    DateRangeSplit,
    PlanComparison,
    PlanCreation,
    PlanLine,
    PlanVersion,
    SingleLineQuick,
    SplitType,
)
from progress_modules.planning.service import PlanVersionService

__all__ = [
    "ChangeStatus",
    "ComparisonLine",
    "ComparisonSummary",
    "CreationMode",
    "DailyEntry",
    "DailyPlanLine",
    "DateRangeSplit",
    "PlanComparison",
    "PlanCreation",
    "PlanLine",
    "PlanVersion",
    "PlanVersionBoard",
    "PlanVersionService",
    "SingleLineQuick",
    "SplitType",
]
