"""WBS confirmation (freeze) workflow."""

from progress_modules.confirmation.models import (
    Confirmation,
    ConfirmationPrompt,
    ConfirmationSummary,
    LockBanner,
    LockLevel,
    lock_banner,
)
from progress_modules.confirmation.service import ConfirmationService
from progress_modules.confirmation.workflow import ConfirmationWorkflow

__all__ = [
    "Confirmation",
    "ConfirmationPrompt",
    "ConfirmationService",
    "ConfirmationSummary",
    "ConfirmationWorkflow",
    "LockBanner",
    "LockLevel",
    "lock_banner",
]
