"""Projects, WBS and tasks (navigation and maintenance)."""

from progress_modules.projects.models import (
    Project,
    ProjectDraft,
    Task,
    TaskDraft,
    Wbs,
    WbsDraft,
)
from progress_modules.projects.service import ProjectService

__all__ = ["Project", "ProjectDraft", "ProjectService", "Task", "TaskDraft", "Wbs", "WbsDraft"]
