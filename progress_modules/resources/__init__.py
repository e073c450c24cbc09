"""Manpower and equipment allocation with backend cost previews."""

from progress_modules.resources.form import AllocationForm
from progress_modules.resources.models import (
    AllocationRequest,
    CostPreview,
    ResourceAllocation,
    ResourceOption,
    ResourceType,
    TimelineItem,
    WbsCostSummary,
)
from progress_modules.resources.service import ResourceAllocationService

__all__ = [
    "AllocationForm",
    "AllocationRequest",
    "CostPreview",
    "ResourceAllocation",
    "ResourceAllocationService",
    "ResourceOption",
    "ResourceType",
    "TimelineItem",
    "WbsCostSummary",
]
