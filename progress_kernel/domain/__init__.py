"""Pure domain values shared by every feature module."""

from progress_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from progress_kernel.domain.staged import StagedAction, StageState
from progress_kernel.domain.violations import (
    CLIENT_RULE_ACTUAL_EXCEEDS_PLAN,
    BusinessRuleViolation,
    Subscription,
    ViolationChannel,
    ViolationOrigin,
)

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "StagedAction",
    "StageState",
    "CLIENT_RULE_ACTUAL_EXCEEDS_PLAN",
    "BusinessRuleViolation",
    "Subscription",
    "ViolationChannel",
    "ViolationOrigin",
]
