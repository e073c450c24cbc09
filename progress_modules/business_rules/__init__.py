"""Tenant business-rule administration."""

from progress_modules.business_rules.models import (
    BusinessRule,
    BusinessRuleDraft,
    RuleCheck,
    filter_rules,
)
from progress_modules.business_rules.service import BusinessRuleService

__all__ = [
    "BusinessRule",
    "BusinessRuleDraft",
    "BusinessRuleService",
    "RuleCheck",
    "filter_rules",
]
