"""
Business rule models (``progress_modules.business_rules.models``).

Responsibility
--------------
Tenant rule configuration as the admin screen edits it, the draft a create
or update sends, the outcome of a single-rule check, and the client-side
filter the rule list applies.

Invariants enforced
-------------------
* ``BusinessRuleDraft.validate`` rejects a draft without rule number,
  control point or applicability before any request is made.
* ``filter_rules`` never reorders; it keeps rules in the order given.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from progress_kernel.domain.violations import BusinessRuleViolation
from progress_kernel.domain.wire import parse_bool, parse_datetime
from progress_kernel.exceptions import InputValidationError


@dataclass(frozen=True)
class BusinessRule:
    rule_id: int
    rule_number: int
    control_point: str
    applicability: str
    rule_value: str | None = None
    description: str | None = None
    active: bool = True
    updated_on: datetime | None = None

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> BusinessRule:
        return cls(
            rule_id=data["ruleId"],
            rule_number=int(data["ruleNumber"]),
            control_point=data.get("controlPoint") or "",
            applicability=data.get("applicability") or "",
            rule_value=data.get("ruleValue"),
            description=data.get("description"),
            active=parse_bool(data.get("activateFlag"), True),
            updated_on=parse_datetime(data.get("updatedOn")),
        )

    def matches(self, query: str) -> bool:
        needle = query.strip().lower()
        if not needle:
            return True
        return (
            needle in str(self.rule_number)
            or needle in (self.description or "").lower()
            or needle in self.control_point.lower()
        )


@dataclass(frozen=True)
class BusinessRuleDraft:
    """Body for create and update."""

    rule_number: int | None
    control_point: str
    applicability: str
    rule_value: str | None = None
    description: str | None = None
    active: bool = True

    @classmethod
    def from_rule(cls, rule: BusinessRule) -> BusinessRuleDraft:
        return cls(
            rule_number=rule.rule_number,
            control_point=rule.control_point,
            applicability=rule.applicability,
            rule_value=rule.rule_value,
            description=rule.description,
            active=rule.active,
        )

    def validate(self) -> None:
        errors: dict[str, str] = {}
        if self.rule_number is None or self.rule_number <= 0:
            errors["ruleNumber"] = "Rule number must be a positive integer"
        if not self.control_point.strip():
            errors["controlPoint"] = "Control point is required"
        if self.applicability not in ("Y", "N"):
            errors["applicability"] = "Applicability must be Y or N"
        if errors:
            raise InputValidationError(errors)

    def to_payload(self) -> dict[str, Any]:
        return {
            "ruleNumber": self.rule_number,
            "controlPoint": self.control_point.strip(),
            "applicability": self.applicability,
            "ruleValue": self.rule_value or None,
            "description": self.description or None,
            "activateFlag": self.active,
        }


@dataclass(frozen=True)
class RuleCheck:
    """Outcome of ``validate-single``; ``violation`` is set when it failed."""

    valid: bool
    message: str
    violation: BusinessRuleViolation | None = None


def filter_rules(
    rules: Iterable[BusinessRule],
    control_point: str | None = None,
    active_only: bool = False,
    query: str | None = None,
) -> list[BusinessRule]:
    result = []
    for rule in rules:
        if control_point and rule.control_point != control_point:
            continue
        if active_only and not rule.active:
            continue
        if query and not rule.matches(query):
            continue
        result.append(rule)
    return result
