"""REST calls for tenant business-rule administration."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from typing import Any

from progress_client.transport import ApiClient
from progress_kernel.domain.violations import BusinessRuleViolation
from progress_kernel.domain.wire import date_to_wire, drop_none
from progress_kernel.exceptions import RemoteError
from progress_kernel.logging_config import get_logger
from progress_modules.business_rules.models import BusinessRule, BusinessRuleDraft, RuleCheck

logger = get_logger("modules.business_rules.service")

_BASE = "/api/business-rules"


class BusinessRuleService:
    """
    ``/api/business-rules`` wrapper.

    Contract:
        Drafts are validated locally before create/update.
        ``validate_single`` reports a failed rule as a ``RuleCheck`` rather
        than raising, so a form can show it inline.
    """

    def __init__(self, client: ApiClient):
        self._client = client

    def list_rules(self) -> list[BusinessRule]:
        body = self._client.get(_BASE)
        rules = [BusinessRule.from_payload(r) for r in body or []]
        return sorted(rules, key=lambda r: r.rule_number)

    def get_rule(self, rule_id: int) -> BusinessRule:
        return BusinessRule.from_payload(self._client.get(f"{_BASE}/{rule_id}"))

    def get_by_number(self, rule_number: int) -> BusinessRule:
        return BusinessRule.from_payload(self._client.get(f"{_BASE}/by-number/{rule_number}"))

    def control_points(self) -> list[str]:
        return sorted(self._client.get(f"{_BASE}/control-points") or [])

    def create_rule(self, draft: BusinessRuleDraft) -> BusinessRule:
        draft.validate()
        body = self._client.post(_BASE, draft.to_payload())
        rule = BusinessRule.from_payload(body)
        logger.info("business_rule_created", extra={"rule_number": rule.rule_number})
        return rule

    def update_rule(self, rule_id: int, draft: BusinessRuleDraft) -> BusinessRule:
        draft.validate()
        body = self._client.put(f"{_BASE}/{rule_id}", draft.to_payload())
        logger.info("business_rule_updated", extra={"rule_id": rule_id})
        return BusinessRule.from_payload(body)

    def delete_rule(self, rule_id: int) -> None:
        self._client.delete(f"{_BASE}/{rule_id}")
        logger.info("business_rule_deleted", extra={"rule_id": rule_id})

    def toggle_active(self, rule_id: int) -> BusinessRule:
        body = self._client.put(f"{_BASE}/{rule_id}/activate-toggle")
        rule = BusinessRule.from_payload(body)
        logger.info(
            "business_rule_toggled",
            extra={"rule_id": rule_id, "active": rule.active},
        )
        return rule

    def validate_single(
        self,
        rule_number: int,
        *,
        entity_type: str | None = None,
        entity_id: int | None = None,
        update_date: date | None = None,
        plan_version_date: date | None = None,
        task_id: int | None = None,
        dates: Sequence[date] = (),
    ) -> RuleCheck:
        context: dict[str, Any] = drop_none(
            {
                "entityType": entity_type,
                "entityId": entity_id,
                "taskId": task_id,
                "updateDate": date_to_wire(update_date),
                "planVersionDate": date_to_wire(plan_version_date),
                "dates": [date_to_wire(d) for d in dates] or None,
            }
        )
        try:
            body = self._client.post(
                f"{_BASE}/validate-single",
                {"ruleNumber": rule_number, "context": context},
            )
        except RemoteError as exc:
            if exc.status != 400 or not isinstance(exc.body, dict) or exc.body.get("valid") is not False:
                raise
            violation = BusinessRuleViolation.from_payload({"ruleNumber": rule_number, **exc.body})
            return RuleCheck(valid=False, message=violation.message, violation=violation)

        body = body if isinstance(body, dict) else {}
        return RuleCheck(valid=True, message=body.get("message") or "Validation passed")
