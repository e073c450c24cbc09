"""
Business-rule violations and the violation channel.

Responsibility
--------------
``BusinessRuleViolation`` is the transient value describing one rule
breach (rule number, message, optional hint).  ``ViolationChannel`` is the
in-process publish/subscribe object the transport publishes to and the one
top-level violation display subscribes to.

Architecture position
---------------------
**Kernel domain layer**.  The channel is created once per console session
and injected into ``progress_client.transport.ApiClient`` and into
``scripts.cli.views.violation.GlobalViolationModal``; there is no module
level instance.

Invariants enforced
-------------------
* Rule numbers raised by the console itself live in a separate namespace:
  ``origin == ViolationOrigin.CLIENT`` and a negative ``rule_number``.
  Administrators configure positive rule numbers on the backend, so the two
  can never be confused.
* Publishing is fire-and-forget.  With no subscriber the event is dropped;
  nothing is queued or replayed to later subscribers.
* A subscriber that raises does not stop delivery to the others, and the
  exception never reaches the publisher.

Failure modes
-------------
* Subscriber exceptions are logged as ``violation_subscriber_failed``.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from progress_kernel.logging_config import get_logger

logger = get_logger("domain.violations")

ViolationHandler = Callable[["BusinessRuleViolation"], None]


class ViolationOrigin(str, Enum):
    SERVER = "SERVER"
    CLIENT = "CLIENT"


# Client-side guard rules. Negative so they never collide with backend rules.
CLIENT_RULE_ACTUAL_EXCEEDS_PLAN = -401


@dataclass(frozen=True)
class BusinessRuleViolation:
    """One rule breach, shown verbatim and then discarded."""

    rule_number: int | None
    message: str
    hint: str | None = None
    origin: ViolationOrigin = ViolationOrigin.SERVER

    @classmethod
    def from_payload(cls, body: dict[str, Any]) -> BusinessRuleViolation:
        """Build from the backend's ``BUSINESS_RULE_VIOLATION`` error body."""
        raw_number = body.get("ruleNumber")
        return cls(
            rule_number=int(raw_number) if raw_number is not None else None,
            message=body.get("message") or "Business rule violation",
            hint=body.get("hint") or None,
        )

    @classmethod
    def client(cls, rule_number: int, message: str, hint: str | None = None) -> BusinessRuleViolation:
        if rule_number >= 0:
            raise ValueError(f"Client rule numbers must be negative, got {rule_number}")
        return cls(rule_number=rule_number, message=message, hint=hint, origin=ViolationOrigin.CLIENT)

    @property
    def rule_label(self) -> str:
        """Display label: ``Rule 101`` for backend rules, ``Client rule C401`` otherwise."""
        if self.rule_number is None:
            return "Rule"
        if self.origin is ViolationOrigin.CLIENT:
            return f"Client rule C{abs(self.rule_number)}"
        return f"Rule {self.rule_number}"


class Subscription:
    """Handle returned by ``ViolationChannel.subscribe``.

    Unsubscribing twice is harmless.  Usable as a context manager.
    """

    def __init__(self, channel: ViolationChannel, handler: ViolationHandler):
        self._channel = channel
        self._handler = handler
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        if self._active:
            self._active = False
            self._channel._remove(self._handler)

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.unsubscribe()


class ViolationChannel:
    """
    Fan-out of violation events to the currently subscribed displays.

    Contract:
        ``publish`` delivers synchronously, in subscription order, to the
        handlers subscribed at the moment of the call.
    Guarantees:
        ``publish`` never raises because of a handler.
    Non-goals:
        No queueing, no replay, no backpressure.
    """

    def __init__(self) -> None:
        self._handlers: list[ViolationHandler] = []
        self._lock = threading.Lock()

    def subscribe(self, handler: ViolationHandler) -> Subscription:
        with self._lock:
            self._handlers.append(handler)
        return Subscription(self, handler)

    def _remove(self, handler: ViolationHandler) -> None:
        with self._lock:
            if handler in self._handlers:
                self._handlers.remove(handler)

    @property
    def subscriber_count(self) -> int:
        return len(self._handlers)

    def publish(self, violation: BusinessRuleViolation) -> int:
        """Deliver ``violation``; return how many handlers received it."""
        with self._lock:
            handlers = list(self._handlers)

        if not handlers:
            logger.debug(
                "violation_dropped",
                extra={"rule_number": violation.rule_number},
            )
            return 0

        delivered = 0
        for handler in handlers:
            try:
                handler(violation)
                delivered += 1
            except Exception:
                logger.exception(
                    "violation_subscriber_failed",
                    extra={"rule_number": violation.rule_number},
                )
        return delivered
