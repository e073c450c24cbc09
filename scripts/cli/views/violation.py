"""
Business-rule violation display.

``ViolationModal`` renders one violation it is handed, or nothing.
``GlobalViolationModal`` owns a channel subscription for as long as it is
mounted and feeds whatever is published into a ``ViolationModal``.
"""

from collections.abc import Callable

from progress_kernel.domain.violations import BusinessRuleViolation, Subscription, ViolationChannel
from scripts.cli.util import W


class ViolationModal:
    def __init__(self, write: Callable[[str], None] = print):
        self._write = write
        self.violation: BusinessRuleViolation | None = None

    @property
    def visible(self) -> bool:
        return self.violation is not None

    def render(self, violation: BusinessRuleViolation | None) -> list[str]:
        if violation is None:
            return []
        lines = [
            "",
            "!" * W,
            f"  BUSINESS RULE VIOLATION - {violation.rule_label}".center(W),
            "!" * W,
            f"  {violation.message}",
        ]
        if violation.hint:
            lines.append(f"  Hint: {violation.hint}")
        lines.append("!" * W)
        return lines

    def show(self, violation: BusinessRuleViolation | None) -> None:
        self.violation = violation
        for line in self.render(violation):
            self._write(line)

    def dismiss(self) -> None:
        self.violation = None


class GlobalViolationModal:
    """The one channel subscriber the console mounts at login."""

    def __init__(self, channel: ViolationChannel, modal: ViolationModal | None = None):
        self._channel = channel
        self.modal = modal or ViolationModal()
        self._subscription: Subscription | None = None

    @property
    def mounted(self) -> bool:
        return self._subscription is not None and self._subscription.active

    def mount(self) -> None:
        if not self.mounted:
            self._subscription = self._channel.subscribe(self.modal.show)

    def unmount(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
        self.modal.dismiss()

    def __enter__(self) -> "GlobalViolationModal":
        self.mount()
        return self

    def __exit__(self, *exc_info) -> None:
        self.unmount()
