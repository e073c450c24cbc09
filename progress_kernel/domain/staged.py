"""
Staged actions: look first, then act after an explicit second step.

Responsibility
--------------
Several console flows share one shape: a read-only evaluation the user can
repeat freely (confirmation preview, bulk-upload dry run), followed by an
irreversible write that is only sent after the user has been shown the
evaluation again and acknowledged it.  ``StagedAction`` captures that gate
once so each flow only supplies its two callables.

Architecture position
---------------------
**Kernel domain layer**.  Used by
``progress_modules.confirmation.workflow`` and
``progress_modules.master_data.bulk_upload``.

Invariants enforced
-------------------
* ``commit`` is reachable only through ``stage`` -> ``request_commit``.
* The commit callable receives exactly the key that produced the preview
  the user acknowledged; restaging discards any pending acknowledgement.
* The preview callable never writes (callers pass a read-only call).

Failure modes
-------------
* Out-of-order calls raise ``WorkflowStateError``.
* An exception from the preview leaves the action IDLE; an exception from
  the commit returns it to STAGED so the user may correct and retry.
  Both exceptions propagate unchanged.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import Generic, TypeVar

from progress_kernel.exceptions import WorkflowStateError
from progress_kernel.logging_config import get_logger

logger = get_logger("domain.staged")

K = TypeVar("K")
P = TypeVar("P")
R = TypeVar("R")


class StageState(str, Enum):
    IDLE = "idle"
    STAGED = "staged"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    COMMITTING = "committing"
    COMMITTED = "committed"


class StagedAction(Generic[K, P, R]):
    """
    Two-phase gate around a preview callable and a commit callable.

    Contract:
        ``stage(key)`` -> preview, any number of times.
        ``request_commit()`` -> the staged preview, restated for the prompt.
        ``commit()`` -> result of the write.
    Guarantees:
        The write is never issued without a prior preview for the same key.
    Non-goals:
        Does not decide what "acceptable" means; ``can_commit`` may veto.
    """

    def __init__(
        self,
        name: str,
        *,
        preview: Callable[[K], P],
        commit: Callable[[K], R],
        can_commit: Callable[[P], bool] | None = None,
    ):
        self.name = name
        self._preview_fn = preview
        self._commit_fn = commit
        self._can_commit = can_commit
        self._state = StageState.IDLE
        self._key: K | None = None
        self._preview: P | None = None
        self._result: R | None = None

    @property
    def state(self) -> StageState:
        return self._state

    @property
    def key(self) -> K | None:
        return self._key

    @property
    def preview(self) -> P | None:
        return self._preview

    @property
    def result(self) -> R | None:
        return self._result

    def _require(self, operation: str, *allowed: StageState) -> None:
        if self._state not in allowed:
            raise WorkflowStateError(self.name, self._state.value, operation)

    def stage(self, key: K) -> P:
        self._require(
            "stage",
            StageState.IDLE,
            StageState.STAGED,
            StageState.AWAITING_CONFIRMATION,
            StageState.COMMITTED,
        )
        self._state = StageState.IDLE
        self._key = None
        self._preview = None
        self._result = None

        preview = self._preview_fn(key)
        self._key = key
        self._preview = preview
        self._state = StageState.STAGED
        logger.debug("staged_action_previewed", extra={"action": self.name})
        return preview

    @property
    def commit_allowed(self) -> bool:
        if self._state is not StageState.STAGED:
            return False
        if self._can_commit is None:
            return True
        return bool(self._can_commit(self._preview))

    def request_commit(self) -> P:
        """Move to the confirmation prompt; return what the prompt restates."""
        self._require("request commit", StageState.STAGED)
        if not self.commit_allowed:
            raise WorkflowStateError(self.name, self._state.value, "commit a rejected preview")
        self._state = StageState.AWAITING_CONFIRMATION
        return self._preview  # type: ignore[return-value]

    def cancel(self) -> None:
        """Dismiss the confirmation prompt; the preview stays staged."""
        self._require("cancel", StageState.AWAITING_CONFIRMATION)
        self._state = StageState.STAGED

    def commit(self) -> R:
        self._require("commit", StageState.AWAITING_CONFIRMATION)
        self._state = StageState.COMMITTING
        try:
            result = self._commit_fn(self._key)  # type: ignore[arg-type]
        except Exception:
            self._state = StageState.STAGED
            raise
        self._result = result
        self._state = StageState.COMMITTED
        logger.info("staged_action_committed", extra={"action": self.name})
        return result

    def reset(self) -> None:
        self._require(
            "reset",
            StageState.IDLE,
            StageState.STAGED,
            StageState.AWAITING_CONFIRMATION,
            StageState.COMMITTED,
        )
        self._state = StageState.IDLE
        self._key = None
        self._preview = None
        self._result = None
