"""
Typed Exception Hierarchy for the Progress Console.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

The console talks to a backend that already classifies its failures
(business rule violation, validation, access denied, not found).  The
transport turns each of those into a typed exception so that workflow code
catches by type and reads structured attributes instead of parsing messages.

Every exception:
  1. Has its own class (catch by type, not message)
  2. Carries a CODE class attribute (machine-readable, log-safe)
  3. Stores its context as attributes (rendered as exc_* log fields)

Example - WRONG way:
    try:
        grid.submit()
    except Exception as e:
        if "Rule" in str(e):
            ...

Example - RIGHT way:
    try:
        service.confirm(wbs_id, day, remarks)
    except RuleViolationError as e:
        form.violation = e.violation     # rule text shown verbatim
    except AuthorizationDeniedError as e:
        banner.show(e.message)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    ProgressConsoleError (base)
    |
    +-- TransportError
    |   +-- NetworkError
    |   +-- RemoteError
    |   +-- NotFoundError
    |   +-- MalformedResponseError
    |
    +-- AuthorizationDeniedError
    |
    +-- SessionError
    |   +-- NotAuthenticatedError
    |   +-- SessionTerminatedError
    |
    +-- RuleViolationError
    |
    +-- InputValidationError
    |   +-- CustomSplitMismatchError
    |   +-- UnsupportedUploadFileError
    |   +-- MissingUploadColumnsError
    |
    +-- WorkflowStateError
    |
    +-- PlanVersionIntegrityError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Transport       | NETWORK_ERROR               | No response (connection, timeout)
                | REMOTE_ERROR                | Any unclassified non-2xx response
                | NOT_FOUND                   | HTTP 404
                | MALFORMED_RESPONSE          | 2xx body the client cannot read
----------------|-----------------------------|-----------------------------------------
Authorization   | AUTHORIZATION_DENIED        | HTTP 403 or local permission check
----------------|-----------------------------|-----------------------------------------
Session         | NOT_AUTHENTICATED           | No stored credentials
                | SESSION_TERMINATED          | Refresh failed or replay got 401
----------------|-----------------------------|-----------------------------------------
Rules           | BUSINESS_RULE_VIOLATION     | Backend rule breach (published first)
----------------|-----------------------------|-----------------------------------------
Validation      | INPUT_VALIDATION_FAILED     | Structural input problem
                | CUSTOM_SPLIT_MISMATCH       | Custom quantities != split count
                | UNSUPPORTED_UPLOAD_FILE     | Upload extension not accepted
                | MISSING_UPLOAD_COLUMNS      | Upload lacks required columns
----------------|-----------------------------|-----------------------------------------
Workflow        | WORKFLOW_STATE_INVALID      | Operation not valid in current state
                | PLAN_VERSION_INTEGRITY      | More than one active plan version
"""

from __future__ import annotations

from typing import Any

DEFAULT_ACCESS_DENIED_MESSAGE = (
    "Access denied. You do not have permission to perform this action."
)
DEFAULT_FAILURE_MESSAGE = "Request failed. Please try again."


class ProgressConsoleError(Exception):
    """
    Base exception for all progress console errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "PROGRESS_CONSOLE_ERROR"


# Transport


class TransportError(ProgressConsoleError):
    """Base exception for failed HTTP exchanges."""

    code: str = "TRANSPORT_ERROR"


class NetworkError(TransportError):
    """The backend could not be reached (no response)."""

    code: str = "NETWORK_ERROR"

    def __init__(self, method: str, path: str, reason: str):
        self.method = method
        self.path = path
        self.reason = reason
        super().__init__(f"No response for {method} {path}: {reason}")


class RemoteError(TransportError):
    """The backend answered with an error that has no more specific type."""

    code: str = "REMOTE_ERROR"

    def __init__(
        self,
        status: int,
        message: str | None = None,
        error_type: str | None = None,
        body: Any = None,
    ):
        self.status = status
        self.message = message or DEFAULT_FAILURE_MESSAGE
        self.error_type = error_type
        self.body = body
        super().__init__(self.message)


class NotFoundError(RemoteError):
    """The backend reported the requested resource does not exist."""

    code: str = "NOT_FOUND"

    def __init__(self, path: str, message: str | None = None):
        self.path = path
        super().__init__(404, message or f"Resource not found: {path}", "NOT_FOUND")


class MalformedResponseError(TransportError):
    """A successful response whose body does not have the expected shape."""

    code: str = "MALFORMED_RESPONSE"

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Unreadable response from {path}: {reason}")


# Authorization


class AuthorizationDeniedError(ProgressConsoleError):
    """The action is not permitted for the current user.

    Raised for HTTP 403 and for local permission checks that mirror the
    backend's (e.g. undoing a confirmation).
    """

    code: str = "AUTHORIZATION_DENIED"

    def __init__(self, message: str | None = None, permission: str | None = None):
        self.message = message or DEFAULT_ACCESS_DENIED_MESSAGE
        self.permission = permission
        super().__init__(self.message)


# Session


class SessionError(ProgressConsoleError):
    """Base exception for credential and session problems."""

    code: str = "SESSION_ERROR"


class NotAuthenticatedError(SessionError):
    """No credentials are stored; the user must log in."""

    code: str = "NOT_AUTHENTICATED"

    def __init__(self, message: str = "Not logged in."):
        super().__init__(message)


class SessionTerminatedError(SessionError):
    """The session could not be recovered and has been cleared."""

    code: str = "SESSION_TERMINATED"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Session terminated: {reason}")


# Business rules


class RuleViolationError(ProgressConsoleError):
    """A business rule rejected the request.

    By the time this is raised the violation has already been published on
    the violation channel; callers catch it to leave their loading state and
    must not display it a second time.
    """

    code: str = "BUSINESS_RULE_VIOLATION"

    def __init__(self, violation: Any):
        self.violation = violation
        self.rule_number = violation.rule_number
        self.hint = violation.hint
        super().__init__(violation.message)


# Validation


class InputValidationError(ProgressConsoleError):
    """Structural input problem, surfaced next to the offending field."""

    code: str = "INPUT_VALIDATION_FAILED"

    def __init__(self, field_errors: dict[str, str], message: str | None = None):
        self.field_errors = dict(field_errors)
        if message is None:
            message = "; ".join(f"{k}: {v}" for k, v in self.field_errors.items())
        super().__init__(message or "Invalid input")


class CustomSplitMismatchError(InputValidationError):
    """Custom split quantities do not match the declared split count."""

    code: str = "CUSTOM_SPLIT_MISMATCH"

    def __init__(self, split_count: int, supplied: int):
        self.split_count = split_count
        self.supplied = supplied
        super().__init__(
            {"customQuantities": f"Expected {split_count} quantities, got {supplied}"},
        )


class UnsupportedUploadFileError(InputValidationError):
    """Bulk upload file has an extension the backend does not accept."""

    code: str = "UNSUPPORTED_UPLOAD_FILE"

    def __init__(self, filename: str, allowed: tuple[str, ...]):
        self.filename = filename
        self.allowed = allowed
        super().__init__(
            {"file": f"Unsupported file type; allowed: {', '.join(allowed)}"},
        )


class MissingUploadColumnsError(InputValidationError):
    """Bulk upload file lacks required header columns."""

    code: str = "MISSING_UPLOAD_COLUMNS"

    def __init__(self, filename: str, missing: tuple[str, ...]):
        self.filename = filename
        self.missing = missing
        super().__init__(
            {"file": f"Missing required columns: {', '.join(missing)}"},
        )


# Workflow


class WorkflowStateError(ProgressConsoleError):
    """An operation was attempted in a state that does not allow it."""

    code: str = "WORKFLOW_STATE_INVALID"

    def __init__(self, workflow: str, state: str, operation: str):
        self.workflow = workflow
        self.state = state
        self.operation = operation
        super().__init__(f"{workflow}: cannot {operation} while {state}")


class PlanVersionIntegrityError(ProgressConsoleError):
    """The backend reported more than one active plan version for a task."""

    code: str = "PLAN_VERSION_INTEGRITY"

    def __init__(self, task_id: int, active_version_ids: list[int]):
        self.task_id = task_id
        self.active_version_ids = list(active_version_ids)
        super().__init__(
            f"Task {task_id} has {len(active_version_ids)} active plan versions: "
            f"{active_version_ids}"
        )
