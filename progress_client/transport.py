"""
HTTP transport (``progress_client.transport``).

Responsibility
--------------
``ApiClient`` is the single gateway to the backend.  It attaches the bearer
token, recovers once from an expired access token, and turns every error
response into a typed ``progress_kernel.exceptions`` error so feature code
never inspects status codes.

Architecture position
---------------------
**Client layer**.  Depends on the kernel (errors, logging, violation
channel) and on ``requests``.  Every feature service takes an ``ApiClient``
in its constructor.

Invariants enforced
-------------------
* One logical request performs at most one token refresh and at most one
  replay.  The budget travels with an immutable ``RequestContext``
  (``attempt`` 1 is the original send, 2 the replay), so concurrent requests
  cannot consume each other's retry.
* A failed refresh, or a 401 on the replay, clears every stored session
  key and notifies the session listeners exactly once for that request.
* A ``BUSINESS_RULE_VIOLATION`` body is published on the violation channel
  before ``RuleViolationError`` is raised; the rule text is not altered.
* Only the 401 path retries.  Network failures, rule violations and
  validation errors are raised on first occurrence.

Failure modes
-------------
=========================================  ===============================
Response                                   Raised
=========================================  ===============================
no response (connect error, timeout)       ``NetworkError``
401 and refresh fails / no refresh token   ``SessionTerminatedError``
401 on the replay                          ``SessionTerminatedError``
400 ``type=BUSINESS_RULE_VIOLATION``       ``RuleViolationError``
400 field -> message map                   ``InputValidationError``
403                                        ``AuthorizationDeniedError``
404                                        ``NotFoundError``
anything else non-2xx                      ``RemoteError``
=========================================  ===============================
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field, replace
from typing import Any
from uuid import uuid4

import requests

from progress_client.session_store import (
    REFRESH_TOKEN_KEY,
    TOKEN_KEY,
    SessionStore,
)
from progress_kernel.domain.violations import BusinessRuleViolation, ViolationChannel
from progress_kernel.exceptions import (
    AuthorizationDeniedError,
    InputValidationError,
    NetworkError,
    NotFoundError,
    RemoteError,
    RuleViolationError,
    SessionTerminatedError,
)
from progress_kernel.logging_config import LogContext, get_logger

logger = get_logger("client.transport")

REFRESH_PATH = "/api/auth/refresh"
VIOLATION_TYPE = "BUSINESS_RULE_VIOLATION"
MAX_ATTEMPTS = 2

SessionListener = Callable[[str], None]


@dataclass(frozen=True)
class RequestContext:
    """Everything needed to (re)send one logical request."""

    method: str
    path: str
    body: Any = None
    params: dict[str, Any] | None = None
    files: dict[str, Any] | None = None
    data: dict[str, Any] | None = None
    authenticated: bool = True
    attempt: int = 1
    request_id: str = field(default_factory=lambda: uuid4().hex[:12])

    @property
    def can_replay(self) -> bool:
        return self.authenticated and self.attempt < MAX_ATTEMPTS

    def replay(self) -> RequestContext:
        return replace(self, attempt=self.attempt + 1)


def _json_or_none(response: requests.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None


def _is_field_error_map(body: Any) -> bool:
    return (
        isinstance(body, dict)
        and bool(body)
        and "type" not in body
        and "message" not in body
        and "error" not in body
        and all(isinstance(v, str) for v in body.values())
    )


class ApiClient:
    """
    Authenticated JSON client for the progress backend.

    Contract:
        ``request(method, path, body=None, params=None)`` returns the decoded
        response body (``None`` for an empty body) or raises a typed error.
    Guarantees:
        At most two sends and one refresh per call.
    Non-goals:
        No de-duplication of refreshes across simultaneous failing requests.
    """

    def __init__(
        self,
        base_url: str,
        store: SessionStore,
        channel: ViolationChannel,
        *,
        timeout: float = 30.0,
        http: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.store = store
        self.channel = channel
        self.timeout = timeout
        self._http = http or requests.Session()
        self._session_listeners: list[SessionListener] = []

    # ------------------------------------------------------------------
    # Session termination listeners
    # ------------------------------------------------------------------

    def add_session_listener(self, listener: SessionListener) -> Callable[[], None]:
        """Register a callback told the reason when the session is torn down."""
        self._session_listeners.append(listener)

        def _remove() -> None:
            if listener in self._session_listeners:
                self._session_listeners.remove(listener)

        return _remove

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        params: dict[str, Any] | None = None,
        *,
        files: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
        authenticated: bool = True,
    ) -> Any:
        ctx = RequestContext(
            method=method.upper(),
            path=path,
            body=body,
            params={k: v for k, v in params.items() if v is not None} if params else None,
            files=files,
            data=data,
            authenticated=authenticated,
        )
        with LogContext.bind(request_id=ctx.request_id):
            return self._execute(ctx)

    def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, body: Any = None, params: dict[str, Any] | None = None) -> Any:
        return self.request("POST", path, body, params)

    def put(self, path: str, body: Any = None, params: dict[str, Any] | None = None) -> Any:
        return self.request("PUT", path, body, params)

    def delete(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return self.request("DELETE", path, params=params)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _send(self, ctx: RequestContext) -> requests.Response:
        headers: dict[str, str] = {"Accept": "application/json"}
        if ctx.authenticated:
            token = self.store.get(TOKEN_KEY)
            if token:
                headers["Authorization"] = f"Bearer {token}"

        logger.debug(
            "api_request",
            extra={"method": ctx.method, "path": ctx.path, "attempt": ctx.attempt},
        )
        try:
            return self._http.request(
                ctx.method,
                self._url(ctx.path),
                json=ctx.body if ctx.files is None else None,
                params=ctx.params,
                files=ctx.files,
                data=ctx.data,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.warning(
                "api_no_response",
                extra={"method": ctx.method, "path": ctx.path, "error": str(exc)},
            )
            raise NetworkError(ctx.method, ctx.path, str(exc)) from exc

    def _execute(self, ctx: RequestContext) -> Any:
        response = self._send(ctx)

        if response.status_code == 401 and ctx.authenticated:
            if not ctx.can_replay:
                raise self._terminate("replayed request was rejected as unauthenticated")
            self._refresh()
            return self._execute(ctx.replay())

        if response.status_code >= 400:
            raise self._classify(ctx, response)

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    def _refresh(self) -> None:
        refresh_token = self.store.get(REFRESH_TOKEN_KEY)
        if not refresh_token:
            raise self._terminate("no refresh token stored")

        try:
            response = self._http.post(
                self._url(REFRESH_PATH),
                json={"refreshToken": refresh_token},
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise self._terminate(f"refresh request failed: {exc}") from exc

        body = _json_or_none(response)
        if response.status_code >= 400 or not isinstance(body, dict) or not body.get("token"):
            raise self._terminate(f"refresh rejected with status {response.status_code}")

        self.store.set(TOKEN_KEY, body["token"])
        if body.get("refreshToken"):
            self.store.set(REFRESH_TOKEN_KEY, body["refreshToken"])
        logger.info("session_refreshed")

    def _terminate(self, reason: str) -> SessionTerminatedError:
        self.store.clear()
        logger.warning("session_terminated", extra={"reason": reason})
        for listener in list(self._session_listeners):
            try:
                listener(reason)
            except Exception:
                logger.exception("session_listener_failed")
        return SessionTerminatedError(reason)

    def _classify(self, ctx: RequestContext, response: requests.Response) -> Exception:
        status = response.status_code
        body = _json_or_none(response)
        message = (body.get("message") or body.get("error")) if isinstance(body, dict) else None
        error_type = body.get("type") if isinstance(body, dict) else None

        if status == 400 and error_type == VIOLATION_TYPE:
            violation = BusinessRuleViolation.from_payload(body)
            logger.warning(
                "business_rule_violation",
                extra={
                    "path": ctx.path,
                    "rule_number": violation.rule_number,
                    "rule_message": violation.message,
                },
            )
            self.channel.publish(violation)
            return RuleViolationError(violation)

        extra = {"path": ctx.path, "status": status, "error_type": error_type}
        logger.info("api_error_response", extra=extra)

        if status == 403:
            return AuthorizationDeniedError(message)
        if status == 404:
            return NotFoundError(ctx.path, message)
        if status == 400 and _is_field_error_map(body):
            return InputValidationError(body)
        return RemoteError(status, message, error_type, body)
