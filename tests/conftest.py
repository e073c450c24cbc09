"""
Pytest fixtures for the progress console test suite.

Provides:
- Session-wide structured logging configuration
- A fake backend mounted on a ``requests.Session`` as a transport adapter,
  so every test exercises the real ``ApiClient`` without a network
- An authenticated in-memory session store
- A deterministic clock pinned to 2025-11-01
"""

import json
import logging
from io import StringIO

import pytest
import requests

from progress_client import ApiClient, AuthService, InMemorySessionStore
from progress_client.session_store import REFRESH_TOKEN_KEY, TENANT_KEY, TOKEN_KEY, USER_KEY
from progress_kernel.domain.clock import DeterministicClock
from progress_kernel.domain.permissions import PAGE_CONFIRMATION_ADMIN, PAGE_CONFIRMATION_EDIT
from progress_kernel.domain.violations import ViolationChannel
from progress_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from tests.fakes import BASE_URL, TODAY, FakeBackend, user_payload


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG, stream=StringIO())
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture progress_console logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, api_client):
            api_client.get("/api/projects")
            logs = captured_logs()
            assert any(r["message"] == "api_request" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("progress_console")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Client fixtures
# =============================================================================


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def http_session(backend):
    session = requests.Session()
    session.mount(BASE_URL, backend)
    yield session
    session.close()


@pytest.fixture
def session_store() -> InMemorySessionStore:
    """Store holding a logged-in editor session."""
    return InMemorySessionStore(
        {
            TOKEN_KEY: "access-1",
            REFRESH_TOKEN_KEY: "refresh-1",
            USER_KEY: user_payload(PAGE_CONFIRMATION_EDIT),
            TENANT_KEY: {"id": 1, "tenantCode": "ACME", "name": "Acme Builders"},
        }
    )


@pytest.fixture
def channel() -> ViolationChannel:
    return ViolationChannel()


@pytest.fixture
def published(channel) -> list:
    """Violations delivered on the channel during the test."""
    received: list = []
    subscription = channel.subscribe(received.append)
    yield received
    subscription.unsubscribe()


@pytest.fixture
def api_client(http_session, session_store, channel) -> ApiClient:
    return ApiClient(BASE_URL, session_store, channel, timeout=5, http=http_session)


@pytest.fixture
def auth(api_client) -> AuthService:
    return AuthService(api_client)


@pytest.fixture
def admin_store(session_store) -> InMemorySessionStore:
    session_store.set(USER_KEY, user_payload(PAGE_CONFIRMATION_EDIT, PAGE_CONFIRMATION_ADMIN))
    return session_store


@pytest.fixture
def clock() -> DeterministicClock:
    return DeterministicClock.on(TODAY)
