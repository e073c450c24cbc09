"""Tests for AuthService login, logout and permission checks."""

import pytest

from progress_client import ApiClient, AuthService, InMemorySessionStore
from progress_client.session_store import REFRESH_TOKEN_KEY, TENANT_KEY, TOKEN_KEY, USER_KEY
from progress_kernel.domain.permissions import PAGE_CONFIRMATION_ADMIN, PAGE_CONFIRMATION_EDIT
from progress_kernel.domain.violations import ViolationChannel
from progress_kernel.exceptions import AuthorizationDeniedError, NotAuthenticatedError
from tests.fakes import user_payload


def _login_body() -> dict:
    return {
        "token": "t-1",
        "refreshToken": "r-1",
        "userProfile": user_payload(PAGE_CONFIRMATION_EDIT, email="lead@example.com"),
        "tenantInfo": {"id": 3, "tenantCode": "ACME", "name": "Acme"},
    }


class TestLogin:
    """Login stores what the backend returns."""

    def test_login_stores_session(self, backend, api_client, session_store):
        session_store.clear()
        backend.route("POST", "/api/auth/login", (200, _login_body()))
        auth = AuthService(api_client)

        user = auth.login("ACME", "lead@example.com", "secret")

        assert user.email == "lead@example.com"
        assert session_store.get(TOKEN_KEY) == "t-1"
        assert session_store.get(REFRESH_TOKEN_KEY) == "r-1"
        assert auth.current_tenant().tenant_code == "ACME"
        call = backend.calls[0]
        assert call.authorization is None
        assert call.json == {"tenantCode": "ACME", "email": "lead@example.com", "password": "secret"}

    def test_logout_clears(self, auth, session_store):
        auth.logout()
        assert not auth.is_authenticated
        assert session_store.snapshot() == {}

    def test_current_user_requires_login(self):
        client = ApiClient("http://x", InMemorySessionStore(), ViolationChannel())
        with pytest.raises(NotAuthenticatedError):
            AuthService(client).current_user()


class TestPermissions:
    def test_has_permission(self, auth):
        assert auth.has_permission(PAGE_CONFIRMATION_EDIT)
        assert not auth.has_permission(PAGE_CONFIRMATION_ADMIN)

    def test_require_permission_raises(self, auth):
        with pytest.raises(AuthorizationDeniedError) as exc_info:
            auth.require_permission(PAGE_CONFIRMATION_ADMIN)
        assert exc_info.value.permission == PAGE_CONFIRMATION_ADMIN

    def test_display_name(self, auth, session_store):
        assert auth.current_user().display_name == "Pat Morgan"
        session_store.set(USER_KEY, {"email": "x@example.com"})
        assert auth.current_user().display_name == "x@example.com"

    def test_no_tenant(self, auth, session_store):
        session_store.remove(TENANT_KEY)
        assert auth.current_tenant() is None
