"""Login, logout and the stored user profile."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from progress_client.session_store import (
    REFRESH_TOKEN_KEY,
    TENANT_KEY,
    TOKEN_KEY,
    USER_KEY,
)
from progress_client.transport import ApiClient
from progress_kernel.exceptions import AuthorizationDeniedError, NotAuthenticatedError
from progress_kernel.logging_config import LogContext, get_logger

logger = get_logger("client.auth")


@dataclass(frozen=True)
class UserProfile:
    id: int | None
    email: str
    first_name: str | None = None
    last_name: str | None = None
    full_name: str | None = None
    roles: frozenset[str] = field(default_factory=frozenset)
    permissions: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> UserProfile:
        return cls(
            id=data.get("id"),
            email=data.get("email") or "",
            first_name=data.get("firstName"),
            last_name=data.get("lastName"),
            full_name=data.get("fullName"),
            roles=frozenset(data.get("roles") or ()),
            permissions=frozenset(data.get("permissions") or ()),
        )

    @property
    def display_name(self) -> str:
        return self.full_name or " ".join(p for p in (self.first_name, self.last_name) if p) or self.email

    def has_permission(self, permission: str) -> bool:
        return permission in self.permissions


@dataclass(frozen=True)
class TenantInfo:
    id: int | None
    tenant_code: str
    name: str | None = None
    client_code: str | None = None

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> TenantInfo:
        return cls(
            id=data.get("id"),
            tenant_code=data.get("tenantCode") or "",
            name=data.get("name"),
            client_code=data.get("clientCode"),
        )


class AuthService:
    """
    Owns the stored credentials.

    Contract:
        ``login`` stores token, refresh token, profile and tenant exactly as
        returned; ``logout`` clears the store.
    Non-goals:
        Token refresh lives in the transport, not here.
    """

    def __init__(self, client: ApiClient):
        self._client = client
        self._store = client.store

    def login(self, tenant_code: str, email: str, password: str) -> UserProfile:
        body = self._client.request(
            "POST",
            "/api/auth/login",
            {"tenantCode": tenant_code, "email": email, "password": password},
            authenticated=False,
        )
        self._store.set(TOKEN_KEY, body["token"])
        self._store.set(REFRESH_TOKEN_KEY, body.get("refreshToken"))
        self._store.set(USER_KEY, body.get("userProfile") or {"email": email})
        self._store.set(TENANT_KEY, body.get("tenantInfo") or {"tenantCode": tenant_code})

        user = self.current_user()
        LogContext.set(tenant_code=tenant_code, user_email=user.email)
        logger.info("login_succeeded", extra={"roles": sorted(user.roles)})
        return user

    def logout(self) -> None:
        self._store.clear()
        logger.info("logged_out")

    @property
    def is_authenticated(self) -> bool:
        return bool(self._store.get(TOKEN_KEY))

    def current_user(self) -> UserProfile:
        data = self._store.get(USER_KEY)
        if not self.is_authenticated or not data:
            raise NotAuthenticatedError()
        return UserProfile.from_payload(data)

    def current_tenant(self) -> TenantInfo | None:
        data = self._store.get(TENANT_KEY)
        return TenantInfo.from_payload(data) if data else None

    def has_permission(self, permission: str) -> bool:
        try:
            return self.current_user().has_permission(permission)
        except NotAuthenticatedError:
            return False

    def require_permission(self, permission: str) -> None:
        if not self.has_permission(permission):
            raise AuthorizationDeniedError(
                f"You need {permission} permission for this action.",
                permission=permission,
            )
