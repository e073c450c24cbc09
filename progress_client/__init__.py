"""Backend access: transport, session store, authentication."""

from progress_client.auth import AuthService, TenantInfo, UserProfile
from progress_client.session_store import (
    FileSessionStore,
    InMemorySessionStore,
    SessionStore,
)
from progress_client.transport import ApiClient, RequestContext

__all__ = [
    "ApiClient",
    "AuthService",
    "FileSessionStore",
    "InMemorySessionStore",
    "RequestContext",
    "SessionStore",
    "TenantInfo",
    "UserProfile",
]
