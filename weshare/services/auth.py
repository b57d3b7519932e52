from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

from .errors import AuthorizationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserContext:
    """The signed-in owner every store call is scoped to."""

    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    access_token: Optional[str] = None


class AuthProvider(ABC):
    @abstractmethod
    async def current_user(self, access_token: Optional[str]) -> UserContext:
        """Resolve the owner behind an access token or raise AuthorizationError."""

    @abstractmethod
    async def sign_out(self, user: UserContext) -> None:
        ...


class LocalAuthProvider(AuthProvider):
    """Treats the bearer token as the user id; for the local SQL backend."""

    def __init__(self, users: Optional[dict[str, UserContext]] = None) -> None:
        self._users = dict(users or {})
        self._signed_out: set[str] = set()

    def register(self, user: UserContext) -> None:
        self._users[user.id] = user
        self._signed_out.discard(user.id)

    async def current_user(self, access_token: Optional[str]) -> UserContext:
        token = (access_token or "").strip()
        if not token:
            raise AuthorizationError("Missing access token")
        if token in self._signed_out:
            raise AuthorizationError("Session has been signed out")
        user = self._users.get(token)
        if user is None:
            user = UserContext(id=token, access_token=token)
        return user

    async def sign_out(self, user: UserContext) -> None:
        self._signed_out.add(user.id)


class SupabaseAuthProvider(AuthProvider):
    """Resolve users through ``client.auth`` of a Supabase client."""

    def __init__(self, client: Any) -> None:
        self._client = client
        self._revoked: set[str] = set()

    async def current_user(self, access_token: Optional[str]) -> UserContext:
        token = (access_token or "").strip()
        if not token:
            raise AuthorizationError("Missing access token")
        if token in self._revoked:
            raise AuthorizationError("Session has been signed out")
        try:
            response = await asyncio.to_thread(self._client.auth.get_user, token)
        except Exception as exc:
            raise AuthorizationError(f"Session rejected: {exc}") from exc
        user = getattr(response, "user", None)
        if user is None:
            raise AuthorizationError("Session rejected: no user for token")
        metadata = getattr(user, "user_metadata", None) or {}
        return UserContext(
            id=str(user.id),
            email=getattr(user, "email", None),
            full_name=metadata.get("full_name"),
            access_token=token,
        )

    async def sign_out(self, user: UserContext) -> None:
        """Revoke the caller's own session, not the shared client's."""
        token = (user.access_token or "").strip()
        if not token:
            raise AuthorizationError("Missing access token")
        try:
            await asyncio.to_thread(self._client.auth.admin.sign_out, token)
        except Exception:
            logger.exception("Supabase sign-out failed for user %s", user.id)
            raise
        self._revoked.add(token)


__all__ = [
    "AuthProvider",
    "LocalAuthProvider",
    "SupabaseAuthProvider",
    "UserContext",
]
