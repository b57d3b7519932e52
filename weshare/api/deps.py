from __future__ import annotations

import asyncio
import logging
from collections import deque
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Deque, Dict, Optional

from fastapi import Header, HTTPException

from ..config import Settings, get_settings
from ..services.auth import AuthProvider, LocalAuthProvider, SupabaseAuthProvider, UserContext
from ..services.errors import (
    AuthorizationError,
    BackendUnavailable,
    NotFoundError,
    SiteStoreError,
    ValidationError,
)
from ..services.i18n import Localizer
from ..services.site_store import SiteStore
from ..services.sql_store import SqlSiteStore
from ..services.state_store import SiteStateStore
from ..services.supabase_store import SupabaseSiteStore, get_supabase_client
from ..services.sync import SiteSyncController

logger = logging.getLogger(__name__)

# set by the delete route for the duration of one request
delete_confirmed: ContextVar[bool] = ContextVar("delete_confirmed", default=False)

_STATUS_BY_ERROR = (
    (ValidationError, 422),
    (NotFoundError, 404),
    (AuthorizationError, 401),
    (BackendUnavailable, 503),
)


def status_for_error(exc: SiteStoreError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 502


@dataclass
class Workspace:
    user: UserContext
    store: SiteStore
    state: SiteStateStore
    controller: SiteSyncController
    notices: Deque[str] = field(default_factory=lambda: deque(maxlen=50))
    loaded: bool = False
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    def last_notice(self) -> Optional[str]:
        return self.notices[-1] if self.notices else None

    def http_error(self, exc: SiteStoreError, message: Optional[str] = None) -> HTTPException:
        message = message or str(exc)
        return HTTPException(
            status_code=status_for_error(exc),
            detail={"message": message, "error": type(exc).__name__, "reason": str(exc)},
        )

    async def ensure_loaded(self) -> None:
        if self.loaded:
            return
        async with self.lock:
            if self.loaded:
                return
            try:
                await self.controller.load()
            except SiteStoreError as exc:
                raise self.http_error(exc, self.last_notice()) from exc
            self.loaded = True

    async def reload(self) -> None:
        self.loaded = False
        await self.ensure_loaded()


def build_store(user: UserContext, settings: Optional[Settings] = None) -> SiteStore:
    resolved = settings or get_settings()
    if resolved.store_backend == "supabase":
        return SupabaseSiteStore(user, get_supabase_client(resolved))
    if resolved.store_backend != "sql":
        raise RuntimeError(f"Unknown STORE_BACKEND: {resolved.store_backend}")
    return SqlSiteStore(user)


def build_auth_provider(settings: Optional[Settings] = None) -> AuthProvider:
    resolved = settings or get_settings()
    if resolved.store_backend == "supabase":
        return SupabaseAuthProvider(get_supabase_client(resolved))
    return LocalAuthProvider()


def build_workspace(user: UserContext, settings: Optional[Settings] = None) -> Workspace:
    resolved = settings or get_settings()
    store = build_store(user, resolved)
    state = SiteStateStore()
    notices: Deque[str] = deque(maxlen=50)

    def _confirm(_prompt: str) -> bool:
        return delete_confirmed.get()

    controller = SiteSyncController(
        store,
        state,
        user,
        localizer=Localizer(resolved.default_language),
        confirm=_confirm,
        notify=notices.append,
        rollback_on_failure=resolved.rollback_on_failure,
    )
    return Workspace(user=user, store=store, state=state, controller=controller, notices=notices)


class WorkspaceRegistry:
    """One state store and controller per signed-in user."""

    def __init__(self) -> None:
        self._workspaces: Dict[str, Workspace] = {}

    def get(self, user: UserContext) -> Workspace:
        workspace = self._workspaces.get(user.id)
        if workspace is None or workspace.user.access_token != user.access_token:
            workspace = build_workspace(user)
            self._workspaces[user.id] = workspace
            logger.info("Workspace opened for user %s (%s)", user.id, workspace.store.backend_name)
        return workspace

    def drop(self, user_id: str) -> None:
        self._workspaces.pop(user_id, None)

    def clear(self) -> None:
        self._workspaces.clear()


_registry: Optional[WorkspaceRegistry] = None
_auth_provider: Optional[AuthProvider] = None


def get_registry() -> WorkspaceRegistry:
    global _registry
    if _registry is None:
        _registry = WorkspaceRegistry()
    return _registry


def get_auth_provider() -> AuthProvider:
    global _auth_provider
    if _auth_provider is None:
        _auth_provider = build_auth_provider()
    return _auth_provider


def reset_workspaces() -> None:
    global _registry, _auth_provider
    _registry = None
    _auth_provider = None


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


async def get_current_user(authorization: Optional[str] = Header(None)) -> UserContext:
    try:
        return await get_auth_provider().current_user(_bearer_token(authorization))
    except AuthorizationError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc


async def get_workspace(authorization: Optional[str] = Header(None)) -> Workspace:
    user = await get_current_user(authorization)
    workspace = get_registry().get(user)
    await workspace.ensure_loaded()
    return workspace


__all__ = [
    "Workspace",
    "WorkspaceRegistry",
    "build_auth_provider",
    "build_store",
    "build_workspace",
    "delete_confirmed",
    "get_auth_provider",
    "get_current_user",
    "get_registry",
    "get_workspace",
    "reset_workspaces",
    "status_for_error",
]
