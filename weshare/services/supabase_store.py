"""``SiteStore`` backed by the hosted Supabase project.

Row-level security on the ``sites``, ``contacts`` and ``analytics`` tables
scopes every query to the signed-in owner, so the client is authorised with
the user's access token before any call. The Python client is synchronous;
calls run in a worker thread so the event loop never blocks.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, List, Optional, TypeVar

import httpx
from postgrest.exceptions import APIError
from supabase import Client, create_client

from ..config import Settings, get_settings
from ..log import StoreCallLogger
from ..schemas.card import CardData, ContactSubmission
from ..schemas.wire import AnalyticsDay, ContactRow
from .auth import UserContext
from .errors import (
    AuthorizationError,
    BackendUnavailable,
    NotFoundError,
    SiteStoreError,
    ValidationError,
)
from .record_mapper import from_wire_format, to_wire_format
from .site_store import SiteStore, contact_from_row, hydrate_sites

T = TypeVar("T")

SITES_TABLE = "sites"
CONTACTS_TABLE = "contacts"
ANALYTICS_TABLE = "analytics"

_NOT_FOUND_CODES = {"PGRST116"}
_AUTH_CODES = {"PGRST301", "PGRST302", "42501", "401", "403"}


def get_supabase_client(settings: Optional[Settings] = None) -> Client:
    """Return a Supabase client if credentials are set."""
    resolved = settings or get_settings()
    if not resolved.supabase_url or not resolved.supabase_anon_key:
        raise RuntimeError("Supabase credentials not set in environment variables.")
    return create_client(resolved.supabase_url, resolved.supabase_anon_key)


def translate_api_error(exc: APIError, operation: str) -> SiteStoreError:
    """Map a PostgREST error onto the store error taxonomy."""
    code = str(getattr(exc, "code", "") or "")
    message = getattr(exc, "message", None) or str(exc)
    detail = f"{operation} failed: {message}"
    if code in _NOT_FOUND_CODES:
        return NotFoundError(detail, code=code)
    if code in _AUTH_CODES or "jwt" in message.lower():
        return AuthorizationError(detail, code=code)
    if code[:2] in {"22", "23"} or code.startswith("PGRST1"):
        return ValidationError(detail, code=code)
    # server-side classes, PGRST0xx connection errors and unknown codes
    return BackendUnavailable(detail, code=code)


def translate_http_error(exc: httpx.HTTPError, operation: str) -> SiteStoreError:
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        if status in {401, 403}:
            return AuthorizationError(f"{operation} failed: HTTP {status}", code=str(status))
        if status == 404:
            return NotFoundError(f"{operation} failed: HTTP {status}", code=str(status))
        if 400 <= status < 500:
            return ValidationError(f"{operation} failed: HTTP {status}", code=str(status))
    return BackendUnavailable(f"{operation} failed: {type(exc).__name__}: {exc}")


class SupabaseSiteStore(SiteStore):
    backend_name = "supabase"

    def __init__(self, user: UserContext, client: Optional[Client] = None) -> None:
        super().__init__(user)
        self._client = client or get_supabase_client()
        if user.access_token:
            self._client.postgrest.auth(user.access_token)

    def _table(self, name: str):
        return self._client.table(name)

    async def _execute(self, operation: str, build: Callable[[], Any], **context) -> List[dict]:
        with StoreCallLogger(self.backend_name, operation, user_id=self.user.id, **context):
            try:
                response = await asyncio.to_thread(lambda: build().execute())
            except APIError as exc:
                raise translate_api_error(exc, operation) from exc
            except httpx.HTTPError as exc:
                raise translate_http_error(exc, operation) from exc
        data = getattr(response, "data", None)
        if data is None:
            return []
        if isinstance(data, dict):
            return [data]
        return list(data)

    async def list(self, owner_id: str) -> List[CardData]:
        owner = self._require_owner(owner_id)
        rows = await self._execute(
            "list",
            lambda: self._table(SITES_TABLE)
            .select("*")
            .eq("user_id", owner)
            .order("created_at", desc=True),
        )
        cards = [from_wire_format(row) for row in rows]
        if not cards:
            return cards
        contacts = await self._contact_rows(owner)
        day_rows = await self._execute(
            "list_analytics",
            lambda: self._table(ANALYTICS_TABLE)
            .select("site_id, date, views, clicks, saves")
            .eq("user_id", owner),
        )
        days = [AnalyticsDay.model_validate(row) for row in day_rows]
        return hydrate_sites(cards, contacts, days)

    async def get(self, site_id: str) -> Optional[CardData]:
        rows = await self._execute(
            "get",
            lambda: self._table(SITES_TABLE).select("*").eq("id", site_id).limit(1),
            site_id=site_id,
        )
        if not rows:
            return None
        return from_wire_format(rows[0])

    async def create(self, owner_id: str, card: CardData) -> CardData:
        owner = self._require_owner(owner_id)
        self._validate_card(card)
        wire = to_wire_format(card.model_copy(update={"id": ""}), owner_id=owner)
        rows = await self._execute(
            "create",
            lambda: self._table(SITES_TABLE).insert(wire.to_insert()),
        )
        if not rows:
            raise BackendUnavailable("create failed: backend returned no row")
        return from_wire_format(rows[0])

    async def update(self, site_id: str, card: CardData) -> CardData:
        self._validate_card(card)
        wire = to_wire_format(card, owner_id=self.user.id)
        rows = await self._execute(
            "update",
            lambda: self._table(SITES_TABLE).update(wire.to_update()).eq("id", site_id),
            site_id=site_id,
        )
        if not rows:
            raise NotFoundError(f"Site not found: {site_id}")
        return from_wire_format(rows[0])

    async def delete(self, site_id: str) -> None:
        rows = await self._execute(
            "delete",
            lambda: self._table(SITES_TABLE).delete().eq("id", site_id),
            site_id=site_id,
        )
        if not rows:
            raise NotFoundError(f"Site not found: {site_id}")

    async def _contact_rows(self, owner: str) -> List[ContactRow]:
        rows = await self._execute(
            "list_contacts",
            lambda: self._table(CONTACTS_TABLE)
            .select("*, sites(internal_name)")
            .eq("user_id", owner)
            .order("created_at", desc=True),
        )
        resolved: List[ContactRow] = []
        for row in rows:
            site = row.get("sites") or {}
            resolved.append(
                ContactRow.model_validate({**row, "site_name": site.get("internal_name")})
            )
        return resolved

    async def list_contacts(self, owner_id: str) -> List[ContactSubmission]:
        owner = self._require_owner(owner_id)
        return [contact_from_row(row) for row in await self._contact_rows(owner)]

    async def delete_contact(self, contact_id: str) -> None:
        rows = await self._execute(
            "delete_contact",
            lambda: self._table(CONTACTS_TABLE).delete().eq("id", contact_id),
            contact_id=contact_id,
        )
        if not rows:
            raise NotFoundError(f"Contact not found: {contact_id}")

    async def analytics_for_site(self, site_id: str, limit: int = 30) -> List[AnalyticsDay]:
        rows = await self._execute(
            "analytics_for_site",
            lambda: self._table(ANALYTICS_TABLE)
            .select("*")
            .eq("site_id", site_id)
            .order("date", desc=True)
            .limit(limit),
            site_id=site_id,
        )
        return [AnalyticsDay.model_validate(row) for row in rows]


__all__ = [
    "SupabaseSiteStore",
    "get_supabase_client",
    "translate_api_error",
    "translate_http_error",
]
