import asyncio
from types import SimpleNamespace

import httpx
import pytest
from postgrest.exceptions import APIError

from weshare.schemas.card import CardData, Profile
from weshare.services.auth import UserContext
from weshare.services.errors import (
    AuthorizationError,
    BackendUnavailable,
    NotFoundError,
    ValidationError,
)
from weshare.services.record_mapper import serialize_card
from weshare.services.supabase_store import (
    SupabaseSiteStore,
    translate_api_error,
    translate_http_error,
)

USER = UserContext(id="user-1", access_token="jwt-token")


class FakeQuery:
    def __init__(self, client: "FakeClient", table: str) -> None:
        self.client = client
        self.table = table
        self.ops: list[tuple] = []

    def __getattr__(self, name):
        def _chain(*args, **kwargs):
            self.ops.append((name, args, kwargs))
            return self

        return _chain

    def execute(self):
        self.client.executed.append((self.table, [op[0] for op in self.ops]))
        outcome = self.client.responses[self.table].pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return SimpleNamespace(data=outcome)


class FakeClient:
    def __init__(self, **responses) -> None:
        self.responses = {name: list(items) for name, items in responses.items()}
        self.executed: list[tuple] = []
        self.tokens: list[str] = []
        self.postgrest = SimpleNamespace(auth=self.tokens.append)

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)


def _site_row(site_id: str = "site-1") -> dict:
    card = CardData(internal_name="Portfolio", profile=Profile(name="Alex"))
    return {
        "id": site_id,
        "user_id": "user-1",
        "internal_name": "Portfolio",
        "data": serialize_card(card),
        "is_published": True,
        "created_at": "2024-01-01T00:00:00+00:00",
    }


@pytest.mark.parametrize(
    ("error", "expected"),
    [
        ({"code": "PGRST116", "message": "JSON object requested, multiple (or no) rows returned"}, NotFoundError),
        ({"code": "PGRST301", "message": "JWT expired"}, AuthorizationError),
        ({"code": "42501", "message": "permission denied for table sites"}, AuthorizationError),
        ({"code": "23505", "message": "duplicate key value"}, ValidationError),
        ({"code": "22P02", "message": "invalid input syntax for type uuid"}, ValidationError),
        ({"code": "PGRST102", "message": "Empty or invalid json"}, ValidationError),
    ],
)
def test_translate_api_error(error, expected) -> None:
    translated = translate_api_error(APIError(error), "update")

    assert isinstance(translated, expected)
    assert translated.code == error["code"]
    assert str(translated).startswith("update failed:")


@pytest.mark.parametrize(
    "code",
    ["XX000", "53300", "57014", "PGRST000", "PGRST002", "", "99999"],
)
def test_translate_api_error_server_and_unknown_codes_are_unavailable(code) -> None:
    translated = translate_api_error(APIError({"code": code, "message": "internal"}), "list")

    assert isinstance(translated, BackendUnavailable)
    assert translated.code == code


@pytest.mark.parametrize(
    ("status", "expected"),
    [(401, AuthorizationError), (403, AuthorizationError), (404, NotFoundError), (400, ValidationError), (502, BackendUnavailable)],
)
def test_translate_http_status_error(status, expected) -> None:
    request = httpx.Request("GET", "https://example.supabase.co/rest/v1/sites")
    response = httpx.Response(status, request=request)
    exc = httpx.HTTPStatusError("failed", request=request, response=response)

    assert isinstance(translate_http_error(exc, "list"), expected)


def test_translate_transport_error_is_unavailable() -> None:
    exc = httpx.ConnectError("connection refused")

    assert isinstance(translate_http_error(exc, "list"), BackendUnavailable)


def test_list_hydrates_contacts_and_analytics() -> None:
    client = FakeClient(
        sites=[[_site_row()]],
        contacts=[
            [
                {
                    "id": "contact-1",
                    "site_id": "site-1",
                    "user_id": "user-1",
                    "name": "Sam",
                    "email": "sam@example.com",
                    "phone": None,
                    "message": "Hi",
                    "created_at": "2024-02-01T12:00:00+00:00",
                    "sites": {"internal_name": "Portfolio"},
                }
            ]
        ],
        analytics=[[{"site_id": "site-1", "date": "2024-02-01", "views": 50, "clicks": 5, "saves": 1}]],
    )
    store = SupabaseSiteStore(USER, client)

    sites = asyncio.run(store.list("user-1"))

    assert client.tokens == ["jwt-token"]
    assert [table for table, _ in client.executed] == ["sites", "contacts", "analytics"]
    assert sites[0].id == "site-1"
    assert sites[0].collected_contacts[0].source == "Portfolio"
    assert sites[0].analytics.ctr == 10.0


def test_empty_update_and_delete_are_not_found() -> None:
    client = FakeClient(sites=[[], []])
    store = SupabaseSiteStore(USER, client)
    card = CardData(id="site-1", internal_name="Portfolio")

    with pytest.raises(NotFoundError):
        asyncio.run(store.update("site-1", card))
    with pytest.raises(NotFoundError):
        asyncio.run(store.delete("site-1"))


def test_create_without_returned_row_is_unavailable() -> None:
    client = FakeClient(sites=[[]])
    store = SupabaseSiteStore(USER, client)

    with pytest.raises(BackendUnavailable):
        asyncio.run(store.create("user-1", CardData(internal_name="Portfolio")))


def test_create_sends_payload_without_id() -> None:
    client = FakeClient(sites=[[_site_row("site-7")]])
    store = SupabaseSiteStore(USER, client)

    created = asyncio.run(store.create("user-1", CardData(id="local", internal_name="Portfolio")))

    assert created.id == "site-7"
    assert client.executed == [("sites", ["insert"])]


def test_api_errors_are_translated() -> None:
    client = FakeClient(sites=[APIError({"code": "PGRST301", "message": "JWT expired"})])
    store = SupabaseSiteStore(USER, client)

    with pytest.raises(AuthorizationError):
        asyncio.run(store.list("user-1"))
