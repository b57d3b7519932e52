import asyncio
from datetime import date, datetime, timezone

import pytest

from weshare.db.database import Database
from weshare.db.migrations import init_db
from weshare.db.models import AnalyticsRecord, ContactRecord, SiteRecord
from weshare.db.utils import get_db, owned_record, transaction_scope
from weshare.schemas.card import CardData, Profile
from weshare.services.auth import UserContext
from weshare.services.errors import AuthorizationError, NotFoundError, ValidationError
from weshare.services.sql_store import SqlSiteStore

ALEX = UserContext(id="user-1", access_token="user-1")
SAM = UserContext(id="user-2", access_token="user-2")


def _database(tmp_path) -> Database:
    database = Database(f"sqlite:///{tmp_path / 'sites.db'}")
    init_db(database)
    return database


def _card(name: str = "Portfolio") -> CardData:
    return CardData(internal_name=name, profile=Profile(name="Alex"))


def test_sql_store_crud_roundtrip(tmp_path) -> None:
    database = _database(tmp_path)
    store = SqlSiteStore(ALEX, database)

    async def run() -> None:
        created = await store.create("user-1", _card().model_copy(update={"id": "client-chosen"}))
        assert created.id and created.id != "client-chosen"

        fetched = await store.get(created.id)
        assert fetched.profile.name == "Alex"

        updated = await store.update(created.id, created.model_copy(update={"internal_name": "Renamed"}))
        assert updated.internal_name == "Renamed"

        second = await store.create("user-1", _card("Shop"))
        listed = await store.list("user-1")
        assert [site.id for site in listed] == [second.id, created.id]

        await store.delete(created.id)
        assert await store.get(created.id) is None
        with pytest.raises(NotFoundError):
            await store.delete(created.id)

    asyncio.run(run())

    with get_db(database) as session:
        rows = session.query(SiteRecord).all()
        assert [row.internal_name for row in rows] == ["Shop"]
        assert rows[0].user_id == "user-1"


def test_sql_store_scopes_rows_to_owner(tmp_path) -> None:
    database = _database(tmp_path)
    alex = SqlSiteStore(ALEX, database)
    sam = SqlSiteStore(SAM, database)

    async def run() -> None:
        site = await alex.create("user-1", _card())

        assert await sam.get(site.id) is None
        assert await sam.list("user-2") == []
        with pytest.raises(NotFoundError):
            await sam.update(site.id, site)
        with pytest.raises(NotFoundError):
            await sam.delete(site.id)
        with pytest.raises(AuthorizationError):
            await sam.list("user-1")
        with pytest.raises(ValidationError):
            await alex.create("", _card())
        with pytest.raises(ValidationError):
            await alex.create("user-1", _card("   "))

    asyncio.run(run())


def test_sql_store_hydrates_contacts_and_analytics(tmp_path) -> None:
    database = _database(tmp_path)
    store = SqlSiteStore(ALEX, database)

    async def create() -> CardData:
        return await store.create("user-1", _card())

    site = asyncio.run(create())

    with transaction_scope(database) as session:
        session.add_all(
            [
                ContactRecord(
                    id="contact-1",
                    site_id=site.id,
                    user_id="user-1",
                    name="Sam",
                    email="sam@example.com",
                    created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
                ),
                ContactRecord(
                    id="contact-2",
                    site_id=site.id,
                    user_id="user-1",
                    name="Jo",
                    email="jo@example.com",
                    message="Hello",
                    created_at=datetime(2024, 2, 1, tzinfo=timezone.utc),
                ),
                AnalyticsRecord(site_id=site.id, user_id="user-1", date=date(2024, 1, 1), views=80, clicks=8),
                AnalyticsRecord(site_id=site.id, user_id="user-1", date=date(2024, 1, 2), views=20, clicks=2, saves=3),
            ]
        )

    async def run() -> None:
        listed = await store.list("user-1")
        hydrated = listed[0]
        assert [contact.id for contact in hydrated.collected_contacts] == ["contact-2", "contact-1"]
        assert hydrated.collected_contacts[0].source == "Portfolio"
        assert (hydrated.analytics.views, hydrated.analytics.clicks, hydrated.analytics.saves) == (100, 10, 3)
        assert hydrated.analytics.ctr == 10.0

        contacts = await store.list_contacts("user-1")
        assert [contact.message for contact in contacts] == ["Hello", ""]

        days = await store.analytics_for_site(site.id, limit=1)
        assert [day.date for day in days] == [date(2024, 1, 2)]

        with pytest.raises(NotFoundError):
            await SqlSiteStore(SAM, database).delete_contact("contact-1")
        await store.delete_contact("contact-1")
        assert [contact.id for contact in await store.list_contacts("user-1")] == ["contact-2"]

        await store.delete(site.id)
        assert await store.list_contacts("user-1") == []

    asyncio.run(run())


def test_owned_record_hides_other_owners(tmp_path) -> None:
    database = _database(tmp_path)
    with transaction_scope(database) as session:
        session.add(SiteRecord(id="site-a", user_id="user-1", internal_name="A", data="{}"))

    with get_db(database) as session:
        assert owned_record(session, SiteRecord, "site-a", "user-1").internal_name == "A"
        assert owned_record(session, SiteRecord, "site-a", "user-2") is None
        assert owned_record(session, SiteRecord, "", "user-1") is None


def test_in_memory_database_is_shared_across_sessions() -> None:
    database = Database("sqlite:///:memory:")
    init_db(database)
    store = SqlSiteStore(ALEX, database)

    async def run() -> None:
        created = await store.create("user-1", _card())
        assert [site.id for site in await store.list("user-1")] == [created.id]

    asyncio.run(run())
    database.ping()
    database.dispose()
