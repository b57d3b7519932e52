from __future__ import annotations

import asyncio
from typing import Callable, List, Optional, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session as DbSession

from ..db.database import Database, get_database
from ..db.models import AnalyticsRecord, ContactRecord, SiteRecord
from ..db.utils import owned_record, transaction_scope
from ..log import StoreCallLogger
from ..schemas.card import CardData, ContactSubmission
from ..schemas.wire import AnalyticsDay, ContactRow, SiteRow
from ..utils.datetime import utcnow
from .auth import UserContext
from .errors import BackendUnavailable, NotFoundError, SiteStoreError, ValidationError
from .record_mapper import from_wire_format, to_wire_format
from .site_store import SiteStore, contact_from_row, hydrate_sites

T = TypeVar("T")


def _site_row(record: SiteRecord) -> SiteRow:
    return SiteRow(
        id=record.id,
        user_id=record.user_id,
        internal_name=record.internal_name,
        data=record.data,
        is_published=bool(record.is_published),
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def _contact_row(record: ContactRecord, site_name: Optional[str]) -> ContactRow:
    return ContactRow(
        id=record.id,
        site_id=record.site_id,
        user_id=record.user_id,
        name=record.name,
        email=record.email,
        phone=record.phone,
        message=record.message,
        created_at=record.created_at,
        site_name=site_name,
    )


def _analytics_day(record: AnalyticsRecord) -> AnalyticsDay:
    return AnalyticsDay(
        site_id=record.site_id,
        date=record.date,
        views=record.views or 0,
        clicks=record.clicks or 0,
        saves=record.saves or 0,
    )


class SqlSiteStore(SiteStore):
    """``SiteStore`` over the local SQLAlchemy mirror of the backend tables.

    Ownership checks stand in for the hosted backend's row-level security:
    a row owned by someone else behaves exactly like a missing row.
    """

    backend_name = "sql"

    def __init__(self, user: UserContext, database: Optional[Database] = None) -> None:
        super().__init__(user)
        self._database = database or get_database()

    async def _run(self, operation: str, fn: Callable[[DbSession], T], **context) -> T:
        def _call() -> T:
            with transaction_scope(self._database) as session:
                return fn(session)

        with StoreCallLogger(self.backend_name, operation, user_id=self.user.id, **context):
            try:
                return await asyncio.to_thread(_call)
            except SiteStoreError:
                raise
            except IntegrityError as exc:
                raise ValidationError(f"{operation} rejected: {exc.orig}") from exc
            except OperationalError as exc:
                raise BackendUnavailable(f"{operation} failed: {exc.orig}") from exc
            except SQLAlchemyError as exc:
                raise BackendUnavailable(f"{operation} failed: {exc}") from exc

    def _owned_site(self, session: DbSession, site_id: str) -> SiteRecord:
        record = owned_record(session, SiteRecord, site_id, self.user.id)
        if record is None:
            raise NotFoundError(f"Site not found: {site_id}")
        return record

    async def list(self, owner_id: str) -> List[CardData]:
        owner = self._require_owner(owner_id)

        def _list(session: DbSession):
            sites = session.scalars(
                select(SiteRecord)
                .where(SiteRecord.user_id == owner)
                .order_by(SiteRecord.created_at.desc())
            ).all()
            site_ids = [site.id for site in sites]
            contacts = session.scalars(
                select(ContactRecord)
                .where(ContactRecord.user_id == owner)
                .order_by(ContactRecord.created_at.desc())
            ).all()
            days = session.scalars(
                select(AnalyticsRecord).where(AnalyticsRecord.site_id.in_(site_ids))
            ).all() if site_ids else []
            names = {site.id: site.internal_name for site in sites}
            return (
                [_site_row(site) for site in sites],
                [_contact_row(contact, names.get(contact.site_id)) for contact in contacts],
                [_analytics_day(day) for day in days],
            )

        rows, contacts, days = await self._run("list", _list)
        return hydrate_sites([from_wire_format(row) for row in rows], contacts, days)

    async def get(self, site_id: str) -> Optional[CardData]:
        def _get(session: DbSession) -> Optional[SiteRow]:
            record = owned_record(session, SiteRecord, site_id, self.user.id)
            return _site_row(record) if record is not None else None

        row = await self._run("get", _get, site_id=site_id)
        return from_wire_format(row) if row is not None else None

    async def create(self, owner_id: str, card: CardData) -> CardData:
        owner = self._require_owner(owner_id)
        self._validate_card(card)
        wire = to_wire_format(card.model_copy(update={"id": ""}), owner_id=owner)

        def _create(session: DbSession) -> SiteRow:
            record = SiteRecord(**wire.to_insert())
            session.add(record)
            session.flush()
            return _site_row(record)

        row = await self._run("create", _create)
        return from_wire_format(row)

    async def update(self, site_id: str, card: CardData) -> CardData:
        self._validate_card(card)
        wire = to_wire_format(card, owner_id=self.user.id)

        def _update(session: DbSession) -> SiteRow:
            record = self._owned_site(session, site_id)
            for key, value in wire.to_update().items():
                setattr(record, key, value)
            record.updated_at = utcnow()
            session.flush()
            return _site_row(record)

        row = await self._run("update", _update, site_id=site_id)
        return from_wire_format(row)

    async def delete(self, site_id: str) -> None:
        def _delete(session: DbSession) -> None:
            record = self._owned_site(session, site_id)
            session.delete(record)

        await self._run("delete", _delete, site_id=site_id)

    async def list_contacts(self, owner_id: str) -> List[ContactSubmission]:
        owner = self._require_owner(owner_id)

        def _list(session: DbSession) -> List[ContactRow]:
            rows = session.execute(
                select(ContactRecord, SiteRecord.internal_name)
                .join(SiteRecord, SiteRecord.id == ContactRecord.site_id, isouter=True)
                .where(ContactRecord.user_id == owner)
                .order_by(ContactRecord.created_at.desc())
            ).all()
            return [_contact_row(contact, site_name) for contact, site_name in rows]

        rows = await self._run("list_contacts", _list)
        return [contact_from_row(row) for row in rows]

    async def delete_contact(self, contact_id: str) -> None:
        def _delete(session: DbSession) -> None:
            record = owned_record(session, ContactRecord, contact_id, self.user.id)
            if record is None:
                raise NotFoundError(f"Contact not found: {contact_id}")
            session.delete(record)

        await self._run("delete_contact", _delete, contact_id=contact_id)

    async def analytics_for_site(self, site_id: str, limit: int = 30) -> List[AnalyticsDay]:
        def _days(session: DbSession) -> List[AnalyticsDay]:
            self._owned_site(session, site_id)
            records = session.scalars(
                select(AnalyticsRecord)
                .where(AnalyticsRecord.site_id == site_id)
                .order_by(AnalyticsRecord.date.desc())
                .limit(limit)
            ).all()
            return [_analytics_day(record) for record in records]

        return await self._run("analytics_for_site", _days, site_id=site_id)


__all__ = ["SqlSiteStore"]
