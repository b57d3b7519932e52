from __future__ import annotations

from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Iterable, List, Optional

from ..schemas.card import CardData, ContactSubmission
from ..schemas.wire import AnalyticsDay, ContactRow
from .analytics import rollup_days
from .auth import UserContext
from .errors import AuthorizationError, ValidationError


class SiteStore(ABC):
    """Single-shot CRUD against the durable copy of a user's sites.

    Every call is scoped to the owner the store was built for. No call
    retries; callers decide what to do with a :class:`SiteStoreError`.
    """

    backend_name = "abstract"

    def __init__(self, user: UserContext) -> None:
        self.user = user

    @abstractmethod
    async def list(self, owner_id: str) -> List[CardData]:
        ...

    @abstractmethod
    async def get(self, site_id: str) -> Optional[CardData]:
        ...

    @abstractmethod
    async def create(self, owner_id: str, card: CardData) -> CardData:
        ...

    @abstractmethod
    async def update(self, site_id: str, card: CardData) -> CardData:
        ...

    @abstractmethod
    async def delete(self, site_id: str) -> None:
        ...

    @abstractmethod
    async def list_contacts(self, owner_id: str) -> List[ContactSubmission]:
        ...

    @abstractmethod
    async def delete_contact(self, contact_id: str) -> None:
        ...

    @abstractmethod
    async def analytics_for_site(self, site_id: str, limit: int = 30) -> List[AnalyticsDay]:
        ...

    def _require_owner(self, owner_id: str) -> str:
        resolved = (owner_id or "").strip()
        if not resolved:
            raise ValidationError("owner id is required")
        if resolved != self.user.id:
            raise AuthorizationError("Session is not valid for the requested owner")
        return resolved

    @staticmethod
    def _validate_card(card: CardData) -> None:
        if not (card.internal_name or "").strip():
            raise ValidationError("internal_name is required")


def contact_from_row(row: ContactRow) -> ContactSubmission:
    return ContactSubmission(
        id=row.id,
        name=row.name,
        email=row.email,
        phone=row.phone or "",
        message=row.message or "",
        submitted_at=row.created_at,
        source=row.site_name or "Unknown",
    )


def hydrate_sites(
    cards: Iterable[CardData],
    contacts: Iterable[ContactRow],
    days: Iterable[AnalyticsDay],
) -> List[CardData]:
    """Attach the contacts and analytics rollup held in their own tables.

    The contacts table is authoritative, so a deleted submission never
    reappears from an older payload. Sites without analytics rows keep the
    snapshot their payload carried.
    """
    contacts_by_site: dict[str, list[ContactSubmission]] = defaultdict(list)
    for row in contacts:
        contacts_by_site[row.site_id].append(contact_from_row(row))
    days_by_site: dict[str, list[AnalyticsDay]] = defaultdict(list)
    for day in days:
        days_by_site[day.site_id].append(day)

    hydrated: List[CardData] = []
    for card in cards:
        updates: dict = {"collected_contacts": contacts_by_site.get(card.id, [])}
        if card.id in days_by_site:
            updates["analytics"] = rollup_days(days_by_site[card.id])
        hydrated.append(card.model_copy(update=updates))
    return hydrated


__all__ = ["SiteStore", "contact_from_row", "hydrate_sites"]
