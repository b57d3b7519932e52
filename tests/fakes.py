from __future__ import annotations

import asyncio
from typing import Dict, List, Optional

from weshare.schemas.card import CardData, ContactSubmission
from weshare.schemas.wire import AnalyticsDay
from weshare.services.auth import UserContext
from weshare.services.errors import NotFoundError, SiteStoreError
from weshare.services.site_store import SiteStore


class InMemorySiteStore(SiteStore):
    """Test double recording every call; calls can be failed or held open."""

    backend_name = "memory"

    def __init__(self, user: UserContext) -> None:
        super().__init__(user)
        self.rows: Dict[str, CardData] = {}
        self.order: List[str] = []
        self.calls: List[tuple] = []
        self.failures: Dict[str, List[SiteStoreError]] = {}
        self.gated: set[str] = set()
        self.waiting: List[tuple[str, asyncio.Future]] = []
        self._counter = 0

    def seed(self, card: CardData) -> CardData:
        self._counter += 1
        site_id = card.id or f"site-{self._counter}"
        stored = card.model_copy(deep=True, update={"id": site_id})
        self.rows[site_id] = stored
        self.order.insert(0, site_id)
        return stored

    def fail_next(self, operation: str, exc: SiteStoreError) -> None:
        self.failures.setdefault(operation, []).append(exc)

    def release(self, index: int = 0, outcome: Optional[Exception] = None) -> None:
        _, future = self.waiting.pop(index)
        future.set_result(outcome)

    async def wait_for_calls(self, count: int) -> None:
        while len(self.waiting) < count:
            await asyncio.sleep(0)

    async def _enter(self, operation: str, *args) -> None:
        self.calls.append((operation, *args))
        if operation in self.gated:
            future = asyncio.get_running_loop().create_future()
            self.waiting.append((operation, future))
            outcome = await future
            if isinstance(outcome, Exception):
                raise outcome
        pending = self.failures.get(operation)
        if pending:
            raise pending.pop(0)

    async def list(self, owner_id: str) -> List[CardData]:
        self._require_owner(owner_id)
        await self._enter("list", owner_id)
        return [self.rows[key].model_copy(deep=True) for key in self.order]

    async def get(self, site_id: str) -> Optional[CardData]:
        await self._enter("get", site_id)
        row = self.rows.get(site_id)
        return row.model_copy(deep=True) if row else None

    async def create(self, owner_id: str, card: CardData) -> CardData:
        self._require_owner(owner_id)
        self._validate_card(card)
        await self._enter("create", card.id, card.internal_name)
        return self.seed(card.model_copy(update={"id": ""}))

    async def update(self, site_id: str, card: CardData) -> CardData:
        self._validate_card(card)
        await self._enter("update", site_id, card.profile.name)
        if site_id not in self.rows:
            raise NotFoundError(f"Site not found: {site_id}")
        self.rows[site_id] = card.model_copy(deep=True, update={"id": site_id})
        return self.rows[site_id].model_copy(deep=True)

    async def delete(self, site_id: str) -> None:
        await self._enter("delete", site_id)
        if site_id not in self.rows:
            raise NotFoundError(f"Site not found: {site_id}")
        del self.rows[site_id]
        self.order.remove(site_id)

    async def list_contacts(self, owner_id: str) -> List[ContactSubmission]:
        self._require_owner(owner_id)
        await self._enter("list_contacts", owner_id)
        return [
            contact.model_copy(update={"source": self.rows[key].internal_name})
            for key in self.order
            for contact in self.rows[key].collected_contacts
        ]

    async def delete_contact(self, contact_id: str) -> None:
        await self._enter("delete_contact", contact_id)

    async def analytics_for_site(self, site_id: str, limit: int = 30) -> List[AnalyticsDay]:
        await self._enter("analytics_for_site", site_id)
        return []

    def operations(self) -> List[str]:
        return [call[0] for call in self.calls]


__all__ = ["InMemorySiteStore"]
