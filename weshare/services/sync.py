"""Optimistic edit/sync controller for one user's sites.

Every user action is applied to the :class:`SiteStateStore` first and the
matching remote call is issued afterwards. Each site moves through a small
state machine::

    unsaved --create ok--> synced --edit--> dirty --update ok--> synced
       |                                      |
       +--create failed--> sync_failed <------+--update failed

Failures are logged, recorded as events and surfaced through the injected
``notify`` callback. Local state is not rolled back unless the controller is
built with ``rollback_on_failure=True``.

Overlapping updates for one site are not fenced. Only the outcome of the
call issued for the newest local edit decides the site's final state; the
local value itself is never replaced by a remote confirmation, so the view
always shows the edit that was applied last.
"""

from __future__ import annotations

import asyncio
import enum
import inspect
import itertools
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Coroutine, Optional, Union

from ..events.emitter import EventEmitter
from ..events.models import (
    SiteCreatedEvent,
    SiteDeletedEvent,
    SitesLoadedEvent,
    SiteUpdatedEvent,
    SyncFailedEvent,
    SyncStateChangedEvent,
)
from ..log import log_sync_transition
from ..schemas.card import CardData
from .auth import UserContext
from .errors import NotFoundError, SiteStoreError
from .i18n import Localizer
from .site_store import SiteStore
from .state_store import SiteStateStore, is_local_key, new_local_key
from .templates import COPY_SUFFIX, default_card

logger = logging.getLogger(__name__)

Confirm = Callable[[str], Union[bool, Awaitable[bool]]]
Notify = Callable[[str], Union[None, Awaitable[None]]]
BeforeAction = Callable[[], Union[None, Awaitable[None]]]


class SyncState(str, enum.Enum):
    UNSAVED = "unsaved"
    SYNCED = "synced"
    DIRTY = "dirty"
    SYNC_FAILED = "sync_failed"


ALLOWED_TRANSITIONS: dict[Optional[SyncState], set[SyncState]] = {
    None: {SyncState.UNSAVED, SyncState.SYNCED},
    SyncState.UNSAVED: {SyncState.UNSAVED, SyncState.SYNCED, SyncState.SYNC_FAILED},
    SyncState.SYNCED: {SyncState.DIRTY},
    SyncState.DIRTY: {SyncState.DIRTY, SyncState.SYNCED, SyncState.SYNC_FAILED},
    SyncState.SYNC_FAILED: {SyncState.DIRTY, SyncState.UNSAVED},
}


class SyncStateError(RuntimeError):
    pass


@dataclass
class SyncResult:
    key: str
    site: Optional[CardData]
    state: Optional[SyncState]
    error: Optional[SiteStoreError] = None
    confirmed: bool = True

    @property
    def ok(self) -> bool:
        return self.confirmed and self.error is None


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class SiteSyncController:
    def __init__(
        self,
        store: SiteStore,
        state: SiteStateStore,
        user: UserContext,
        *,
        localizer: Optional[Localizer] = None,
        confirm: Optional[Confirm] = None,
        notify: Optional[Notify] = None,
        events: Optional[EventEmitter] = None,
        rollback_on_failure: bool = False,
    ) -> None:
        self.store = store
        self.state = state
        self.user = user
        self.localizer = localizer or Localizer()
        self.events = events or EventEmitter(user_id=user.id)
        self.rollback_on_failure = rollback_on_failure
        self._confirm = confirm
        self._notify = notify

        self._states: dict[str, SyncState] = {}
        self._errors: dict[str, SiteStoreError] = {}
        # last value the backend acknowledged, per key
        self._confirmed: dict[str, CardData] = {}
        self._generations: dict[str, int] = {}
        # shared across keys and loads so a generation is never reused
        self._generation_seq = itertools.count(1)
        self._aliases: dict[str, str] = {}
        self._creating: set[str] = set()
        self._deferred: set[str] = set()
        self._tombstones: set[str] = set()
        self._tasks: set[asyncio.Task] = set()

    @property
    def sites(self) -> tuple[CardData, ...]:
        return self.state.sites

    def resolve_key(self, key: str) -> str:
        while key in self._aliases:
            key = self._aliases[key]
        return key

    def sync_state(self, key: str) -> Optional[SyncState]:
        return self._states.get(self.resolve_key(key))

    def last_error(self, key: str) -> Optional[SiteStoreError]:
        return self._errors.get(self.resolve_key(key))

    async def pending(self) -> None:
        """Wait for every persistence call issued so far."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    async def load(self) -> tuple[CardData, ...]:
        """Replace local state with the backend's list.

        Persistence calls still in flight are awaited first, and the list is
        fetched again if another call started while it was being read.
        """
        while True:
            await self.pending()
            try:
                sites = await self.store.list(self.user.id)
            except SiteStoreError as exc:
                await self._surface("load", None, exc)
                raise
            if not self._tasks:
                break
        self._states.clear()
        self._errors.clear()
        self._confirmed.clear()
        self._generations.clear()
        self._deferred.clear()
        self.state.replace_all(sites)
        for key, site in zip(self.state.keys(), self.state.sites):
            self._transition(key, SyncState.SYNCED)
            self._confirmed[key] = site
        self.events.emit(SitesLoadedEvent(count=len(self.state)))
        return self.state.sites

    async def create(self, *, wait: bool = True) -> SyncResult:
        card = default_card(self.user)
        return await self._create_from(card, operation="create", wait=wait)

    async def update(
        self,
        site: CardData,
        *,
        key: Optional[str] = None,
        wait: bool = True,
    ) -> SyncResult:
        resolved = self.resolve_key(key or site.id)
        if not resolved:
            raise ValueError("An unsaved site must be updated by its local key")
        if resolved not in self.state:
            return await self._missing("update", resolved)

        if is_local_key(resolved):
            self.state.upsert(site.model_copy(deep=True, update={"id": ""}), key=resolved)
            self._transition(resolved, SyncState.UNSAVED)
            if resolved in self._creating:
                self._deferred.add(resolved)
                return self._result(resolved)
            # the earlier create failed; retry it with the latest value
            error = await self._start_create(resolved, "create", wait)
            return self._result(resolved, error)

        value = site.model_copy(deep=True, update={"id": resolved})
        self.state.upsert(value)
        return await self._issue_update(resolved, value, wait=wait)

    async def duplicate(
        self,
        key: str,
        *,
        before_action: Optional[BeforeAction] = None,
        wait: bool = True,
    ) -> SyncResult:
        if before_action is not None:
            await _maybe_await(before_action())
        resolved = self.resolve_key(key)
        source = self.state.get(resolved)
        if source is None:
            return await self._missing("duplicate", resolved)
        copy = source.model_copy(
            deep=True,
            update={
                "id": "",
                "internal_name": f"{source.internal_name} {COPY_SUFFIX}",
                "profile": source.profile.model_copy(
                    update={"name": f"{source.profile.name} {COPY_SUFFIX}"}
                ),
            },
        )
        return await self._create_from(
            copy,
            operation="duplicate",
            wait=wait,
            source_key=resolved,
        )

    async def delete(
        self,
        key: str,
        *,
        before_action: Optional[BeforeAction] = None,
        wait: bool = True,
    ) -> SyncResult:
        if before_action is not None:
            await _maybe_await(before_action())
        resolved = self.resolve_key(key)
        site = self.state.get(resolved)
        if site is None:
            return await self._missing("delete", resolved)

        if not await self._ask(self.localizer.t("sites.confirm_delete")):
            return SyncResult(
                key=resolved,
                site=site,
                state=self._states.get(resolved),
                confirmed=False,
            )

        index = self.state.index_of(resolved)
        self.state.remove(resolved)
        if is_local_key(resolved):
            if resolved in self._creating:
                self._tombstones.add(resolved)
            else:
                self._forget(resolved)
            return SyncResult(key=resolved, site=None, state=None)

        error = await self._schedule(self._persist_delete(resolved, site, index), wait)
        return SyncResult(
            key=resolved,
            site=self.state.get(resolved),
            state=self._states.get(resolved),
            error=error,
        )

    async def _create_from(
        self,
        card: CardData,
        *,
        operation: str,
        wait: bool,
        source_key: Optional[str] = None,
    ) -> SyncResult:
        key = new_local_key()
        self.state.upsert(card.model_copy(update={"id": ""}), key=key)
        self._transition(key, SyncState.UNSAVED)
        error = await self._start_create(key, operation, wait, source_key)
        return self._result(key, error)

    async def _start_create(
        self,
        key: str,
        operation: str,
        wait: bool,
        source_key: Optional[str] = None,
    ) -> Optional[SiteStoreError]:
        # marked before scheduling so edits and deletes issued meanwhile wait for it
        self._creating.add(key)
        return await self._schedule(self._persist_create(key, operation, source_key), wait)

    async def _issue_update(self, key: str, value: CardData, *, wait: bool = True) -> SyncResult:
        generation = next(self._generation_seq)
        self._generations[key] = generation
        self._transition(key, SyncState.DIRTY)
        await self._schedule(self._persist_update(key, value, generation), wait)
        return self._result(key)

    async def _persist_create(
        self,
        key: str,
        operation: str,
        source_key: Optional[str],
    ) -> Optional[SiteStoreError]:
        site = self.state.get(key)
        if site is None:
            # removed locally before the call went out
            self._creating.discard(key)
            self._tombstones.discard(key)
            self._forget(key)
            return None
        try:
            created = await self.store.create(self.user.id, site)
        except SiteStoreError as exc:
            self._creating.discard(key)
            self._deferred.discard(key)
            if key in self._tombstones:
                self._tombstones.discard(key)
                self._forget(key)
                logger.info("Create for locally deleted site %s failed: %s", key, exc)
                return None
            rolled_back = False
            if self.rollback_on_failure:
                self.state.remove(key)
                self._forget(key)
                rolled_back = True
            else:
                self._transition(key, SyncState.SYNC_FAILED)
            await self._surface(operation, key, exc, rolled_back=rolled_back)
            return exc

        self._creating.discard(key)
        if key in self._tombstones:
            self._tombstones.discard(key)
            self._forget(key)
            await self._persist_delete(created.id, created, None)
            return None

        local = self.state.get(key) or site
        new_key = self.state.replace_key(key, local.model_copy(update={"id": created.id}))
        self._rekey(key, new_key)
        self._confirmed[new_key] = created
        self._errors.pop(new_key, None)
        if self._states.get(new_key) is not SyncState.SYNCED:
            # a load may already have picked the new row up as synced
            self._transition(new_key, SyncState.SYNCED)
        self.events.emit(
            SiteCreatedEvent(
                site_id=new_key,
                internal_name=created.internal_name,
                duplicated_from=source_key,
            )
        )
        if key in self._deferred:
            self._deferred.discard(key)
            latest = self.state.get(new_key)
            if latest is not None:
                await self._issue_update(new_key, latest)
        return None

    async def _persist_update(self, key: str, value: CardData, generation: int) -> None:
        try:
            saved = await self.store.update(key, value)
        except SiteStoreError as exc:
            latest = self._generations.get(key) == generation
            rolled_back = False
            if latest and key in self.state:
                if self.rollback_on_failure and key in self._confirmed:
                    self.state.upsert(self._confirmed[key])
                    self._transition(key, SyncState.SYNCED)
                    rolled_back = True
                else:
                    self._transition(key, SyncState.SYNC_FAILED)
            await self._surface("update", key, exc, rolled_back=rolled_back)
            return

        if key not in self.state:
            return
        self._confirmed[key] = saved
        if self._generations.get(key) != generation:
            # a newer local edit has its own call in flight
            return
        self._errors.pop(key, None)
        self._transition(key, SyncState.SYNCED)
        self.events.emit(SiteUpdatedEvent(site_id=key))

    async def _persist_delete(
        self,
        site_id: str,
        site: CardData,
        index: Optional[int],
    ) -> Optional[SiteStoreError]:
        try:
            await self.store.delete(site_id)
        except SiteStoreError as exc:
            rolled_back = False
            if self.rollback_on_failure and index is not None:
                self.state.restore(site_id, site, index)
                rolled_back = True
            else:
                self._forget(site_id)
            await self._surface("delete", site_id, exc, rolled_back=rolled_back)
            return exc
        self._forget(site_id)
        self.events.emit(SiteDeletedEvent(site_id=site_id))
        return None

    async def _schedule(self, coro: Coroutine[Any, Any, Any], wait: bool) -> Any:
        """Run a persistence call as a tracked task, awaiting it when ``wait``."""
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        if wait:
            return await task
        return None

    async def _ask(self, prompt: str) -> bool:
        if self._confirm is None:
            return False
        return bool(await _maybe_await(self._confirm(prompt)))

    async def _missing(self, operation: str, key: str) -> SyncResult:
        exc = NotFoundError(f"Site not found: {key}")
        await self._surface(operation, None, exc)
        return SyncResult(key=key, site=None, state=None, error=exc)

    async def _surface(
        self,
        operation: str,
        key: Optional[str],
        exc: SiteStoreError,
        *,
        rolled_back: bool = False,
    ) -> None:
        logger.error(
            "Failed to %s site %s (rolled back: %s)",
            operation,
            key or "-",
            rolled_back,
            exc_info=exc,
        )
        if key is not None and key in self.state:
            self._errors[key] = exc
        self.events.emit(
            SyncFailedEvent(
                site_key=key,
                operation=operation,
                error_type=type(exc).__name__,
                message=str(exc),
                rolled_back=rolled_back,
            )
        )
        if self._notify is not None:
            message_key = "errors.not_found" if isinstance(exc, NotFoundError) and key is None else f"errors.{operation}"
            await _maybe_await(self._notify(self.localizer.t(message_key)))

    def _transition(self, key: str, new_state: SyncState) -> None:
        previous = self._states.get(key)
        if new_state not in ALLOWED_TRANSITIONS.get(previous, set()):
            raise SyncStateError(
                f"Invalid sync transition for {key}: {getattr(previous, 'value', previous)} -> {new_state.value}"
            )
        self._states[key] = new_state
        log_sync_transition(key, previous.value if previous else None, new_state.value)
        if previous != new_state:
            self.events.emit(
                SyncStateChangedEvent(
                    site_key=key,
                    previous=previous.value if previous else None,
                    state=new_state.value,
                )
            )

    def _rekey(self, old_key: str, new_key: str) -> None:
        for mapping in (self._states, self._errors, self._generations, self._confirmed):
            if old_key in mapping:
                mapping[new_key] = mapping.pop(old_key)
        self._aliases[old_key] = new_key

    def _forget(self, key: str) -> None:
        for mapping in (self._states, self._errors, self._generations, self._confirmed):
            mapping.pop(key, None)
        self._deferred.discard(key)

    def _result(self, key: str, error: Optional[SiteStoreError] = None) -> SyncResult:
        resolved = self.resolve_key(key)
        return SyncResult(
            key=resolved,
            site=self.state.get(resolved),
            state=self._states.get(resolved),
            # a rolled-back key is no longer tracked; fall back to the call's own error
            error=self._errors.get(resolved) or error,
        )


__all__ = [
    "ALLOWED_TRANSITIONS",
    "SiteSyncController",
    "SyncResult",
    "SyncState",
    "SyncStateError",
]
