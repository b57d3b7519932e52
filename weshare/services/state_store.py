from __future__ import annotations

import logging
import uuid
from typing import Callable, Iterable, Optional, Tuple

from ..schemas.card import CardData

logger = logging.getLogger(__name__)

LOCAL_KEY_PREFIX = "local:"

Listener = Callable[[Tuple[CardData, ...]], None]


def new_local_key() -> str:
    return f"{LOCAL_KEY_PREFIX}{uuid.uuid4().hex}"


def is_local_key(key: str) -> bool:
    return key.startswith(LOCAL_KEY_PREFIX)


class SiteStateStore:
    """Ordered in-memory sites for one session; what every view renders.

    Entries are keyed by site id. A record that has never been saved has an
    empty id and is held under a ``local:`` key until the backend assigns
    one. All mutations are synchronous and end with a notification carrying
    the new snapshot.
    """

    def __init__(self) -> None:
        self._keys: list[str] = []
        self._sites: dict[str, CardData] = {}
        self._listeners: list[Listener] = []

    @property
    def sites(self) -> Tuple[CardData, ...]:
        return tuple(self._sites[key] for key in self._keys)

    def keys(self) -> Tuple[str, ...]:
        return tuple(self._keys)

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, key: object) -> bool:
        return key in self._sites

    def get(self, key: str) -> Optional[CardData]:
        return self._sites.get(key)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def replace_all(self, sites: Iterable[CardData]) -> None:
        keys: list[str] = []
        resolved: dict[str, CardData] = {}
        for site in sites:
            key = site.id or new_local_key()
            if key in resolved:
                logger.warning("Dropping duplicate site %s from loaded sequence", key)
                continue
            keys.append(key)
            resolved[key] = site
        self._keys = keys
        self._sites = resolved
        self._notify()

    def upsert(self, site: CardData, key: Optional[str] = None) -> str:
        """Insert at the front if unseen, otherwise replace in place."""
        resolved_key = key or site.id
        if not resolved_key:
            raise ValueError("An unsaved site needs a local key to be stored")
        if resolved_key not in self._sites:
            self._keys.insert(0, resolved_key)
        self._sites[resolved_key] = site
        self._notify()
        return resolved_key

    def remove(self, key: str) -> Optional[CardData]:
        site = self._sites.pop(key, None)
        if site is None:
            return None
        self._keys.remove(key)
        self._notify()
        return site

    def replace_key(self, old_key: str, site: CardData) -> str:
        """Swap a local key for the server-assigned id, keeping position."""
        new_key = site.id
        if not new_key:
            raise ValueError("Replacement site must carry an id")
        if old_key not in self._sites:
            return self.upsert(site)
        index = self._keys.index(old_key)
        del self._sites[old_key]
        if new_key in self._sites:
            # the id was already present; keep the earlier slot
            self._keys.pop(index)
        else:
            self._keys[index] = new_key
        self._sites[new_key] = site
        self._notify()
        return new_key

    def restore(self, key: str, site: CardData, index: int) -> None:
        """Put a removed entry back at its former position."""
        if key in self._sites:
            self._sites[key] = site
        else:
            self._keys.insert(max(0, min(index, len(self._keys))), key)
            self._sites[key] = site
        self._notify()

    def index_of(self, key: str) -> int:
        return self._keys.index(key)

    def _notify(self) -> None:
        snapshot = self.sites
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("State store listener failed")


__all__ = ["LOCAL_KEY_PREFIX", "SiteStateStore", "is_local_key", "new_local_key"]
