from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import List, Union

from .models import (
    SiteCreatedEvent,
    SiteDeletedEvent,
    SitesLoadedEvent,
    SiteUpdatedEvent,
    SyncFailedEvent,
    SyncStateChangedEvent,
)

logger = logging.getLogger(__name__)

EventUnion = Union[
    SitesLoadedEvent,
    SiteCreatedEvent,
    SiteUpdatedEvent,
    SiteDeletedEvent,
    SyncStateChangedEvent,
    SyncFailedEvent,
]


class EventEmitter:
    def __init__(
        self,
        *,
        user_id: str | None = None,
        max_events: int | None = 2000,
    ) -> None:
        self._events: List[EventUnion] = []
        self._offset = 0
        self.user_id = user_id
        self._max_events = max_events

    def emit(self, event: EventUnion) -> None:
        """Emit an event."""
        if getattr(event, "user_id", None) is None and self.user_id:
            event.user_id = self.user_id
        if getattr(event, "event_id", None) is None:
            event.event_id = uuid.uuid4().hex
        if not event.timestamp:
            event.timestamp = datetime.now(timezone.utc)
        self._events.append(event)
        if self._max_events is not None and len(self._events) > self._max_events:
            overflow = len(self._events) - self._max_events
            if overflow > 0:
                del self._events[:overflow]
                self._offset += overflow
        logger.debug("Event emitted: %s", getattr(event.type, "value", event.type))

    def get_events(self) -> List[EventUnion]:
        """Get all retained events."""
        return list(self._events)

    def clear(self) -> None:
        self._events.clear()
        self._offset = 0

    def events_since(self, index: int) -> tuple[List[EventUnion], int]:
        """Return events since the given index and the new index."""
        if index < 0:
            index = 0
        if index < self._offset:
            index = self._offset
        relative = index - self._offset
        if relative >= len(self._events):
            return [], self._offset + len(self._events)
        return self._events[relative:], self._offset + len(self._events)
