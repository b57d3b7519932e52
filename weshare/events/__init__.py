from .emitter import EventEmitter, EventUnion
from .models import (
    BaseEvent,
    SiteCreatedEvent,
    SiteDeletedEvent,
    SitesLoadedEvent,
    SiteUpdatedEvent,
    SyncFailedEvent,
    SyncStateChangedEvent,
)
from .types import EventType

__all__ = [
    "EventEmitter",
    "EventUnion",
    "EventType",
    "BaseEvent",
    "SitesLoadedEvent",
    "SiteCreatedEvent",
    "SiteUpdatedEvent",
    "SiteDeletedEvent",
    "SyncStateChangedEvent",
    "SyncFailedEvent",
]
