from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from .types import EventType


class BaseEvent(BaseModel):
    model_config = ConfigDict(extra="allow")
    type: EventType
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: Optional[str] = None
    event_id: Optional[str] = None
    payload: Dict[str, Any] = Field(default_factory=dict)


class SitesLoadedEvent(BaseEvent):
    type: EventType = EventType.SITES_LOADED
    count: int


class SiteCreatedEvent(BaseEvent):
    type: EventType = EventType.SITE_CREATED
    site_id: str
    internal_name: str
    duplicated_from: Optional[str] = None


class SiteUpdatedEvent(BaseEvent):
    type: EventType = EventType.SITE_UPDATED
    site_id: str


class SiteDeletedEvent(BaseEvent):
    type: EventType = EventType.SITE_DELETED
    site_id: str


class SyncStateChangedEvent(BaseEvent):
    type: EventType = EventType.SYNC_STATE_CHANGED
    site_key: str
    previous: Optional[str] = None
    state: str


class SyncFailedEvent(BaseEvent):
    type: EventType = EventType.SYNC_FAILED
    site_key: Optional[str] = None
    operation: str
    error_type: str
    message: str
    rolled_back: bool = False
