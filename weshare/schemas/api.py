from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel

from .card import CardData, ContactSubmission
from .wire import AnalyticsDay


class SiteResponse(BaseModel):
    key: str
    sync_state: Optional[str] = None
    error: Optional[str] = None
    site: CardData


class SiteListResponse(BaseModel):
    sites: List[SiteResponse]
    total: int


class ContactListResponse(BaseModel):
    contacts: List[ContactSubmission]
    total: int


class SiteAnalyticsResponse(BaseModel):
    site_id: str
    days: List[AnalyticsDay]


class EventsResponse(BaseModel):
    events: List[dict[str, Any]]
    next_index: int


__all__ = [
    "ContactListResponse",
    "EventsResponse",
    "SiteAnalyticsResponse",
    "SiteListResponse",
    "SiteResponse",
]
