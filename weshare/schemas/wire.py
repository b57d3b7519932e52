from __future__ import annotations

import datetime as dt
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict

PAYLOAD_VERSION = 1


class SiteRow(BaseModel):
    """Row of the ``sites`` table as exchanged with the backend."""

    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    user_id: str = ""
    internal_name: str
    data: Union[str, Dict[str, Any]]
    is_published: bool = True
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None

    def to_insert(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "internal_name": self.internal_name,
            "data": self.data,
            "is_published": self.is_published,
        }

    def to_update(self) -> Dict[str, Any]:
        return {
            "internal_name": self.internal_name,
            "data": self.data,
            "is_published": self.is_published,
        }


class ContactRow(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    site_id: str
    user_id: Optional[str] = None
    name: str
    email: str
    phone: Optional[str] = None
    message: Optional[str] = None
    created_at: dt.datetime
    site_name: Optional[str] = None


class AnalyticsDay(BaseModel):
    """Per-site, per-day counters from the ``analytics`` table."""

    model_config = ConfigDict(extra="ignore")

    site_id: str
    date: dt.date
    views: int = 0
    clicks: int = 0
    saves: int = 0


__all__ = ["PAYLOAD_VERSION", "AnalyticsDay", "ContactRow", "SiteRow"]
