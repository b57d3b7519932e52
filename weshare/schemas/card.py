from __future__ import annotations

import enum
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

_HEX_COLOR_LENGTHS = {4, 7}


class Theme(str, enum.Enum):
    LIGHT = "light"
    DARK = "dark"
    GRADIENT = "gradient"
    MINIMAL = "minimal"
    CUSTOM = "custom"


class Profile(BaseModel):
    name: str = ""
    bio: str = ""
    avatar_url: Optional[str] = None
    job_title: str = ""


class Company(BaseModel):
    name: str = ""
    role: str = ""
    website: Optional[str] = None
    logo_url: Optional[str] = None


class LinkItem(BaseModel):
    id: str
    title: str = ""
    url: str = ""
    icon: Optional[str] = None
    enabled: bool = True


class ServiceItem(BaseModel):
    id: str
    title: str = ""
    description: str = ""
    url: Optional[str] = None
    image_url: Optional[str] = None


class VideoBlock(BaseModel):
    url: str
    title: str = ""


class DayHours(BaseModel):
    day: str
    open: str = "09:00"
    close: str = "17:00"
    closed: bool = False


class BusinessHours(BaseModel):
    enabled: bool = False
    timezone: Optional[str] = None
    days: List[DayHours] = Field(default_factory=list)


class ContactFormConfig(BaseModel):
    enabled: bool = False
    title: str = "Get in touch"
    button_label: str = "Send"
    collect_phone: bool = True
    collect_message: bool = True
    success_message: str = "Thanks! We'll be in touch."


class ContactSubmission(BaseModel):
    id: str
    name: str
    email: str
    phone: str = ""
    message: str = ""
    submitted_at: datetime
    source: Optional[str] = None


class AnalyticsSnapshot(BaseModel):
    views: int = 0
    clicks: int = 0
    saves: int = 0
    ctr: Optional[float] = None

    @model_validator(mode="after")
    def derive_ctr(self) -> "AnalyticsSnapshot":
        if self.ctr is None:
            self.ctr = compute_ctr(self.views, self.clicks)
        return self


class QrStyle(BaseModel):
    show_logo: bool = False
    rounded: bool = False
    dark_color: str = "#0f172a"
    light_color: str = "#ffffff"


class CardData(BaseModel):
    """One user's shareable link-in-bio site."""

    model_config = ConfigDict(extra="ignore")

    id: str = ""
    internal_name: str = ""
    profile: Profile = Field(default_factory=Profile)
    company: Company = Field(default_factory=Company)
    links: List[LinkItem] = Field(default_factory=list)
    services: List[ServiceItem] = Field(default_factory=list)
    video: Optional[VideoBlock] = None
    business_hours: BusinessHours = Field(default_factory=BusinessHours)
    contact_form: ContactFormConfig = Field(default_factory=ContactFormConfig)
    collected_contacts: List[ContactSubmission] = Field(default_factory=list)
    analytics: Optional[AnalyticsSnapshot] = None
    theme: Theme = Theme.LIGHT
    custom_color: Optional[str] = None
    font: str = "inter"
    qr: QrStyle = Field(default_factory=QrStyle)
    is_published: bool = True

    @field_validator("custom_color")
    @classmethod
    def validate_custom_color(cls, value: Optional[str]) -> Optional[str]:
        if value is None or value == "":
            return None
        resolved = value.strip()
        if not resolved.startswith("#") or len(resolved) not in _HEX_COLOR_LENGTHS:
            raise ValueError(f"custom_color must be a hex color, got {value!r}")
        try:
            int(resolved[1:], 16)
        except ValueError as exc:
            raise ValueError(f"custom_color must be a hex color, got {value!r}") from exc
        return resolved.lower()

    @property
    def is_saved(self) -> bool:
        return bool(self.id)


def compute_ctr(views: int, clicks: int) -> float:
    if not views:
        return 0.0
    return round(clicks / views * 100, 1)


__all__ = [
    "AnalyticsSnapshot",
    "BusinessHours",
    "CardData",
    "Company",
    "ContactFormConfig",
    "ContactSubmission",
    "DayHours",
    "LinkItem",
    "Profile",
    "QrStyle",
    "ServiceItem",
    "Theme",
    "VideoBlock",
    "compute_ctr",
]
