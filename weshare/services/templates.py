from __future__ import annotations

import uuid

from ..schemas.card import (
    AnalyticsSnapshot,
    BusinessHours,
    CardData,
    ContactFormConfig,
    DayHours,
    LinkItem,
    Profile,
    Theme,
)
from .auth import UserContext

# Stored values, not UI text: they are never localized.
UNTITLED_SITE_NAME = "New Untitled Site"
DEFAULT_PROFILE_NAME = "Your Name"
COPY_SUFFIX = "(Copy)"

_WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday")
_WEEKEND = ("saturday", "sunday")


def _link(title: str, url: str, icon: str) -> LinkItem:
    return LinkItem(id=uuid.uuid4().hex[:8], title=title, url=url, icon=icon)


def default_card(user: UserContext | None = None) -> CardData:
    """The starter site every new card is built from."""
    profile_name = (user.full_name if user else None) or DEFAULT_PROFILE_NAME
    return CardData(
        id="",
        internal_name=UNTITLED_SITE_NAME,
        profile=Profile(
            name=profile_name,
            bio="Welcome to my page! Here are all my links in one place.",
        ),
        links=[
            _link("My Website", "https://example.com", "globe"),
            _link("Instagram", "https://instagram.com", "instagram"),
            _link("LinkedIn", "https://linkedin.com", "linkedin"),
        ],
        business_hours=BusinessHours(
            enabled=False,
            days=[DayHours(day=day) for day in _WEEKDAYS]
            + [DayHours(day=day, closed=True) for day in _WEEKEND],
        ),
        contact_form=ContactFormConfig(enabled=True),
        analytics=AnalyticsSnapshot(),
        theme=Theme.LIGHT,
    )


__all__ = ["COPY_SUFFIX", "DEFAULT_PROFILE_NAME", "UNTITLED_SITE_NAME", "default_card"]
