from .analytics import AnalyticsSummary
from .api import (
    ContactListResponse,
    EventsResponse,
    SiteAnalyticsResponse,
    SiteListResponse,
    SiteResponse,
)
from .card import (
    AnalyticsSnapshot,
    BusinessHours,
    CardData,
    Company,
    ContactFormConfig,
    ContactSubmission,
    DayHours,
    LinkItem,
    Profile,
    QrStyle,
    ServiceItem,
    Theme,
    VideoBlock,
    compute_ctr,
)
from .wire import PAYLOAD_VERSION, AnalyticsDay, ContactRow, SiteRow

__all__ = [
    "AnalyticsDay",
    "AnalyticsSnapshot",
    "AnalyticsSummary",
    "BusinessHours",
    "CardData",
    "Company",
    "ContactFormConfig",
    "ContactListResponse",
    "ContactRow",
    "ContactSubmission",
    "DayHours",
    "EventsResponse",
    "LinkItem",
    "PAYLOAD_VERSION",
    "Profile",
    "QrStyle",
    "ServiceItem",
    "SiteAnalyticsResponse",
    "SiteListResponse",
    "SiteResponse",
    "SiteRow",
    "Theme",
    "VideoBlock",
    "compute_ctr",
]
