from .analytics import router as analytics_router
from .contacts import router as contacts_router
from .events import router as events_router
from .session import router as session_router
from .sites import router as sites_router

__all__ = [
    "analytics_router",
    "contacts_router",
    "events_router",
    "session_router",
    "sites_router",
]
