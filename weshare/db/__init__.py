from .base import Base
from .database import Database, get_database, reset_database
from .migrations import init_db
from .models import AnalyticsRecord, ContactRecord, SiteRecord
from .utils import get_db, owned_record, transaction_scope

__all__ = [
    "Base",
    "Database",
    "get_database",
    "reset_database",
    "init_db",
    "SiteRecord",
    "ContactRecord",
    "AnalyticsRecord",
    "get_db",
    "owned_record",
    "transaction_scope",
]
