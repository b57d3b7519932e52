from enum import Enum


class EventType(str, Enum):
    SITES_LOADED = "sites_loaded"
    SITE_CREATED = "site_created"
    SITE_UPDATED = "site_updated"
    SITE_DELETED = "site_deleted"
    SYNC_STATE_CHANGED = "sync_state_changed"
    SYNC_FAILED = "sync_failed"
