from weshare.events.emitter import EventEmitter
from weshare.events.models import SiteCreatedEvent, SyncFailedEvent


def test_emitter_stamps_events_and_pages_by_index() -> None:
    emitter = EventEmitter(user_id="user-1")
    emitter.emit(SiteCreatedEvent(site_id="site-1", internal_name="Portfolio"))
    emitter.emit(SyncFailedEvent(site_key="site-1", operation="update", error_type="BackendUnavailable", message="down"))

    events, index = emitter.events_since(0)
    assert index == 2
    assert [event.user_id for event in events] == ["user-1", "user-1"]
    assert all(event.event_id for event in events)

    payload = events[1].model_dump(mode="json")
    assert payload["type"] == "sync_failed"
    assert payload["rolled_back"] is False


def test_emitter_is_bounded() -> None:
    emitter = EventEmitter(max_events=2)
    for number in range(5):
        emitter.emit(SiteCreatedEvent(site_id=f"site-{number}", internal_name="x"))

    events, index = emitter.events_since(0)
    assert index == 5
    assert [event.site_id for event in events] == ["site-3", "site-4"]

    emitter.clear()
    assert emitter.get_events() == []
