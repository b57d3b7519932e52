import random

import pytest

from weshare.schemas.card import CardData
from weshare.services.state_store import SiteStateStore, is_local_key, new_local_key


def _site(site_id: str, name: str = "Site") -> CardData:
    return CardData(id=site_id, internal_name=name)


def test_upsert_inserts_at_front_then_replaces_in_place() -> None:
    store = SiteStateStore()
    store.replace_all([_site("a"), _site("b")])

    store.upsert(_site("c"))
    assert store.keys() == ("c", "a", "b")

    store.upsert(_site("a", "Renamed"))
    assert store.keys() == ("c", "a", "b")
    assert store.get("a").internal_name == "Renamed"
    assert len(store) == 3


def test_replace_all_drops_duplicate_ids() -> None:
    store = SiteStateStore()
    store.replace_all([_site("a", "first"), _site("a", "second"), _site("b")])

    assert store.keys() == ("a", "b")
    assert store.get("a").internal_name == "first"


def test_unsaved_site_needs_local_key() -> None:
    store = SiteStateStore()
    with pytest.raises(ValueError):
        store.upsert(CardData(internal_name="Draft"))

    key = store.upsert(CardData(internal_name="Draft"), key=new_local_key())
    assert is_local_key(key)
    assert store.get(key).id == ""


def test_replace_key_keeps_position() -> None:
    store = SiteStateStore()
    store.replace_all([_site("a"), _site("b")])
    local = store.upsert(CardData(internal_name="Draft"), key=new_local_key())
    store.upsert(_site("c"))

    new_key = store.replace_key(local, _site("server-1", "Draft"))

    assert new_key == "server-1"
    assert store.keys() == ("c", "server-1", "a", "b")
    assert local not in store


def test_restore_and_remove() -> None:
    store = SiteStateStore()
    store.replace_all([_site("a"), _site("b"), _site("c")])
    index = store.index_of("b")
    removed = store.remove("b")

    assert store.keys() == ("a", "c")
    assert store.remove("missing") is None

    store.restore("b", removed, index)
    assert store.keys() == ("a", "b", "c")


def test_subscribe_and_unsubscribe() -> None:
    store = SiteStateStore()
    seen = []
    unsubscribe = store.subscribe(lambda sites: seen.append(len(sites)))

    store.upsert(_site("a"))
    unsubscribe()
    store.upsert(_site("b"))

    assert seen == [1]


def test_failing_listener_does_not_block_others() -> None:
    store = SiteStateStore()
    seen = []

    def broken(_sites) -> None:
        raise RuntimeError("boom")

    store.subscribe(broken)
    store.subscribe(lambda sites: seen.append(len(sites)))
    store.upsert(_site("a"))

    assert seen == [1]


def _assert_consistent(store: SiteStateStore) -> None:
    keys = store.keys()
    assert len(set(keys)) == len(keys) == len(store.sites)
    for key, site in zip(keys, store.sites):
        if is_local_key(key):
            assert site.id == ""
        else:
            assert site.id == key


def test_mixed_mutations_keep_keys_unique() -> None:
    rng = random.Random(20240301)
    store = SiteStateStore()
    store.replace_all([_site(f"site-{index}") for index in range(3)])
    ids = [f"site-{index}" for index in range(8)]

    for step in range(300):
        action = rng.choice(["upsert", "upsert_local", "remove", "replace_key"])
        if action == "upsert":
            store.upsert(_site(rng.choice(ids), f"step {step}"))
        elif action == "upsert_local":
            store.upsert(CardData(id="", internal_name=f"draft {step}"), key=new_local_key())
        elif action == "remove" and len(store):
            store.remove(rng.choice(store.keys()))
        elif action == "replace_key":
            local_keys = [key for key in store.keys() if is_local_key(key)]
            if local_keys:
                store.replace_key(rng.choice(local_keys), _site(rng.choice(ids), f"saved {step}"))
        _assert_consistent(store)


def test_replace_key_onto_existing_id_keeps_one_entry() -> None:
    store = SiteStateStore()
    store.replace_all([_site("a"), _site("b")])
    local = store.upsert(CardData(id=""), key=new_local_key())

    assert store.replace_key(local, _site("b", "confirmed")) == "b"
    assert store.keys() == ("a", "b")
    assert store.get("b").internal_name == "confirmed"
    _assert_consistent(store)
