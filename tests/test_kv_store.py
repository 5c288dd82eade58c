"""Tests for the expiring key/value store and the subreddit-name cache."""

import datetime as dt

from kv_store import SUBREDDIT_NAME_KEY, KeyValueStore, get_subreddit_name


class Clock:
    def __init__(self):
        self.now = dt.datetime(2024, 1, 1, tzinfo=dt.timezone.utc)

    def __call__(self):
        return self.now


def test_set_get_and_expiry():
    clock = Clock()
    store = KeyValueStore(clock=clock)
    store.set("k", "v", expiration=clock.now + dt.timedelta(hours=1))
    assert store.get("k") == "v"
    clock.now += dt.timedelta(hours=2)
    assert store.get("k") is None


def test_no_expiration_keeps_value():
    store = KeyValueStore()
    store.set("k", "v")
    assert store.get("k") == "v"
    assert store.get("missing") is None


def test_file_backed_store_persists(tmp_path):
    path = str(tmp_path / "state" / "kv.json")
    KeyValueStore(path).set("k", "v")
    assert KeyValueStore(path).get("k") == "v"


def test_corrupt_state_file_is_a_miss(tmp_path):
    path = tmp_path / "kv.json"
    path.write_text("{not json", encoding="utf-8")
    assert KeyValueStore(str(path)).get("k") is None


def test_subreddit_name_cold_start_then_cached():
    clock = Clock()
    store = KeyValueStore(clock=clock)
    calls = []

    def lookup():
        calls.append(1)
        return "excel"

    assert get_subreddit_name(store, lookup) == "excel"
    assert get_subreddit_name(store, lookup) == "excel"
    assert len(calls) == 1

    clock.now += dt.timedelta(weeks=1, seconds=1)
    assert store.get(SUBREDDIT_NAME_KEY) is None
    assert get_subreddit_name(store, lookup) == "excel"
    assert len(calls) == 2
