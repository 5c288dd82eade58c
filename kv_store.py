# kv_store.py
# Tiny JSON-file key/value store with per-key expiry.
# Only holds slow-changing values (the subreddit name); concurrent runners may both
# write the same key, last write wins.

from __future__ import annotations
import datetime as dt
import json
import os
from typing import Any, Callable, Dict, Optional

SUBREDDIT_NAME_KEY = "subredditname"
SUBREDDIT_NAME_TTL = dt.timedelta(weeks=1)

def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)

def ensure_dir(path: str):
    d = os.path.dirname(path)
    if d:
        os.makedirs(d, exist_ok=True)


class KeyValueStore:
    """
    {"keys": {"<key>": {"value": "...", "expires": <epoch seconds>|null}}}
    path=None keeps everything in memory (tests, --no-state runs).
    """

    def __init__(self, path: Optional[str] = None, clock: Callable[[], dt.datetime] = utcnow):
        self.path = path
        self._clock = clock
        self._mem: Dict[str, Any] = {"keys": {}}

    def _load(self) -> Dict[str, Any]:
        if not self.path:
            return self._mem
        if not os.path.exists(self.path):
            return {"keys": {}}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError):
            return {"keys": {}}
        if not isinstance(data, dict) or not isinstance(data.get("keys"), dict):
            return {"keys": {}}
        return data

    def _save(self, data: Dict[str, Any]):
        if not self.path:
            self._mem = data
            return
        ensure_dir(self.path)
        tmp = self.path + ".tmp"
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False)
        os.replace(tmp, self.path)

    def now(self) -> dt.datetime:
        return self._clock()

    def get(self, key: str) -> Optional[str]:
        entry = self._load()["keys"].get(key)
        if not isinstance(entry, dict):
            return None
        expires = entry.get("expires")
        if expires is not None and expires <= self._clock().timestamp():
            return None
        return entry.get("value")

    def set(self, key: str, value: str, expiration: Optional[dt.datetime] = None):
        data = self._load()
        data["keys"][key] = {
            "value": value,
            "expires": expiration.timestamp() if expiration else None,
        }
        self._gc(data)
        self._save(data)

    def _gc(self, data: Dict[str, Any]):
        """Drop expired entries so the file does not grow forever."""
        now = self._clock().timestamp()
        keys = data.get("keys", {})
        stale = [k for k, e in keys.items()
                 if isinstance(e, dict) and e.get("expires") is not None and e["expires"] <= now]
        for k in stale:
            keys.pop(k, None)


def get_subreddit_name(store: KeyValueStore, live_lookup: Callable[[], str]) -> str:
    """Read-through cache: cold start / expired -> live lookup, then repopulate for a week."""
    name = store.get(SUBREDDIT_NAME_KEY)
    if name:
        return name
    name = live_lookup()
    store.set(SUBREDDIT_NAME_KEY, name, expiration=store.now() + SUBREDDIT_NAME_TTL)
    return name
