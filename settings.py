# settings.py
# config.yaml -> RuleRemovalSettings.
# Re-read on every event: mods edit config.yaml while the bot is running.
#
# config.yaml (all keys optional):
#   subreddit: excel
#   state_file: state/kv.json
#   rule_removal:
#     enabled: true
#     points_threshold: "100"        # 0 = disabled
#     allow_list: "userA, userB"
#     comment_prefix: "!rule"
#     rule_prefix: "R"
#     skip_approved_posts: false
#     enhanced_logging: true
#     wiki_page: toolbox
#     ignore_authors: [AutoModerator]

from __future__ import annotations
import os
from dataclasses import dataclass, field
from typing import Any, FrozenSet, Tuple

import yaml

_DEFAULTS = {
    "rule_removal": {
        "enabled": True,
        "points_threshold": "100",
        "allow_list": "",
        "comment_prefix": "!rule",
        "rule_prefix": "R",
        "skip_approved_posts": False,
        "enhanced_logging": True,
        "wiki_page": "toolbox",
        "ignore_authors": ["AutoModerator"],
    },
    "state_file": os.path.join("state", "kv.json"),
}

def load_config(path: str) -> dict:
    if not os.path.exists(path):
        raise FileNotFoundError(f"config.yaml not found at: {path}")
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}

def _cfg_get(cfg, path, default):
    cur = cfg or {}
    for key in path.split("."):
        if not isinstance(cur, dict) or key not in cur:
            return default
        cur = cur[key]
    return cur

def _as_bool(v: Any, default: bool) -> bool:
    if v is None:
        return default
    if isinstance(v, bool):
        return v
    s = str(v).strip().lower()
    if s in ("1", "true", "yes", "on"):
        return True
    if s in ("0", "false", "no", "off", ""):
        return False
    return default

def _as_threshold(v: Any) -> int:
    # Stored as a string in the settings form; junk or negatives disable the points path.
    try:
        n = int(str(v).strip())
    except (TypeError, ValueError):
        return 0
    return n if n > 0 else 0

def _as_prefix(v: Any, default: str) -> str:
    # A blank prefix would match every comment in the subreddit
    s = "" if v is None else str(v).strip()
    return s or default

def parse_allow_list(raw: Any) -> FrozenSet[str]:
    if not raw:
        return frozenset()
    if isinstance(raw, (list, tuple, set)):
        items = raw
    else:
        items = str(raw).split(",")
    return frozenset(u for u in (str(x).strip().lower() for x in items) if u)


@dataclass(frozen=True)
class RuleRemovalSettings:
    enabled: bool = True
    points_threshold: int = 100
    allow_list: FrozenSet[str] = field(default_factory=frozenset)
    comment_prefix: str = "!rule"
    rule_prefix: str = "R"
    skip_approved_posts: bool = False
    enhanced_logging: bool = True
    wiki_page: str = "toolbox"
    ignore_authors: Tuple[str, ...] = ("AutoModerator",)

    @classmethod
    def from_config(cls, cfg: dict) -> "RuleRemovalSettings":
        d = _DEFAULTS["rule_removal"]

        def get(key):
            return _cfg_get(cfg, "rule_removal." + key, d[key])

        ignore = get("ignore_authors") or []
        if isinstance(ignore, str):
            ignore = [ignore]

        return cls(
            enabled=_as_bool(get("enabled"), d["enabled"]),
            points_threshold=_as_threshold(get("points_threshold")),
            allow_list=parse_allow_list(get("allow_list")),
            comment_prefix=_as_prefix(get("comment_prefix"), d["comment_prefix"]),
            rule_prefix=str(d["rule_prefix"] if get("rule_prefix") is None else get("rule_prefix")),
            skip_approved_posts=_as_bool(get("skip_approved_posts"), d["skip_approved_posts"]),
            enhanced_logging=_as_bool(get("enhanced_logging"), d["enhanced_logging"]),
            wiki_page=str(get("wiki_page") or d["wiki_page"]),
            ignore_authors=tuple(str(a) for a in ignore),
        )

def load_settings(path: str) -> RuleRemovalSettings:
    return RuleRemovalSettings.from_config(load_config(path))

def state_file_from_config(cfg: dict) -> str:
    return str(_cfg_get(cfg, "state_file", _DEFAULTS["state_file"]) or _DEFAULTS["state_file"])
