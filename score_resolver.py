# score_resolver.py
# Reputation score from user flair (e.g. "152" -> 152).
# Flair is free text set by mods and other bots, so nothing here may raise.

from __future__ import annotations
import re
from typing import Optional

_LEADING_INT = re.compile(r"^\s*([+-]?[0-9]+)")

def resolve_score(flair_text: Optional[str]) -> int:
    """
    Absent / empty / "-" -> 0.
    Otherwise the leading base-10 integer of the flair ("120 points" -> 120);
    anything non-numeric -> 0.
    """
    if not flair_text or flair_text == "-":
        return 0
    m = _LEADING_INT.match(str(flair_text))
    if not m:
        return 0
    return int(m.group(1))

def fetch_user_flair(reddit, subreddit_name: str, username: str) -> Optional[str]:
    # subreddit.flair(redditor=...) yields at most one {"user","flair_text","flair_css_class"}
    sub = reddit.subreddit(subreddit_name)
    for row in sub.flair(redditor=username):
        return (row or {}).get("flair_text")
    return None

def current_score(reddit, subreddit_name: str, username: str) -> int:
    return resolve_score(fetch_user_flair(reddit, subreddit_name, username))
