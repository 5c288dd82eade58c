# reddit_helpers.py
# Thin PRAW wrappers used by the rule removal pipeline.
# No exception handling here: API failures go up to the caller.

from __future__ import annotations
from typing import Optional
from urllib.parse import urljoin

REDDIT_BASE = "https://www.reddit.com"

def comment_link(permalink: Optional[str]) -> str:
    """PM-friendly absolute link for a comment permalink (PRAW gives "/r/sub/comments/...")."""
    if not permalink:
        return REDDIT_BASE
    s = str(permalink)
    if s.startswith(("http://", "https://")):
        return s
    return urljoin(REDDIT_BASE + "/", s.lstrip("/"))

def is_moderator(reddit, subreddit_name: str, username: str) -> bool:
    mods = reddit.subreddit(subreddit_name).moderator(redditor=username)
    return len(list(mods or [])) > 0

def fetch_wiki_page(reddit, subreddit_name: str, page: str) -> str:
    return reddit.subreddit(subreddit_name).wiki[page].content_md

def is_approved(submission) -> bool:
    # "approved" is only populated for moderators; approved_by is the older field
    return bool(getattr(submission, "approved", False) or getattr(submission, "approved_by", None))

def has_stickied_comment(submission) -> bool:
    submission.comments.replace_more(limit=0)
    for c in submission.comments.list():
        if getattr(c, "stickied", False):
            return True
    return False

def send_private_message(reddit, username: str, subject: str, body: str):
    reddit.redditor(username).message(subject=subject, message=body)

def sticky_and_lock(comment):
    """Distinguish as a sticky + lock a freshly created comment (independent, order irrelevant)."""
    comment.mod.distinguish(how="yes", sticky=True)
    comment.mod.lock()
