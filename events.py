# events.py
# Immutable snapshot of one "new comment" trigger, built from a streamed PRAW comment.

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class CommentRef:
    id: str
    body: str = ""
    author_name: str = ""
    permalink: str = ""
    removed: bool = False


@dataclass(frozen=True)
class PostRef:
    id: str
    approved: Optional[bool] = None
    removed: Optional[bool] = None


@dataclass(frozen=True)
class AuthorRef:
    id: str
    name: str


@dataclass(frozen=True)
class SubredditRef:
    id: str
    name: str


@dataclass(frozen=True)
class ModerationEvent:
    comment: Optional[CommentRef] = None
    post: Optional[PostRef] = None
    author: Optional[AuthorRef] = None
    subreddit: Optional[SubredditRef] = None

    def is_complete(self) -> bool:
        return bool(self.comment and self.post and self.author and self.subreddit)


def strip_fullname(fullname: Optional[str]) -> Optional[str]:
    # "t2_abc" -> "abc"; plain ids pass through
    if not fullname:
        return None
    s = str(fullname)
    if len(s) > 3 and s[0] == "t" and s[1].isdigit() and s[2] == "_":
        return s[3:]
    return s

def event_from_comment(comment) -> ModerationEvent:
    """
    Only reads attributes already present in stream payloads (no lazy fetches).
    Deleted authors / missing link ids leave the matching ref as None.
    """
    cid = getattr(comment, "id", None)
    comment_ref = None
    if cid:
        author_obj = getattr(comment, "author", None)
        comment_ref = CommentRef(
            id=str(cid),
            body=getattr(comment, "body", "") or "",
            author_name=getattr(author_obj, "name", "") or "",
            permalink=getattr(comment, "permalink", "") or "",
            removed=bool(getattr(comment, "removed", False)),
        )

    post_id = strip_fullname(getattr(comment, "link_id", None))
    post_ref = PostRef(id=post_id) if post_id else None

    author_obj = getattr(comment, "author", None)
    author_id = strip_fullname(getattr(comment, "author_fullname", None))
    author_name = getattr(author_obj, "name", None)
    author_ref = AuthorRef(id=author_id, name=author_name) if (author_id and author_name) else None

    sub_id = strip_fullname(getattr(comment, "subreddit_id", None))
    sub_name = getattr(getattr(comment, "subreddit", None), "display_name", None)
    sub_ref = SubredditRef(id=sub_id, name=str(sub_name)) if (sub_id and sub_name) else None

    return ModerationEvent(comment=comment_ref, post=post_ref, author=author_ref, subreddit=sub_ref)
