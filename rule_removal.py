# rule_removal.py
# Comment-triggered rule removal: "!rule2" from a mod / trusted user removes the post
# under Toolbox reason "R2 - ..." and applies that reason's flair + sticky comment.
#
# Pipeline (one event, strictly sequential):
#   RECEIVED -> VALIDATED -> PREFIX_CHECKED -> APPROVAL_CHECKED -> AUTHORIZED
#            -> RULE_PARSED -> RULE_RESOLVED -> DISPOSED
#   any step may end in ABORTED; side effects already done are not rolled back.
#
# Output (RemovalReport):
# {
#   "comment_id": str|None, "post_id": str|None,
#   "state": "<last state reached>",
#   "outcome": "DISPOSED|ABORTED",
#   "reason": "MALFORMED_EVENT|IGNORED_AUTHOR|DISABLED|NO_PREFIX|ALREADY_APPROVED|"
#             "UNAUTHORIZED|EMPTY_RULE_CODE|MALFORMED_CATALOG|RULE_NOT_FOUND|None",
#   "auth": AuthorizationReport|None,
#   "rule_title": str|None,
#   "actions": ["remove_comment", "message_user", "remove_post", "flair", "sticky_comment"]
# }
#
# PRAW / prawcore exceptions are not caught here; the runner decides what to do with them.

from __future__ import annotations
import sys
from typing import Any, Dict, Optional

import authorization
import reddit_helpers as rh
from events import ModerationEvent
from kv_store import KeyValueStore, get_subreddit_name
from rule_catalog import MalformedCatalog, compute_disposition, find_reason, parse_catalog
from score_resolver import current_score
from settings import RuleRemovalSettings

RECEIVED = "RECEIVED"
VALIDATED = "VALIDATED"
PREFIX_CHECKED = "PREFIX_CHECKED"
APPROVAL_CHECKED = "APPROVAL_CHECKED"
AUTHORIZED = "AUTHORIZED"
RULE_PARSED = "RULE_PARSED"
RULE_RESOLVED = "RULE_RESOLVED"
DISPOSED = "DISPOSED"
ABORTED = "ABORTED"

def _vlog(verbose: bool, msg: str):
    if verbose:
        print(f"\t# {msg}")


class _Run:
    """Mutable report for one invocation."""

    def __init__(self, event: ModerationEvent):
        self.report: Dict[str, Any] = {
            "comment_id": event.comment.id if event.comment else None,
            "post_id": event.post.id if event.post else None,
            "state": RECEIVED,
            "outcome": None,
            "reason": None,
            "auth": None,
            "rule_title": None,
            "actions": [],
        }

    def advance(self, state: str):
        self.report["state"] = state

    def did(self, action: str):
        self.report["actions"].append(action)

    def abort(self, reason: str) -> Dict[str, Any]:
        self.report["outcome"] = ABORTED
        self.report["reason"] = reason
        return self.report

    def finish(self) -> Dict[str, Any]:
        self.report["state"] = DISPOSED
        self.report["outcome"] = DISPOSED
        return self.report


def extract_short_code(body: str, comment_prefix: str) -> str:
    """
    "!rule2 thanks" -> "2", "!rule 2 thanks" -> "2", "!rule" -> "".
    The prefix is stripped case-insensitively from the start of the body,
    then the first whitespace-delimited token is the code.
    """
    text = (body or "").strip()
    if comment_prefix and text.lower().startswith(comment_prefix.lower()):
        text = text[len(comment_prefix):]
    parts = text.split()
    return parts[0] if parts else ""

def _is_ignored_author(event: ModerationEvent, settings: RuleRemovalSettings, app_account_id: Optional[str]) -> bool:
    ignored = {a.lower() for a in settings.ignore_authors}
    name = (event.comment.author_name or event.author.name or "").lower()
    if name and name in ignored:
        return True
    return bool(app_account_id) and event.author.id == app_account_id

def handle_event(
    event: ModerationEvent,
    *,
    reddit,
    settings: RuleRemovalSettings,
    store: KeyValueStore,
    app_account_id: Optional[str] = None,
) -> Dict[str, Any]:
    run = _Run(event)
    verbose = settings.enhanced_logging

    # 1) Required refs
    if not event.is_complete():
        print("[ERROR] Event is not in the required state", file=sys.stderr)
        return run.abort("MALFORMED_EVENT")
    run.advance(VALIDATED)

    # 2) Bots / ourselves: silent
    if _is_ignored_author(event, settings, app_account_id):
        return run.abort("IGNORED_AUTHOR")

    comment_ref = event.comment
    username = event.author.name
    _vlog(verbose, f"Triggered by {comment_ref.id}")

    # 3) Feature flag + trigger prefix
    if not settings.enabled:
        _vlog(verbose, "Rule removal not enabled.")
        return run.abort("DISABLED")

    prefix = (settings.comment_prefix or "").strip()
    if not prefix:
        print("[WARN] comment_prefix is blank - rule removal disabled.", file=sys.stderr)
        return run.abort("DISABLED")
    if not (comment_ref.body or "").lower().startswith(prefix.lower()):
        _vlog(verbose, f"{comment_ref.id} triggered - no prefix.")
        return run.abort("NO_PREFIX")

    print(f"[INFO] {comment_ref.id} found rule removal trigger comment.")
    if not comment_ref.removed:
        reddit.comment(id=comment_ref.id).mod.remove()
        run.did("remove_comment")
        _vlog(verbose, "Trigger comment removed.")
    run.advance(PREFIX_CHECKED)

    post = reddit.submission(id=event.post.id)
    subreddit_name = get_subreddit_name(store, lambda: str(post.subreddit.display_name))

    # 4) Already approved by a mod
    if settings.skip_approved_posts and rh.is_approved(post):
        print("[INFO] Post already mod approved - skipping.")
        link = rh.comment_link(comment_ref.permalink)
        rh.send_private_message(
            reddit,
            username,
            subject=f"Post removal failed on {subreddit_name}!",
            body=f"The [post you tried to remove]({link}) was already approved by a moderator.",
        )
        run.did("message_user")
        return run.abort("ALREADY_APPROVED")
    run.advance(APPROVAL_CHECKED)

    # 5) Moderator -> allow-list -> points
    auth = authorization.evaluate(
        username,
        is_moderator=lambda u: rh.is_moderator(reddit, subreddit_name, u),
        allow_list=settings.allow_list,
        points_threshold=settings.points_threshold,
        score=lambda u: current_score(reddit, subreddit_name, u),
    )
    run.report["auth"] = auth
    if not auth["authorized"]:
        if auth["score"] is not None:
            print(f"[INFO] {username} does not have enough points ({auth['score']}/{settings.points_threshold})")
        else:
            _vlog(verbose, f"{comment_ref.id} is not a mod or allow-listed and no points threshold set.")
        return run.abort("UNAUTHORIZED")
    print(f"[INFO] {username} authorized ({auth['reason']})")
    run.advance(AUTHORIZED)

    # 6) Rule code
    short_code = extract_short_code(comment_ref.body, prefix)
    if not short_code:
        print(f"[WARN] rule code missing in {comment_ref.id}", file=sys.stderr)
        return run.abort("EMPTY_RULE_CODE")
    _vlog(verbose, f"Found rule code: {short_code}")
    run.advance(RULE_PARSED)

    # 7) Toolbox catalog
    _vlog(verbose, f"Reading {settings.wiki_page} data from {subreddit_name} wiki...")
    raw_catalog = rh.fetch_wiki_page(reddit, subreddit_name, settings.wiki_page)
    try:
        reasons = parse_catalog(raw_catalog)
    except MalformedCatalog as e:
        print(f"[WARN] Abort - catalog unreadable while resolving '{short_code}': {e}", file=sys.stderr)
        return run.abort("MALFORMED_CATALOG")

    reason = find_reason(reasons, short_code, settings.rule_prefix)
    if reason is None:
        print(f"[WARN] Abort - reason '{settings.rule_prefix}{short_code}' not found.", file=sys.stderr)
        return run.abort("RULE_NOT_FOUND")
    run.report["rule_title"] = reason.title
    run.advance(RULE_RESOLVED)

    # 8) Disposition: removal is unconditional from here on
    disposition = compute_disposition(reason)
    _vlog(verbose, f"disposition: {disposition}")

    post.mod.remove()
    run.did("remove_post")
    _vlog(verbose, "Post removed...")

    if disposition.wants_flair:
        print("[ACTION] Setting flair...")
        post.mod.flair(
            text=disposition.flair_text,
            css_class=disposition.flair_css_class,
            flair_template_id=disposition.flair_template_id,
        )
        run.did("flair")

    if disposition.wants_comment:
        if rh.has_stickied_comment(post):
            _vlog(verbose, "Sticky comment already present - not posting another.")
        else:
            new_comment = post.reply(disposition.comment_text)
            rh.sticky_and_lock(new_comment)
            run.did("sticky_comment")
            print("[ACTION] Removal comment stickied.")

    print(f"[ACTION] Post {post.id} removed by {username} under '{reason.title}'.")
    return run.finish()
