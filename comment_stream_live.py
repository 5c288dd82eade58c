#!/usr/bin/env python3
# comment_stream_live.py - live comment stream runner for rule-triggered removals
#
# - Streams new comments from the subreddit (PRAW comment stream)
# - Each comment -> ModerationEvent -> rule_removal.handle_event()
# - config.yaml is re-read for every event (mods may change it while running)
# - Subreddit name cached in the state file (1 week)
# - Optional JSONL log of every RemovalReport
#
# Requires: bot account is a moderator with posts + flair + wiki permissions.

from __future__ import annotations
import argparse
import datetime as dt
import json
import os
import sys
import warnings

warnings.filterwarnings("ignore", message="Version .* of praw is outdated")

import praw
import yaml
from praw.exceptions import PRAWException
from prawcore.exceptions import PrawcoreException

from events import event_from_comment, strip_fullname
from kv_store import KeyValueStore, ensure_dir
from rule_removal import handle_event
from settings import load_config, load_settings, state_file_from_config


# Every ordinary comment ends in one of these; keep them out of logs
QUIET_REASONS = ("NO_PREFIX", "IGNORED_AUTHOR")


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)

def iso(ts: dt.datetime) -> str:
    return ts.astimezone(dt.timezone.utc).isoformat()

def get_reddit(site: str):
    # Prefer the bot's own praw.ini section; fallback to DEFAULT for local devs
    try:
        return praw.Reddit(site)
    except Exception:
        return praw.Reddit("DEFAULT")

def append_jsonl(path: str, obj: dict):
    ensure_dir(path)
    with open(path, "a", encoding="utf-8") as f:
        f.write(json.dumps(obj, ensure_ascii=False) + "\n")

def process_comment(comment, *, reddit, config_path: str, store: KeyValueStore, app_account_id, jsonl_path=None) -> dict:
    # Settings are never cached across events
    settings = load_settings(config_path)
    event = event_from_comment(comment)
    report = handle_event(
        event,
        reddit=reddit,
        settings=settings,
        store=store,
        app_account_id=app_account_id,
    )
    if jsonl_path and report.get("reason") not in QUIET_REASONS:
        try:
            append_jsonl(jsonl_path, {"ts": iso(utcnow()), "report": report})
        except OSError as e:
            print(f"[LOG][WARN] JSONL append failed: {e}", file=sys.stderr)
    return report

def run_stream(comments, *, reddit, config_path: str, store: KeyValueStore, app_account_id,
               jsonl_path=None, verbose: bool = False) -> dict:
    """
    Handle each comment in turn; one bad comment or a half-saved config.yaml
    only costs that event. A missing config.yaml propagates (FileNotFoundError).
    """
    counts = {"DISPOSED": 0, "ABORTED": 0, "FAILED": 0}
    for comment in comments:
        cid = getattr(comment, "id", "?")
        try:
            report = process_comment(
                comment,
                reddit=reddit,
                config_path=config_path,
                store=store,
                app_account_id=app_account_id,
                jsonl_path=jsonl_path,
            )
        except (PRAWException, PrawcoreException) as e:
            counts["FAILED"] += 1
            print(f"[WARN] Failed to handle comment {cid}: {e}", file=sys.stderr)
            continue
        except yaml.YAMLError as e:
            counts["FAILED"] += 1
            print(f"[WARN] config.yaml unreadable, skipped comment {cid}: {e}", file=sys.stderr)
            continue

        outcome = report.get("outcome") or "ABORTED"
        counts[outcome] = counts.get(outcome, 0) + 1
        if verbose and report.get("reason") not in QUIET_REASONS:
            print(f"[INFO] {report.get('comment_id')} -> {outcome} "
                  f"state={report.get('state')} reason={report.get('reason')}")
    return counts

def main() -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--config", default="config.yaml")
    ap.add_argument("--subreddit", default=None, help="Overrides 'subreddit' from config.yaml.")
    ap.add_argument("--site", default="RuleRemoval_Bot", help="praw.ini section")
    ap.add_argument("--state-file", default=None, help="Overrides 'state_file' from config.yaml.")
    ap.add_argument("--log-jsonl", nargs="?", const="", default=None)
    ap.add_argument("--skip-existing", dest="skip_existing", action="store_true", default=True)
    ap.add_argument("--no-skip-existing", dest="skip_existing", action="store_false")
    ap.add_argument("--verbose", action="store_true")
    args = ap.parse_args()

    try:
        cfg = load_config(args.config)
    except Exception as e:
        print(f"[FATAL] Cannot load config: {e}", file=sys.stderr)
        return 2

    sub_name = args.subreddit or cfg.get("subreddit")
    if not sub_name:
        print("[FATAL] No subreddit given (--subreddit or 'subreddit' in config.yaml)", file=sys.stderr)
        return 2

    store = KeyValueStore(args.state_file or state_file_from_config(cfg))

    jsonl_path = None
    if args.log_jsonl is not None:
        jsonl_path = os.path.join("logs", f"rule_removals_{utcnow().date().isoformat()}.jsonl") if args.log_jsonl == "" else args.log_jsonl
        ensure_dir(jsonl_path)

    r = get_reddit(args.site)
    app_account_id = strip_fullname(getattr(r.user.me(), "id", None))
    if args.verbose:
        print(f"[INFO] streaming r/{sub_name} as app account id={app_account_id}")

    try:
        counts = run_stream(
            r.subreddit(sub_name).stream.comments(skip_existing=args.skip_existing),
            reddit=r,
            config_path=args.config,
            store=store,
            app_account_id=app_account_id,
            jsonl_path=jsonl_path,
            verbose=args.verbose,
        )
    except FileNotFoundError as e:
        print(f"[FATAL] Cannot load config: {e}", file=sys.stderr)
        return 2

    if args.verbose:
        print(f"[SUMMARY] disposed={counts['DISPOSED']} aborted={counts['ABORTED']} failed={counts['FAILED']}")
    return 0


if __name__ == "__main__":
    try:
        raise SystemExit(main())
    except KeyboardInterrupt:
        print("\n[INTERRUPTED] Ctrl+C", file=sys.stderr)
        raise
