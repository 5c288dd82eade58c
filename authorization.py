# authorization.py
# Who may trigger a rule removal.
#
# Output (AuthorizationReport):
# {
#   "authorized": bool,
#   "reason": "MODERATOR|ALLOW_LISTED|SCORE_MET|DENIED",
#   "score": int|None      # only filled when the points path was evaluated
# }
#
# Order is fixed: moderator -> allow-list -> points threshold.
# A threshold of 0 disables the points path entirely (no "always pass").

from __future__ import annotations
from typing import Any, Callable, Dict, Iterable

MODERATOR = "MODERATOR"
ALLOW_LISTED = "ALLOW_LISTED"
SCORE_MET = "SCORE_MET"
DENIED = "DENIED"

def _report(authorized: bool, reason: str, score=None) -> Dict[str, Any]:
    return {"authorized": authorized, "reason": reason, "score": score}

def evaluate(
    username: str,
    *,
    is_moderator: Callable[[str], bool],
    allow_list: Iterable[str],
    points_threshold: int,
    score: Callable[[str], int],
) -> Dict[str, Any]:
    """
    is_moderator / score are called lazily: score() is only hit when the
    user is neither a moderator nor allow-listed and the threshold is set.
    """
    if is_moderator(username):
        return _report(True, MODERATOR)

    allowed = {str(u).strip().lower() for u in (allow_list or [])}
    if (username or "").lower() in allowed:
        return _report(True, ALLOW_LISTED)

    if points_threshold > 0:
        current = int(score(username))
        if current >= points_threshold:
            return _report(True, SCORE_MET, current)
        return _report(False, DENIED, current)

    return _report(False, DENIED)
