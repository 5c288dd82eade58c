# rule_catalog.py
# Toolbox removal reasons (wiki page "toolbox") -> typed catalog -> rule lookup.
#
# Toolbox JSON (only the part we read):
# {
#   "removalReasons": {
#     "reasons": [
#       {"title": "R1 - Be nice", "text": "URI%20encoded%20text",
#        "flairText": "...", "flairCSS": "...", "flairTemplateID": "..."},
#       ...
#     ]
#   }
# }

from __future__ import annotations
import json
from dataclasses import dataclass
from typing import Any, List, Optional
from urllib.parse import unquote


class MalformedCatalog(ValueError):
    """Wiki content is not a usable Toolbox removal-reason catalog."""


@dataclass(frozen=True)
class RemovalReason:
    title: str
    text: Optional[str] = None
    flair_text: Optional[str] = None
    flair_css_class: Optional[str] = None
    flair_template_id: Optional[str] = None


@dataclass(frozen=True)
class Disposition:
    flair_text: Optional[str] = None
    flair_css_class: Optional[str] = None
    flair_template_id: Optional[str] = None
    comment_text: Optional[str] = None

    @property
    def wants_flair(self) -> bool:
        return bool(self.flair_text or self.flair_css_class or self.flair_template_id)

    @property
    def wants_comment(self) -> bool:
        return bool(self.comment_text)


def _opt_str(v: Any) -> Optional[str]:
    if v is None:
        return None
    s = str(v)
    return s if s else None

def _reason_from_raw(raw: Any) -> Optional[RemovalReason]:
    # Entries without a title can never match a rule code; skip them
    if not isinstance(raw, dict):
        return None
    title = raw.get("title")
    if not isinstance(title, str):
        return None
    return RemovalReason(
        title=title,
        text=_opt_str(raw.get("text")),
        flair_text=_opt_str(raw.get("flairText")),
        flair_css_class=_opt_str(raw.get("flairCSS")),
        flair_template_id=_opt_str(raw.get("flairTemplateID")),
    )

def parse_catalog(text: str) -> List[RemovalReason]:
    """Parse Toolbox wiki JSON; raise MalformedCatalog if removalReasons.reasons is missing."""
    try:
        data = json.loads(text or "")
    except (TypeError, ValueError) as e:
        raise MalformedCatalog(f"not JSON: {e}") from e

    removal = data.get("removalReasons") if isinstance(data, dict) else None
    reasons = removal.get("reasons") if isinstance(removal, dict) else None
    if not isinstance(reasons, list):
        raise MalformedCatalog("removalReasons.reasons missing or not a list")

    parsed = (_reason_from_raw(r) for r in reasons)
    return [r for r in parsed if r is not None]

def find_reason(reasons: List[RemovalReason], short_code: str, rule_prefix: str) -> Optional[RemovalReason]:
    # First match in catalog order, not best match: "R10 - x" wins over a later "R1 - y" for code "1".
    key = f"{rule_prefix}{short_code}"
    for reason in reasons:
        if reason.title.startswith(key):
            return reason
    return None

def resolve(catalog_json: str, short_code: str, rule_prefix: str) -> Optional[RemovalReason]:
    return find_reason(parse_catalog(catalog_json), short_code, rule_prefix)

def compute_disposition(reason: RemovalReason) -> Disposition:
    """
    Side effects prescribed by a rule. Empty fields become None.
    A flair template id always wins: when one is set the CSS class is dropped.
    """
    template_id = reason.flair_template_id or None
    css_class = reason.flair_css_class or None
    if template_id:
        css_class = None

    comment_text = reason.text or None
    if comment_text:
        # Toolbox saves reason text URI-encoded
        comment_text = unquote(comment_text) or None

    return Disposition(
        flair_text=reason.flair_text or None,
        flair_css_class=css_class,
        flair_template_id=template_id,
        comment_text=comment_text,
    )
