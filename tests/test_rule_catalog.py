"""Tests for Toolbox catalog parsing, rule lookup and disposition."""

import pytest

from fakes import toolbox_json
from rule_catalog import (
    Disposition,
    MalformedCatalog,
    RemovalReason,
    compute_disposition,
    find_reason,
    parse_catalog,
    resolve,
)


def test_parse_maps_toolbox_keys():
    reasons = parse_catalog(toolbox_json({
        "title": "R2 - Off topic",
        "text": "Removed%2C%20off-topic.",
        "flairText": "Off-topic",
        "flairCSS": "offtopic",
        "flairTemplateID": "",
    }))
    assert reasons == [RemovalReason(
        title="R2 - Off topic",
        text="Removed%2C%20off-topic.",
        flair_text="Off-topic",
        flair_css_class="offtopic",
        flair_template_id=None,
    )]


@pytest.mark.parametrize("text", [
    "",
    "not json",
    "[]",
    '{"removalReasons": {}}',
    '{"removalReasons": {"reasons": {"title": "R1"}}}',
])
def test_malformed_catalog(text):
    with pytest.raises(MalformedCatalog):
        parse_catalog(text)


def test_first_match_wins_over_exact_match():
    catalog = toolbox_json({"title": "R10 - x"}, {"title": "R1 - y"})
    reason = resolve(catalog, "1", "R")
    assert reason.title == "R10 - x"


def test_not_found():
    reasons = parse_catalog(toolbox_json({"title": "R1 - a"}, {"title": "R2 - b"}))
    assert find_reason(reasons, "3", "R") is None
    assert find_reason(reasons, "1", "Rule") is None


def test_prefix_concatenation_without_separator():
    reasons = parse_catalog(toolbox_json({"title": "Rule 4 - spam"}, {"title": "Rule4 - spam"}))
    assert find_reason(reasons, "4", "Rule").title == "Rule4 - spam"


def test_template_id_discards_css_class():
    d = compute_disposition(RemovalReason(
        title="R3", flair_text="Spam", flair_css_class="spam", flair_template_id="abc-123",
    ))
    assert d.flair_template_id == "abc-123"
    assert d.flair_css_class is None
    assert d.flair_text == "Spam"


def test_css_class_kept_without_template():
    d = compute_disposition(RemovalReason(title="R3", flair_css_class="spam"))
    assert d.flair_css_class == "spam"
    assert d.wants_flair


def test_empty_fields_give_no_side_effects():
    d = compute_disposition(RemovalReason(title="R5"))
    assert d == Disposition()
    assert not d.wants_flair
    assert not d.wants_comment


def test_comment_text_is_uri_decoded():
    d = compute_disposition(RemovalReason(title="R2", text="Removed%2C%20off-topic.%0A%0ASee%20rules."))
    assert d.comment_text == "Removed, off-topic.\n\nSee rules."
    assert d.wants_comment


def test_untitled_entries_are_skipped():
    catalog = toolbox_json({"title": "R1 - a"}, {"text": "untitled"}, "R2 - not an object", {"title": 7})
    reasons = parse_catalog(catalog)
    assert [r.title for r in reasons] == ["R1 - a"]
    assert resolve(catalog, "1", "R").title == "R1 - a"
    assert resolve(catalog, "2", "R") is None
