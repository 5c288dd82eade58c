"""Tests for the moderator -> allow-list -> points authorization order."""

import authorization


def _never(_username):
    raise AssertionError("score should not be looked up")


def test_moderator_beats_everything():
    rep = authorization.evaluate(
        "ModUser",
        is_moderator=lambda u: True,
        allow_list=set(),
        points_threshold=100,
        score=_never,
    )
    assert rep["authorized"]
    assert rep["reason"] == authorization.MODERATOR
    assert rep["score"] is None


def test_allow_list_is_case_insensitive():
    rep = authorization.evaluate(
        "Helper",
        is_moderator=lambda u: False,
        allow_list={"helper"},
        points_threshold=100,
        score=_never,
    )
    assert rep["authorized"]
    assert rep["reason"] == authorization.ALLOW_LISTED


def test_score_met():
    rep = authorization.evaluate(
        "regular",
        is_moderator=lambda u: False,
        allow_list=set(),
        points_threshold=100,
        score=lambda u: 100,
    )
    assert rep["authorized"]
    assert rep["reason"] == authorization.SCORE_MET
    assert rep["score"] == 100


def test_score_below_threshold_denied():
    rep = authorization.evaluate(
        "regular",
        is_moderator=lambda u: False,
        allow_list={"someoneelse"},
        points_threshold=100,
        score=lambda u: 99,
    )
    assert not rep["authorized"]
    assert rep["reason"] == authorization.DENIED
    assert rep["score"] == 99


def test_zero_threshold_disables_points_path():
    rep = authorization.evaluate(
        "veteran",
        is_moderator=lambda u: False,
        allow_list=set(),
        points_threshold=0,
        score=_never,
    )
    assert not rep["authorized"]
    assert rep["reason"] == authorization.DENIED
