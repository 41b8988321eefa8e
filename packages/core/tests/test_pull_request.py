"""Tests for GitHub pull request helper functions."""

from types import SimpleNamespace
from unittest.mock import MagicMock

from prgate_core.aggregator import APPROVED, DISAPPROVED, PENDING
from prgate_core.gh.pull_request import (
    DESCRIPTION_ID,
    get_answered_sources,
    get_command_sources,
    get_review_verdicts,
    has_label,
    set_label,
)
from prgate_core.messages import reply_marker


def _user(login):
    return SimpleNamespace(login=login)


def _comment(comment_id, login, body):
    return SimpleNamespace(id=comment_id, user=_user(login), body=body, created_at=None)


def _review(login, state, submitted_at=None):
    return SimpleNamespace(user=_user(login), state=state, submitted_at=submitted_at)


def _pr(body="", author="alice"):
    pr = MagicMock()
    pr.body = body
    pr.user = _user(author)
    pr.created_at = None
    return pr


class TestGetCommandSources:
    def test_description_comes_first(self):
        sources = get_command_sources(_pr("/reviewers 2"), [_comment(10, "bob", "/reviewers 3")])
        assert [s.source_id for s in sources] == [DESCRIPTION_ID, "10"]
        assert [s.position for s in sources] == [0, 1]
        assert sources[0].author == "alice"

    def test_none_description_is_empty(self):
        assert get_command_sources(_pr(None), [])[0].body == ""

    def test_own_replies_skipped(self):
        comments = [
            _comment(10, "bob", "/reviewers 3"),
            _comment(11, "prgate-bot", f"@bob done\n{reply_marker('10')}"),
            _comment(12, "bob", "/reviewers 4"),
        ]
        sources = get_command_sources(_pr(), comments)
        assert [s.source_id for s in sources] == [DESCRIPTION_ID, "10", "12"]
        assert sources[-1].position == 3


class TestGetAnsweredSources:
    def test_collects_markers(self):
        comments = [
            _comment(11, "prgate-bot", f"ok\n{reply_marker('description')}"),
            _comment(12, "prgate-bot", f"ok\n{reply_marker('10')}"),
            _comment(13, "bob", "LGTM"),
        ]
        assert get_answered_sources(comments) == {"description", "10"}

    def test_bot_login_filters_impostors(self):
        comments = [
            _comment(11, "prgate-bot", f"ok\n{reply_marker('10')}"),
            _comment(12, "mallory", f"fake\n{reply_marker('20')}"),
        ]
        assert get_answered_sources(comments, bot_login="prgate-bot") == {"10"}


class TestGetReviewVerdicts:
    def test_maps_states(self):
        pr = MagicMock()
        pr.get_reviews.return_value = [
            _review("alice", "APPROVED"),
            _review("bob", "CHANGES_REQUESTED"),
            _review("carol", "COMMENTED"),
            _review("alice", "DISMISSED"),
        ]
        verdicts = get_review_verdicts(pr)
        assert [(v.reviewer, v.verdict) for v in verdicts] == [
            ("alice", APPROVED),
            ("bob", DISAPPROVED),
            ("alice", PENDING),
        ]
        assert [v.sequence for v in verdicts] == [0, 1, 3]

    def test_skips_deleted_users(self):
        pr = MagicMock()
        pr.get_reviews.return_value = [SimpleNamespace(user=None, state="APPROVED", submitted_at=None)]
        assert get_review_verdicts(pr) == []


class TestLabels:
    def test_has_label(self):
        pr = MagicMock()
        pr.get_labels.return_value = [SimpleNamespace(name="ready")]
        assert has_label(pr, "ready")
        assert not has_label(pr, "blocked")

    def test_set_label(self):
        pr = MagicMock()
        set_label(pr, "ready", True)
        pr.add_to_labels.assert_called_once_with("ready")
        set_label(pr, "ready", False)
        pr.remove_from_labels.assert_called_once_with("ready")
