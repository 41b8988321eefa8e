"""Tests for who may raise or lower review requirements."""

from prgate_core.parser import ParsedCommand
from prgate_core.permissions import (
    AUTHOR_CANNOT_DECREASE,
    DECREASE_NOT_PERMITTED,
    EXECUTE_NOT_PERMITTED,
    evaluate_permission,
)
from prgate_core.policy import DEFAULT_POLICY, ReviewPolicy


def _check(actor="bob", role="reviewers", policy=DEFAULT_POLICY, count=2, target=None, is_author=False, **kwargs):
    return evaluate_permission(actor, role, policy, ParsedCommand(count=count, role=target), is_author, **kwargs)


class TestExecutePrivilege:
    def test_committer_may_execute(self):
        assert _check(role="committers").allowed

    def test_pr_author_may_execute_without_role(self):
        assert _check(actor="alice", role=None, is_author=True).allowed

    def test_plain_author_role_denied(self):
        decision = _check(role="authors")
        assert not decision.allowed
        assert decision.reason == EXECUTE_NOT_PERMITTED

    def test_unknown_account_denied(self):
        assert _check(role=None).reason == EXECUTE_NOT_PERMITTED

    def test_execute_role_configurable(self):
        assert _check(role="authors", execute_role="authors").allowed


class TestIncrease:
    def test_pr_author_may_raise_total(self):
        assert _check(actor="alice", role="authors", count=5, is_author=True).allowed

    def test_pr_author_may_add_role_minimum(self):
        assert _check(actor="alice", role="authors", count=1, target="lead", is_author=True).allowed

    def test_reissue_is_not_a_decrease(self):
        policy = ReviewPolicy(required_total=2, set_by={"total": "carol"})
        assert _check(actor="alice", role="authors", policy=policy, count=2, is_author=True).allowed


class TestDecrease:
    def test_reviewer_may_lower_total(self):
        policy = ReviewPolicy(required_total=3, set_by={"total": "alice"})
        assert _check(policy=policy, count=1).allowed

    def test_reviewer_may_remove_role_minimum(self):
        policy = ReviewPolicy(required_total=1, role_minimums={"lead": 1})
        assert _check(policy=policy, count=0, target="lead").allowed

    def test_pr_author_cannot_lower_value_set_by_other(self):
        policy = ReviewPolicy(required_total=3, set_by={"total": "bob"})
        decision = _check(actor="alice", role="committers", policy=policy, count=1, is_author=True)
        assert decision.reason == AUTHOR_CANNOT_DECREASE

    def test_pr_author_cannot_lower_default(self):
        decision = _check(actor="alice", role="committers", count=0, is_author=True)
        assert decision.reason == AUTHOR_CANNOT_DECREASE

    def test_pr_author_cannot_lower_own_value(self):
        policy = ReviewPolicy(required_total=2, set_by={"total": "alice"})
        decision = _check(actor="alice", role="authors", policy=policy, count=1, is_author=True)
        assert decision.reason == AUTHOR_CANNOT_DECREASE

    def test_committer_pr_author_cannot_lower_own_value(self):
        policy = ReviewPolicy(required_total=2, set_by={"total": "alice"})
        decision = _check(actor="alice", role="committers", policy=policy, count=1, is_author=True)
        assert decision.reason == AUTHOR_CANNOT_DECREASE

    def test_reviewer_pr_author_may_lower(self):
        policy = ReviewPolicy(required_total=2, set_by={"total": "bob"})
        assert _check(actor="alice", role="reviewers", policy=policy, count=1, is_author=True).allowed

    def test_author_decrease_role_configurable(self):
        policy = ReviewPolicy(required_total=2, set_by={"total": "alice"})
        decision = _check(
            actor="alice", role="committers", policy=policy, count=1, is_author=True, author_decrease_role="committers"
        )
        assert decision.allowed

    def test_capping_role_minimum_counts_as_decrease(self):
        policy = ReviewPolicy(
            required_total=3, role_minimums={"lead": 3}, set_by={"total": "alice", "lead": "bob"}
        )
        decision = _check(actor="alice", role="committers", policy=policy, count=2, is_author=True)
        assert decision.reason == AUTHOR_CANNOT_DECREASE

    def test_decrease_role_configurable(self):
        policy = ReviewPolicy(required_total=3)
        decision = _check(role="committers", policy=policy, count=1, decrease_role="reviewers")
        assert decision.reason == DECREASE_NOT_PERMITTED
