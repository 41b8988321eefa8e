"""Aggregation of the current review verdicts into approval counts."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterable

from prgate_core.census import has_standing

APPROVED = "approved"
DISAPPROVED = "disapproved"
PENDING = "pending"

_EPOCH = datetime.min


@dataclass(frozen=True)
class Approval:
    reviewer: str
    verdict: str
    submitted_at: datetime | None = None
    sequence: int = 0


@dataclass(frozen=True)
class ApprovalTally:
    total: int
    by_role: dict[str, int] = field(default_factory=dict)
    approvers: tuple[str, ...] = ()

    def count_for(self, role: str) -> int:
        return self.by_role.get(role, 0)


def _order_key(approval: Approval):
    submitted = approval.submitted_at
    if submitted is not None and submitted.tzinfo is not None:
        submitted = submitted.replace(tzinfo=None) - submitted.utcoffset()
    return (submitted or _EPOCH, approval.sequence)


def latest_verdicts(approvals: Iterable[Approval]) -> dict[str, Approval]:
    """Keep only the most recent verdict of each reviewer."""
    latest: dict[str, Approval] = {}
    for approval in sorted(approvals, key=_order_key):
        latest[approval.reviewer] = approval
    return latest


def aggregate(
    approvals: Iterable[Approval],
    roles: Iterable[str],
    resolve_role: Callable[[str], str | None],
    default_role: str = "authors",
) -> ApprovalTally:
    """Count distinct approvers in total and for each role in ``roles``.

    An approver counts for a role when their census role ranks at or above
    it. Approvers unknown to the census are left out of every role bucket but
    are counted in the total as if they held ``default_role``.
    """
    roles = list(roles)
    approvers = sorted(login for login, a in latest_verdicts(approvals).items() if a.verdict == APPROVED)

    total = 0
    by_role = {role: 0 for role in roles}
    for login in approvers:
        role = resolve_role(login)
        if role is None or has_standing(role, default_role):
            total += 1
        if role is None:
            continue
        for required in roles:
            if has_standing(role, required):
                by_role[required] += 1

    return ApprovalTally(total=total, by_role=by_role, approvers=tuple(approvers))
