"""Comparison of an approval tally against a review policy."""

from __future__ import annotations

from dataclasses import dataclass

from prgate_core.aggregator import ApprovalTally
from prgate_core.policy import ReviewPolicy


@dataclass(frozen=True)
class RoleShortfall:
    role: str
    required: int
    actual: int


@dataclass(frozen=True)
class Readiness:
    ready: bool
    policy: ReviewPolicy
    total_required: int
    total_actual: int
    shortfalls: tuple[RoleShortfall, ...] = ()

    @property
    def total_shortfall(self) -> int:
        return max(0, self.total_required - self.total_actual)


def evaluate_readiness(policy: ReviewPolicy, tally: ApprovalTally) -> Readiness:
    shortfalls = tuple(
        RoleShortfall(role=role, required=minimum, actual=tally.count_for(role))
        for role, minimum in sorted(policy.role_minimums.items())
        if tally.count_for(role) < minimum
    )
    ready = tally.total >= policy.required_total and not shortfalls
    return Readiness(
        ready=ready,
        policy=policy,
        total_required=policy.required_total,
        total_actual=tally.total,
        shortfalls=shortfalls,
    )
