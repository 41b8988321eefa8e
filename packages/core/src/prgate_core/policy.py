"""Review policy and its replay-derived store.

The policy has no storage of its own. It is rebuilt on every pass by folding
the PR's ordered command history, so the same history always produces the
same policy no matter how many times it is replayed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable

from prgate_core.parser import Command, HelpRequested, Malformed, OutOfRange, ParsedCommand, UnknownRole
from prgate_core.permissions import PermissionDecision

logger = logging.getLogger(__name__)

TOTAL = "total"

# Result statuses
HELP = "help"
MALFORMED = "malformed"
OUT_OF_RANGE = "out-of-range"
UNKNOWN_ROLE = "unknown-role"
DENIED = "denied"
APPLIED = "applied"


@dataclass(frozen=True)
class ReviewPolicy:
    """Immutable snapshot of the approvals a PR requires.

    ``set_by`` maps each dimension (``"total"`` or a role name) to the login
    that last set it. Dimensions missing from ``set_by`` still hold the
    project default.
    """

    required_total: int = 1
    role_minimums: dict[str, int] = field(default_factory=dict)
    set_by: dict[str, str] = field(default_factory=dict)

    def minimum_for(self, role: str) -> int:
        return self.role_minimums.get(role, 0)

    def apply(self, count: int, role: str | None, actor: str) -> ReviewPolicy:
        """Return the policy that results from ``/reviewers count [role]``."""
        minimums = dict(self.role_minimums)
        set_by = dict(self.set_by)
        total = self.required_total

        if role is None:
            if count != total:
                set_by[TOTAL] = actor
            total = count
            for name, minimum in list(minimums.items()):
                if minimum > total:
                    set_by[name] = actor
                    if total == 0:
                        del minimums[name]
                    else:
                        minimums[name] = total
        else:
            if count == 0:
                if minimums.pop(role, None) is not None:
                    set_by[role] = actor
            else:
                if minimums.get(role) != count:
                    set_by[role] = actor
                minimums[role] = count
            if count > total:
                total = count
                set_by[TOTAL] = actor

        return ReviewPolicy(required_total=total, role_minimums=minimums, set_by=set_by)

    def lowered_dimensions(self, count: int, role: str | None) -> list[str]:
        """Return the dimensions that ``/reviewers count [role]`` would lower."""
        proposed = self.apply(count, role, actor="")
        lowered = []
        if proposed.required_total < self.required_total:
            lowered.append(TOTAL)
        for name, minimum in self.role_minimums.items():
            if proposed.minimum_for(name) < minimum:
                lowered.append(name)
        return lowered


DEFAULT_POLICY = ReviewPolicy()


@dataclass(frozen=True)
class CommandResult:
    """What happened to one command during replay."""

    command: Command
    status: str
    policy: ReviewPolicy  # policy in force after this command
    decision: PermissionDecision | None = None

    @property
    def changed_policy(self) -> bool:
        return self.status == APPLIED


PermissionCheck = Callable[[Command, ReviewPolicy], PermissionDecision]


class PolicyStore:
    """Current policy for one PR, advanced one command at a time."""

    def __init__(self, initial: ReviewPolicy = DEFAULT_POLICY):
        self._policy = initial

    @property
    def policy(self) -> ReviewPolicy:
        return self._policy

    def apply(self, command: Command, check_permission: PermissionCheck) -> CommandResult:
        outcome = command.outcome
        if isinstance(outcome, HelpRequested):
            return CommandResult(command, HELP, self._policy)
        if isinstance(outcome, Malformed):
            return CommandResult(command, MALFORMED, self._policy)
        if isinstance(outcome, OutOfRange):
            return CommandResult(command, OUT_OF_RANGE, self._policy)
        if isinstance(outcome, UnknownRole):
            return CommandResult(command, UNKNOWN_ROLE, self._policy)
        if not isinstance(outcome, ParsedCommand):
            raise TypeError(f"Unexpected command outcome: {outcome!r}")

        decision = check_permission(command, self._policy)
        if not decision.allowed:
            logger.debug("Denied %r from %s: %s", command.raw_text, command.actor, decision.reason)
            return CommandResult(command, DENIED, self._policy, decision)

        self._policy = self._policy.apply(outcome.count, outcome.role, command.actor)
        return CommandResult(command, APPLIED, self._policy, decision)


def fold(
    commands: Iterable[Command],
    check_permission: PermissionCheck,
    initial: ReviewPolicy = DEFAULT_POLICY,
) -> tuple[ReviewPolicy, list[CommandResult]]:
    """Replay ``commands`` in source order and return the final policy and every result."""
    store = PolicyStore(initial)
    results = [store.apply(c, check_permission) for c in sorted(commands, key=lambda c: c.sequence)]
    return store.policy, results
