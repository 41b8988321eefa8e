"""Wording of every comment prgate posts."""

from __future__ import annotations

import re

from prgate_core.census import ROLES
from prgate_core.parser import OutOfRange, UnknownRole
from prgate_core.permissions import AUTHOR_CANNOT_DECREASE, DECREASE_NOT_PERMITTED, EXECUTE_NOT_PERMITTED
from prgate_core.policy import APPLIED, DENIED, HELP, MALFORMED, OUT_OF_RANGE, UNKNOWN_ROLE, CommandResult, ReviewPolicy
from prgate_core.readiness import Readiness

_REPLY_MARKER = "<!-- prgate-reply: {source_id} -->"
REPLY_MARKER_RE = re.compile(r"<!-- prgate-reply: ([\w-]+) -->")


def reply_marker(source_id: str) -> str:
    return _REPLY_MARKER.format(source_id=source_id)


def help_message(trigger: str = "/reviewers", max_reviewers: int = 10) -> str:
    return (
        f"Usage: `{trigger} <n> [<role>]` where `<n>` is the number of required reviewers "
        f"(between 0 and {max_reviewers}). "
        f"If a role is given, at least `<n>` of the reviews must come from users with that role or higher. "
        f"Valid roles are: {', '.join(reversed(ROLES))}."
    )


def success_message(policy: ReviewPolicy, implicit_role: str = "reviewers") -> str:
    prefix = f"The number of required reviews for this PR is now set to {policy.required_total}"
    if not policy.role_minimums:
        if policy.required_total > 1:
            return f"{prefix} (with at least 1 of role {implicit_role})."
        return f"{prefix}."
    lines = [f"{prefix}."]
    for role, minimum in sorted(policy.role_minimums.items()):
        lines.append(f" - at least {minimum} of role {role}")
    return "\n".join(lines)


def out_of_range_message(outcome: OutOfRange) -> str:
    if outcome.too_high:
        return f"Cannot increase the required number of reviewers above {outcome.bound} (requested: {outcome.requested})"
    return f"Number of required reviewers of role {outcome.role} cannot be decreased below {outcome.bound}"


def denied_message(reason: str | None, trigger: str = "/reviewers", execute_role: str = "committers") -> str:
    if reason == AUTHOR_CANNOT_DECREASE:
        return (
            "Cannot decrease the number of required reviewers: "
            "the author of the pull request may only raise it."
        )
    if reason == DECREASE_NOT_PERMITTED:
        return "Cannot decrease the number of required reviewers: your role does not allow it."
    if reason == EXECUTE_NOT_PERMITTED:
        return (
            f"Only the author of the pull request or a user with role {execute_role} or above "
            f"can use the `{trigger}` command."
        )
    raise ValueError(f"Unknown denial reason: {reason!r}")


def reply_for(result: CommandResult, config: dict) -> str:
    """Return the comment body answering one replayed command."""
    trigger = config.get("trigger", "/reviewers")
    status = result.status
    if status in (HELP, MALFORMED):
        return help_message(trigger, config.get("max_reviewers", 10))
    if status == OUT_OF_RANGE:
        return out_of_range_message(result.command.outcome)
    if status == UNKNOWN_ROLE:
        outcome: UnknownRole = result.command.outcome
        return f"Unknown role `{outcome.token}` specified"
    if status == DENIED:
        return denied_message(result.decision.reason, trigger, config.get("execute_role", "committers"))
    if status == APPLIED:
        body = success_message(result.policy, config.get("implicit_role", "reviewers"))
        if result.command.requested_role is None and result.policy.role_minimums:
            body += f"\nTo drop a role requirement, use `{trigger} 0 <role>`."
        return body
    raise ValueError(f"Unknown command status: {status!r}")


def format_reply(body: str, actor: str, source_id: str) -> str:
    return f"@{actor} {body}\n{reply_marker(source_id)}"


def explain_readiness(readiness: Readiness) -> str:
    if readiness.ready:
        return (
            f"This PR has the required {readiness.total_required} approval(s) "
            f"({readiness.total_actual} received) and meets every role requirement."
        )
    lines = []
    if readiness.total_shortfall:
        lines.append(
            f" - {readiness.total_actual} of {readiness.total_required} required approval(s) received"
        )
    for shortfall in readiness.shortfalls:
        lines.append(
            f" - {shortfall.actual} of {shortfall.required} required approval(s) "
            f"from role {shortfall.role} or above received"
        )
    return "Missing approvals:\n" + "\n".join(lines)
