"""Who may change a PR's review requirements, and in which direction.

Raising requirements is open to anyone allowed to issue the command at all.
Lowering them needs a sufficiently senior role. The PR author may not lower
any requirement, their own included, unless they rank at or above
`author_decrease_role`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from prgate_core.census import has_standing

if TYPE_CHECKING:
    from prgate_core.parser import ParsedCommand
    from prgate_core.policy import ReviewPolicy

EXECUTE_NOT_PERMITTED = "execute-not-permitted"
DECREASE_NOT_PERMITTED = "decrease-not-permitted"
AUTHOR_CANNOT_DECREASE = "author-cannot-decrease"


@dataclass(frozen=True)
class PermissionDecision:
    allowed: bool
    reason: str | None = None


ALLOWED = PermissionDecision(allowed=True)


def evaluate_permission(
    actor: str,
    actor_role: str | None,
    policy: ReviewPolicy,
    command: ParsedCommand,
    is_author: bool,
    execute_role: str = "committers",
    decrease_role: str = "committers",
    author_decrease_role: str = "reviewers",
) -> PermissionDecision:
    """Decide whether ``actor`` may apply ``command`` on top of ``policy``.

    ``actor_role`` is the census role of the actor, or None when the census
    does not know them.
    """
    if not is_author and not has_standing(actor_role, execute_role):
        return PermissionDecision(False, EXECUTE_NOT_PERMITTED)

    lowered = policy.lowered_dimensions(command.count, command.role)
    if not lowered:
        return ALLOWED

    if is_author and not has_standing(actor_role, author_decrease_role):
        return PermissionDecision(False, AUTHOR_CANNOT_DECREASE)
    if not has_standing(actor_role, decrease_role):
        return PermissionDecision(False, DECREASE_NOT_PERMITTED)
    return ALLOWED
