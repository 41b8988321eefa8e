"""Readiness gate consulted before integrating or sponsoring a PR."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from prgate_core.messages import explain_readiness
from prgate_core.readiness import Readiness

logger = logging.getLogger(__name__)

INTEGRATE = "integrate"
SPONSOR = "sponsor"

_BLOCKED_PREFIX = {
    INTEGRATE: "This pull request has not yet been marked as ready for integration.",
    SPONSOR: "This PR has not yet been marked as ready for integration.",
}


@dataclass(frozen=True)
class GateDecision:
    allowed: bool
    readiness: Readiness

    @property
    def explanation(self) -> str:
        return explain_readiness(self.readiness)


class Gate:
    """Answers "may this PR be integrated now?".

    ``evaluate`` must compute readiness from freshly fetched state. The gate
    calls it on every query and keeps nothing between calls, so a PR that
    lost an approval can never slip through on an earlier answer.
    """

    def __init__(self, evaluate: Callable[[], Readiness]):
        self._evaluate = evaluate

    def check_ready(self) -> GateDecision:
        readiness = self._evaluate()
        return GateDecision(allowed=readiness.ready, readiness=readiness)

    def blocked_message(self, action: str) -> str | None:
        """Return the reply for a blocked ``action``, or None when it may proceed."""
        if action not in _BLOCKED_PREFIX:
            raise ValueError(f"Unknown gated action: {action!r}")
        decision = self.check_ready()
        if decision.allowed:
            return None
        logger.info("Blocked %s: %d/%d approvals", action, decision.readiness.total_actual, decision.readiness.total_required)
        return f"{_BLOCKED_PREFIX[action]}\n\n{decision.explanation}"
