"""One reconciliation pass over a pull request.

A pass re-reads everything it needs from GitHub, replays the command history
into a policy, answers commands it has not answered before, and makes the
`ready` label match the computed readiness. Passes are safe to repeat: a pass
over a history that was already fully processed changes nothing.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, TypeVar

from github import GithubException, UnknownObjectException
from rich.console import Console

from prgate_core.aggregator import aggregate
from prgate_core.census import ROLES, Census
from prgate_core.gate import Gate
from prgate_core.gh.pull_request import (
    CommandSource,
    get_answered_sources,
    get_command_sources,
    get_comments,
    get_pull,
    get_repo,
    get_review_verdicts,
    has_label,
    post_comment,
    set_label,
)
from prgate_core.messages import format_reply, reply_for
from prgate_core.parser import Command, extract_commands
from prgate_core.permissions import evaluate_permission
from prgate_core.policy import CommandResult, ReviewPolicy, fold
from prgate_core.readiness import Readiness, evaluate_readiness

console = Console()
logger = logging.getLogger(__name__)

T = TypeVar("T")

_MAX_RETRIES = 3


class CollaboratorError(Exception):
    """GitHub or the census could not be reached; the pass changed nothing it could not finish."""


@dataclass
class Evaluation:
    """Everything a pass derives from a PR before acting on it."""

    policy: ReviewPolicy
    results: list[CommandResult]
    readiness: Readiness
    sources: list[CommandSource]
    answered: set[str]
    comments: list = field(default_factory=list)
    approvals: list = field(default_factory=list)


@dataclass
class PassResult:
    """Outcome of one pass, as reported by the CLI."""

    repo: str
    pr_number: int
    policy: ReviewPolicy
    readiness: Readiness
    replies: list[str] = field(default_factory=list)
    label_changed: bool = False
    watermark: int = -1
    evaluated_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


def with_retry(fn: Callable[..., T], *args, max_retries: int = _MAX_RETRIES, what: str = "GitHub call") -> T:
    """Call ``fn`` with exponential backoff on transient collaborator failures.

    Missing objects (404) are not transient and propagate unchanged. After the
    last attempt the failure is raised as CollaboratorError so the caller can
    leave everything as it is until the next scheduled pass.
    """
    for attempt in range(max_retries):
        try:
            return fn(*args)
        except UnknownObjectException:
            raise
        except (GithubException, OSError) as e:
            if attempt == max_retries - 1:
                logger.error("%s failed after %d attempts: %s", what, max_retries, e)
                raise CollaboratorError(f"{what} failed after {max_retries} attempts: {e}") from e
            delay = 2**attempt
            logger.warning(
                "%s failed (attempt %d/%d): %s. Retrying in %ds...",
                what,
                attempt + 1,
                max_retries,
                e,
                delay,
            )
            time.sleep(delay)
    raise CollaboratorError(f"{what} was not attempted (max_retries={max_retries})")


def _extract_commands(sources: list[CommandSource], config: dict) -> list[Command]:
    commands: list[Command] = []
    for source in sources:
        commands.extend(
            extract_commands(
                source.body,
                actor=source.author,
                source_id=source.source_id,
                position=source.position,
                created_at=source.created_at,
                known_roles=ROLES,
                trigger=config["trigger"],
                default_role=config["default_role"],
                max_reviewers=config["max_reviewers"],
            )
        )
    return commands


def _permission_check(pr_author: str, census: Census, config: dict):
    def check(command: Command, policy: ReviewPolicy):
        return evaluate_permission(
            actor=command.actor,
            actor_role=census.resolve_role(command.actor),
            policy=policy,
            command=command.outcome,
            is_author=command.actor == pr_author,
            execute_role=config["execute_role"],
            decrease_role=config["decrease_role"],
            author_decrease_role=config["author_decrease_role"],
        )

    return check


def watermark_of(sources: list[CommandSource], answered: set[str]) -> int:
    """Return the position of the latest answered source, or -1 if none was answered."""
    positions = [s.position for s in sources if s.source_id in answered]
    return max(positions, default=-1)


def evaluate_pr(pr, census: Census, config: dict) -> Evaluation:
    """Derive policy and readiness for ``pr`` without changing anything on GitHub."""
    retries = config.get("max_retries", _MAX_RETRIES)
    comments = with_retry(get_comments, pr, max_retries=retries, what="Fetching comments")
    sources = get_command_sources(pr, comments)
    answered = get_answered_sources(comments, config.get("bot_login"))

    commands = _extract_commands(sources, config)
    policy, results = fold(commands, _permission_check(pr.user.login, census, config))

    approvals = with_retry(get_review_verdicts, pr, max_retries=retries, what="Fetching reviews")
    tally = aggregate(approvals, policy.role_minimums.keys(), census.resolve_role, config["default_role"])
    readiness = evaluate_readiness(policy, tally)

    return Evaluation(
        policy=policy,
        results=results,
        readiness=readiness,
        sources=sources,
        answered=answered,
        comments=comments,
        approvals=approvals,
    )


def gate_for(pr, census: Census, config: dict) -> Gate:
    return Gate(lambda: evaluate_pr(pr, census, config).readiness)


def run_pass(pr, census: Census, config: dict, repo: str = "", dry_run: bool = False) -> PassResult:
    """Run one reconciliation pass over ``pr`` (a PyGithub PullRequest)."""
    retries = config.get("max_retries", _MAX_RETRIES)
    evaluation = evaluate_pr(pr, census, config)
    watermark = watermark_of(evaluation.sources, evaluation.answered)

    # One reply per source keeps a multi-line comment answered atomically.
    pending: dict[str, list[CommandResult]] = {}
    for result in evaluation.results:
        command = result.command
        if command.source_id in evaluation.answered or command.sequence[0] <= watermark:
            continue
        pending.setdefault(command.source_id, []).append(result)

    replies = []
    for source_id, group in pending.items():
        body = "\n\n".join(reply_for(r, config) for r in group)
        reply = format_reply(body, group[0].command.actor, source_id)
        if not dry_run:
            with_retry(post_comment, pr, reply, max_retries=retries, what="Posting reply")
        replies.append(reply)
        logger.info("Answered %s on #%s: %s", source_id, pr.number, [r.status for r in group])

    readiness = evaluation.readiness
    label = config["ready_label"]
    labelled = with_retry(has_label, pr, label, max_retries=retries, what="Fetching labels")
    label_changed = labelled != readiness.ready
    if label_changed:
        if not dry_run:
            with_retry(set_label, pr, label, readiness.ready, max_retries=retries, what="Updating labels")
        verb = "Added" if readiness.ready else "Removed"
        console.print(f"  {verb} label [bold]{label}[/bold] on #{pr.number}")

    if pending:
        watermark = max(watermark, max(r[0].command.sequence[0] for r in pending.values()))

    return PassResult(
        repo=repo,
        pr_number=pr.number,
        policy=evaluation.policy,
        readiness=readiness,
        replies=replies,
        label_changed=label_changed,
        watermark=watermark,
    )


def reconcile(
    repo: str,
    pr_number: int,
    config: dict,
    census: Census,
    repo_obj=None,
    dry_run: bool = False,
) -> PassResult | None:
    """Fetch a PR and run one pass over it.

    Returns None for closed PRs, which are left untouched.
    """
    retries = config.get("max_retries", _MAX_RETRIES)
    this_repo = (
        repo_obj
        if repo_obj is not None
        else with_retry(get_repo, repo, config["github_token"], max_retries=retries, what="Fetching repository")
    )

    try:
        this_pr = with_retry(get_pull, this_repo, pr_number, max_retries=retries, what="Fetching pull request")
    except UnknownObjectException:
        raise ValueError(f"PR #{pr_number} not found in {repo}.")

    if this_pr.state == "closed":
        console.print(f"[yellow]Skipping closed PR #{pr_number}.[/yellow]")
        return None

    return run_pass(this_pr, census, config, repo=repo, dry_run=dry_run)
