from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from github import Github

from prgate_core.aggregator import APPROVED, DISAPPROVED, PENDING, Approval
from prgate_core.messages import REPLY_MARKER_RE

DESCRIPTION_ID = "description"

# GitHub review states that carry a verdict. COMMENTED reviews leave the
# reviewer's previous verdict in place and are skipped entirely.
_VERDICTS = {
    "APPROVED": APPROVED,
    "CHANGES_REQUESTED": DISAPPROVED,
    "DISMISSED": PENDING,
}


@dataclass(frozen=True)
class CommandSource:
    """A piece of PR text that may contain commands: the description or one comment."""

    source_id: str
    position: int
    author: str
    body: str
    created_at: datetime | None = None


def get_repo(repo_name: str, token: str):
    return Github(token).get_repo(repo_name)


def get_pull(repo, pr_number: int):
    return repo.get_pull(pr_number)


def get_pull_requests(repo, state: str = "open"):
    return repo.get_pulls(state=state)


def get_comments(pr) -> list:
    return list(pr.get_issue_comments())


def get_command_sources(pr, comments: list) -> list[CommandSource]:
    """Return the description followed by every comment, in platform order.

    Replies posted by prgate itself are recognised by their hidden marker and
    left out.
    """
    sources = [
        CommandSource(
            source_id=DESCRIPTION_ID,
            position=0,
            author=pr.user.login,
            body=pr.body or "",
            created_at=pr.created_at,
        )
    ]
    for position, comment in enumerate(comments, 1):
        body = comment.body or ""
        if REPLY_MARKER_RE.search(body):
            continue
        sources.append(
            CommandSource(
                source_id=str(comment.id),
                position=position,
                author=comment.user.login,
                body=body,
                created_at=comment.created_at,
            )
        )
    return sources


def get_answered_sources(comments: list, bot_login: str | None = None) -> set[str]:
    """Return the ids of every command source prgate has already replied to."""
    answered = set()
    for comment in comments:
        if bot_login is not None and comment.user.login != bot_login:
            continue
        answered.update(REPLY_MARKER_RE.findall(comment.body or ""))
    return answered


def get_review_verdicts(pr) -> list[Approval]:
    """Return one Approval per verdict-bearing review, oldest first."""
    approvals = []
    for sequence, review in enumerate(pr.get_reviews()):
        verdict = _VERDICTS.get(review.state)
        if verdict is None or review.user is None:
            continue
        approvals.append(
            Approval(
                reviewer=review.user.login,
                verdict=verdict,
                submitted_at=review.submitted_at,
                sequence=sequence,
            )
        )
    return approvals


def has_label(pr, name: str) -> bool:
    return any(label.name == name for label in pr.get_labels())


def set_label(pr, name: str, present: bool) -> None:
    if present:
        pr.add_to_labels(name)
    else:
        pr.remove_from_labels(name)


def post_comment(pr, body: str):
    return pr.create_issue_comment(body)
