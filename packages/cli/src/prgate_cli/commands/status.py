"""status command — show a pull request's review policy and readiness."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from prgate_core.aggregator import APPROVED, latest_verdicts
from prgate_core.driver import CollaboratorError, evaluate_pr, with_retry
from prgate_core.gh.pull_request import get_pull, get_repo
from prgate_core.messages import explain_readiness
from prgate_core.policy import TOTAL

console = Console()

_STATUS_STYLE = {
    "applied": "green",
    "denied": "red",
    "out-of-range": "yellow",
    "unknown-role": "yellow",
    "malformed": "dim",
    "help": "dim",
}


@click.command("status")
@click.option("--repo", required=True, help="GitHub repository in owner/name format.")
@click.option("--pr", "pr_number", type=int, required=True, help="Pull request number.")
@click.pass_context
def status_cmd(ctx, repo: str, pr_number: int):
    """Show the review policy, approvals and readiness of a pull request.

    Read-only: nothing is posted and no label is changed.
    """
    from prgate_cli.auth import require_github_token

    config = ctx.obj["config"]
    token = require_github_token(config)
    retries = config.get("max_retries", 3)

    try:
        census = ctx.obj["load_census"]()
        pr = with_retry(get_pull, get_repo(repo, token=token), pr_number, max_retries=retries, what="Fetching PR")
        evaluation = evaluate_pr(pr, census, config)
    except CollaboratorError as e:
        raise click.ClickException(str(e))

    policy = evaluation.policy

    history = Table(title=f"Commands — {repo}#{pr_number}", show_header=True, header_style="bold cyan")
    history.add_column("Source", width=12)
    history.add_column("Actor", max_width=20)
    history.add_column("Command", max_width=30)
    history.add_column("Result", width=14)
    for result in evaluation.results:
        style = _STATUS_STYLE.get(result.status, "white")
        label = result.status
        if result.decision is not None and result.decision.reason:
            label = result.decision.reason
        history.add_row(
            result.command.source_id,
            result.command.actor,
            result.command.raw_text,
            f"[{style}]{label}[/{style}]",
        )
    if evaluation.results:
        console.print(history)

    requirements = Table(title="Requirements", show_header=True, header_style="bold cyan")
    requirements.add_column("Dimension")
    requirements.add_column("Required", justify="right")
    requirements.add_column("Set by")
    requirements.add_row("total", str(policy.required_total), policy.set_by.get(TOTAL, "(default)"))
    for role, minimum in sorted(policy.role_minimums.items()):
        requirements.add_row(f"role {role}", str(minimum), policy.set_by.get(role, "(default)"))
    console.print(requirements)

    approvers = Table(title="Current verdicts", show_header=True, header_style="bold cyan")
    approvers.add_column("Reviewer")
    approvers.add_column("Role")
    approvers.add_column("Verdict")
    for login, approval in sorted(latest_verdicts(evaluation.approvals).items()):
        style = "green" if approval.verdict == APPROVED else "red"
        approvers.add_row(login, census.resolve_role(login) or "(unknown)", f"[{style}]{approval.verdict}[/{style}]")
    console.print(approvers)

    color = "green" if evaluation.readiness.ready else "red"
    console.print(f"\n[{color}]{explain_readiness(evaluation.readiness)}[/{color}]")
