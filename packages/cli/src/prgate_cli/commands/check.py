"""check command — run one reconciliation pass on pull requests."""

from __future__ import annotations

import logging

import click
from github import GithubException
from rich.console import Console
from rich.table import Table

from prgate_core.driver import CollaboratorError, PassResult, reconcile
from prgate_core.gh.pull_request import get_pull_requests, get_repo
from prgate_core.scheduler import PassScheduler

console = Console()
logger = logging.getLogger(__name__)


def run_passes(repo: str, repo_obj, pr_numbers: list[int], config: dict, census, dry_run: bool = False) -> list[PassResult]:
    """Reconcile every PR in ``pr_numbers``, in parallel across PRs.

    A PR whose pass fails is reported and skipped; its policy and label stay
    as they were until the next pass.
    """

    def run(pr_number: int):
        return reconcile(repo, pr_number, config, census, repo_obj=repo_obj, dry_run=dry_run)

    results = []
    with PassScheduler(run, max_workers=config.get("max_workers", 4)) as scheduler:
        futures = {number: scheduler.submit(number) for number in pr_numbers}
        for number, future in futures.items():
            try:
                result = future.result()
            except (CollaboratorError, GithubException, ValueError) as e:
                console.print(f"[red]#{number}: {e}[/red]")
                continue
            if result is not None:
                results.append(result)
    return results


def print_results(results: list[PassResult], repo: str) -> None:
    if not results:
        console.print("[yellow]No pull requests reconciled.[/yellow]")
        return

    table = Table(title=f"Review gate — {repo}", show_header=True, header_style="bold cyan")
    table.add_column("PR", style="bold", width=6)
    table.add_column("Required", justify="right", width=9)
    table.add_column("Roles", max_width=30)
    table.add_column("Approvals", justify="right", width=10)
    table.add_column("Ready", width=7)
    table.add_column("Replies", justify="right", width=8)

    for r in results:
        roles = ", ".join(f"{role}≥{n}" for role, n in sorted(r.policy.role_minimums.items()))
        ready = "[green]yes[/green]" if r.readiness.ready else "[red]no[/red]"
        table.add_row(
            f"#{r.pr_number}",
            str(r.policy.required_total),
            roles or "—",
            str(r.readiness.total_actual),
            ready,
            str(len(r.replies)),
        )

    console.print(table)


@click.command("check")
@click.option("--repo", required=True, help="GitHub repository in owner/name format.")
@click.option(
    "--pr",
    "pr_number",
    type=int,
    default=None,
    help="Pull request number. Omit to check every open PR.",
)
@click.option(
    "--dry-run",
    "dry_run",
    is_flag=True,
    help="Compute replies and readiness without posting comments or changing labels.",
)
@click.pass_context
def check_cmd(ctx, repo: str, pr_number: int | None, dry_run: bool):
    """Reconcile the review policy and `ready` label of pull requests.

    Replays every `/reviewers` command in the PR description and comments,
    answers commands that have not been answered yet, and adds or removes the
    ready label to match the current approvals.

    \b
    Required environment variables:
      GITHUB_TOKEN         GitHub token (or use gh CLI)
    """
    from prgate_cli.auth import require_github_token

    config = ctx.obj["config"]
    token = require_github_token(config)

    try:
        census = ctx.obj["load_census"]()
    except CollaboratorError as e:
        raise click.ClickException(str(e))

    this_repo = get_repo(repo, token=token)

    if pr_number is None:
        numbers = [pr.number for pr in get_pull_requests(this_repo)]
        if not numbers:
            console.print("[yellow]No open pull requests found.[/yellow]")
            return
    else:
        numbers = [pr_number]

    results = run_passes(repo, this_repo, numbers, config, census, dry_run=dry_run)

    if dry_run:
        for r in results:
            for reply in r.replies:
                console.print(f"[bold cyan]#{r.pr_number}[/bold cyan] would reply:\n{reply}\n")

    print_results(results, repo)
