"""watch command — poll open pull requests and reconcile them."""

from __future__ import annotations

import itertools
import logging
import time

import click
from github import GithubException
from rich.console import Console

from prgate_cli.commands.check import run_passes
from prgate_core.driver import CollaboratorError, with_retry
from prgate_core.gh.pull_request import get_pull_requests, get_repo

console = Console()
logger = logging.getLogger(__name__)


def _open_pr_numbers(repo_obj) -> list[int]:
    return [pr.number for pr in get_pull_requests(repo_obj)]


@click.command("watch")
@click.option("--repo", required=True, help="GitHub repository in owner/name format.")
@click.option("--interval", type=int, default=None, help="Seconds between polls. Overrides config file.")
@click.option("--passes", type=int, default=0, show_default=True, help="Stop after this many polls (0 = run forever).")
@click.pass_context
def watch_cmd(ctx, repo: str, interval: int | None, passes: int):
    """Reconcile every open pull request on a fixed polling cadence.

    A round that fails to reach GitHub or the census is logged and retried on
    the next poll; nothing is changed on the pull requests in the meantime.
    """
    from prgate_cli.auth import require_github_token

    config = ctx.obj["config"]
    token = require_github_token(config)
    interval = interval if interval is not None else config.get("poll_interval", 60)
    retries = config.get("max_retries", 3)

    this_repo = get_repo(repo, token=token)
    rounds = itertools.count(1) if passes <= 0 else range(1, passes + 1)

    for round_number in rounds:
        try:
            census = ctx.obj["load_census"]()
            numbers = with_retry(_open_pr_numbers, this_repo, max_retries=retries, what="Listing pull requests")
            results = run_passes(repo, this_repo, numbers, config, census)
        except (CollaboratorError, GithubException) as e:
            logger.warning("Poll %d failed: %s", round_number, e)
            console.print(f"[red]Poll {round_number} failed: {e}[/red]")
        else:
            changed = [r for r in results if r.replies or r.label_changed]
            console.print(
                f"[dim]Poll {round_number}: {len(results)} PR(s) reconciled, {len(changed)} changed.[/dim]"
            )

        if passes > 0 and round_number >= passes:
            break
        time.sleep(interval)
