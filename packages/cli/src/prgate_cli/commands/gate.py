"""gate command — consult readiness before integrating or sponsoring."""

from __future__ import annotations

import click
from rich.console import Console

from prgate_core.driver import CollaboratorError, gate_for, with_retry
from prgate_core.gate import INTEGRATE, SPONSOR
from prgate_core.gh.pull_request import get_pull, get_repo, post_comment

console = Console()


@click.command("gate")
@click.argument("action", type=click.Choice([INTEGRATE, SPONSOR]))
@click.option("--repo", required=True, help="GitHub repository in owner/name format.")
@click.option("--pr", "pr_number", type=int, required=True, help="Pull request number.")
@click.option("--comment", is_flag=True, help="Post the refusal as a PR comment when blocked.")
@click.pass_context
def gate_cmd(ctx, action: str, repo: str, pr_number: int, comment: bool):
    """Check whether ACTION may proceed on a pull request.

    Exits with status 1 when the pull request does not have the approvals its
    review policy requires. Readiness is recomputed from GitHub on every call.
    """
    from prgate_cli.auth import require_github_token

    config = ctx.obj["config"]
    token = require_github_token(config)
    retries = config.get("max_retries", 3)

    try:
        census = ctx.obj["load_census"]()
        pr = with_retry(get_pull, get_repo(repo, token=token), pr_number, max_retries=retries, what="Fetching PR")
        message = gate_for(pr, census, config).blocked_message(action)
        if message is not None and comment:
            with_retry(post_comment, pr, message, max_retries=retries, what="Posting comment")
    except CollaboratorError as e:
        raise click.ClickException(str(e))

    if message is None:
        console.print(f"[green]#{pr_number} is ready: {action} may proceed.[/green]")
        return

    console.print(f"[red]{message}[/red]")
    ctx.exit(1)
