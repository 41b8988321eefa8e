"""GitHub token lookup for the prgate bot account.

Sources, first match wins:
  1. GITHUB_TOKEN, then GH_TOKEN (Actions, or an explicit override)
  2. `gh auth token` (the local GitHub CLI session)

The bot posts comments and edits labels, so in Actions the workflow needs
`issues: write` and `pull-requests: write`.
"""

from __future__ import annotations

import logging
import os
import subprocess

import click

logger = logging.getLogger(__name__)

TOKEN_ENV_VARS = ("GITHUB_TOKEN", "GH_TOKEN")


def _token_from_gh_cli() -> str | None:
    try:
        proc = subprocess.run(["gh", "auth", "token"], capture_output=True, text=True, timeout=5)
    except (FileNotFoundError, subprocess.TimeoutExpired):
        logger.debug("gh CLI unavailable; no session token.")
        return None
    if proc.returncode != 0:
        return None
    return proc.stdout.strip() or None


def resolve_github_token() -> str | None:
    """Return a token from the environment or the gh CLI, or None."""
    for name in TOKEN_ENV_VARS:
        if os.environ.get(name):
            return os.environ[name]

    token = _token_from_gh_cli()
    if token:
        logger.debug("Using GitHub token from the gh CLI session.")
    return token


def require_github_token(config: dict) -> str:
    token = config.get("github_token")
    if not token:
        raise click.UsageError(
            "No GitHub token found. Set GITHUB_TOKEN or run `gh auth login` first.\n"
            "Create a token at https://github.com/settings/tokens"
        )
    return token
