"""init command — interactive setup wizard.

Writes .prgate.yml, a census skeleton, and optionally a GitHub Actions
workflow that reconciles a PR whenever it is commented on, reviewed or
updated.
"""

from __future__ import annotations

import subprocess
from pathlib import Path

import click
import yaml
from rich.console import Console

from prgate_core.census import ROLES

console = Console()

_WORKFLOW_TEMPLATE = """\
name: PR Review Gate

on:
  issue_comment:
    types: [created]
  pull_request_review:
    types: [submitted, dismissed]
  pull_request:
    types: [opened, edited, synchronize, reopened]

concurrency:
  group: prgate-${{{{ github.event.pull_request.number || github.event.issue.number }}}}
  cancel-in-progress: false

jobs:
  gate:
    if: github.event_name != 'issue_comment' || github.event.issue.pull_request
    runs-on: ubuntu-latest
    permissions:
      contents: read
      issues: write
      pull-requests: write

    steps:
      - uses: actions/checkout@v4

      - name: Set up Python
        uses: actions/setup-python@v5
        with:
          python-version: "3.12"

      - name: Install prgate
        run: pip install "prgate=={version}"

      - name: Reconcile review requirements
        env:
          GITHUB_TOKEN: ${{{{ secrets.GITHUB_TOKEN }}}}
        run: |
          prgate check \\
            --repo ${{{{ github.repository }}}} \\
            --pr ${{{{ github.event.pull_request.number || github.event.issue.number }}}}
"""


@click.command("init")
@click.option("--repo", default=None, help="GitHub repository (owner/name). Auto-detected from git remote.")
def init_cmd(repo: str | None):
    """Set up prgate for your repository.

    Creates .prgate.yml, a census file listing who holds which role, and a
    GitHub Actions workflow.
    """
    console.print("\n[bold cyan]prgate init[/bold cyan] — setup wizard\n")

    if repo is None:
        repo = _detect_repo_from_git()
        if repo:
            console.print(f"[dim]Detected repository: {repo}[/dim]")
        else:
            repo = click.prompt("GitHub repository (owner/name)")

    ready_label = click.prompt("Label marking a PR as ready", default="ready")
    execute_role = click.prompt(
        "Lowest role (besides the PR author) allowed to use /reviewers",
        type=click.Choice(list(ROLES)),
        default="committers",
    )
    decrease_role = click.prompt(
        "Lowest role allowed to lower a requirement",
        type=click.Choice(list(ROLES)),
        default="committers",
    )

    config: dict = {"ready_label": ready_label, "execute_role": execute_role, "decrease_role": decrease_role}

    census_path = click.prompt("Census file path", default="census.yml")
    if census_path != "census.yml":
        config["census"] = census_path

    _write_config(config)
    console.print("[green]Created .prgate.yml[/green]")

    if not Path(census_path).exists():
        reviewers = click.prompt("Reviewer logins (comma separated)", default="", show_default=False)
        _write_census(census_path, [r.strip() for r in reviewers.split(",") if r.strip()])
        console.print(f"[green]Created {census_path}[/green]")

    setup_ci = click.confirm("\nGenerate .github/workflows/prgate.yml for GitHub Actions?", default=True)
    if setup_ci:
        _write_workflow()
        console.print("[green]Created .github/workflows/prgate.yml[/green]")

    console.print("\n[bold green]Setup complete![/bold green]")
    console.print("Reconcile a PR with: [bold]prgate check --repo {repo} --pr <number>[/bold]".format(repo=repo))


def _detect_repo_from_git() -> str | None:
    """Try to detect the GitHub repo slug from the git remote URL."""
    try:
        result = subprocess.run(
            ["git", "remote", "get-url", "origin"],
            capture_output=True,
            text=True,
            timeout=5,
        )
        if result.returncode != 0:
            return None
        url = result.stdout.strip()
        # https://github.com/owner/repo.git  →  owner/repo
        # git@github.com:owner/repo.git      →  owner/repo
        if "github.com" not in url:
            return None
        slug = url.split("github.com")[-1].lstrip("/:").removesuffix(".git")
        return slug if "/" in slug else None
    except (FileNotFoundError, subprocess.TimeoutExpired):
        return None


def _write_config(config: dict) -> None:
    """Write or update .prgate.yml, preserving any existing keys."""
    path = Path(".prgate.yml")
    existing: dict = {}
    if path.exists():
        existing = yaml.safe_load(path.read_text()) or {}
    existing.update(config)
    path.write_text(yaml.dump(existing, default_flow_style=False, sort_keys=False))


def _write_census(path: str, reviewers: list[str]) -> None:
    """Write a census skeleton with one key per role, highest first."""
    census = {role: [] for role in reversed(ROLES)}
    census["reviewers"] = reviewers
    Path(path).write_text(yaml.dump(census, default_flow_style=False, sort_keys=False))


def _get_version() -> str:
    """Read the current prgate version from the installed package metadata."""
    try:
        from importlib.metadata import version

        return version("prgate")
    except Exception:
        return "0.1.0"


def _write_workflow() -> None:
    workflow_dir = Path(".github/workflows")
    workflow_dir.mkdir(parents=True, exist_ok=True)
    workflow_path = workflow_dir / "prgate.yml"
    workflow_path.write_text(_WORKFLOW_TEMPLATE.format(version=_get_version()))
