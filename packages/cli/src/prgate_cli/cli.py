"""CLI entry point for prgate.

Commands:
  check   — run one reconciliation pass on a pull request (or every open one)
  watch   — poll open pull requests and reconcile them repeatedly
  status  — show the review policy and readiness of a pull request
  gate    — decide whether a pull request may be integrated or sponsored
  init    — interactive setup wizard
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from prgate_cli.commands.check import check_cmd
from prgate_cli.commands.gate import gate_cmd
from prgate_cli.commands.init import init_cmd
from prgate_cli.commands.status import status_cmd
from prgate_cli.commands.watch import watch_cmd

console = Console()


def _census_loader(config: dict):
    """Return a callable that loads the configured census on demand.

    Watch mode calls it before every round so census edits take effect
    without a restart. A census stored on GitHub is fetched with retry; a
    missing local census file is a usage error.
    """

    def load():
        from prgate_core.config import load_census
        from prgate_core.driver import with_retry

        if config.get("census_repo"):
            from github import Github

            return with_retry(
                load_census,
                config,
                Github(config["github_token"]),
                max_retries=config.get("max_retries", 3),
                what="Loading census",
            )
        try:
            return load_census(config)
        except FileNotFoundError as e:
            raise click.UsageError(f"{e}. Run `prgate init` or set `census` in .prgate.yml.")

    return load


@click.group()
@click.version_option(
    version=importlib.metadata.version("prgate"),
    prog_name="prgate",
)
@click.option(
    "--config",
    "config_path",
    default=".prgate.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="PRGATE_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Log debug output.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """Review-requirement gating for GitHub pull requests."""
    from prgate_cli.auth import resolve_github_token
    from prgate_core.config import load_config

    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(message)s", handlers=[RichHandler(console=console)])

    ctx.ensure_object(dict)

    try:
        config = load_config(config_path)
    except ValueError as e:
        raise click.UsageError(str(e))

    # Resolve token early so all subcommands share the same resolution.
    token = resolve_github_token()
    if token:
        config["github_token"] = token

    ctx.obj["config"] = config
    ctx.obj["load_census"] = _census_loader(config)


main.add_command(check_cmd)
main.add_command(watch_cmd)
main.add_command(status_cmd)
main.add_command(gate_cmd)
main.add_command(init_cmd)
