import os
from pathlib import Path
from typing import Optional

import yaml

from prgate_core.census import Census, is_known_role, load_census_file, load_census_from_repo

DEFAULT_CONFIG: dict = {
    "trigger": "/reviewers",
    "max_reviewers": 10,
    "default_role": "authors",  # role every counted approval must hold at minimum
    "implicit_role": "reviewers",  # role named in the "(with at least 1 of role ...)" confirmation
    "execute_role": "committers",  # lowest role (besides the PR author) allowed to issue commands
    "decrease_role": "committers",  # lowest role allowed to lower a requirement
    "author_decrease_role": "reviewers",  # lowest role at which the PR author may lower a requirement
    "ready_label": "ready",
    "census": "census.yml",
    "census_repo": None,  # "owner/name" to read the census from GitHub instead of disk
    "bot_login": None,  # None = recognise own replies by their hidden marker only
    "max_retries": 3,
    "poll_interval": 60,
    "max_workers": 4,
}

_ROLE_KEYS = ("default_role", "implicit_role", "execute_role", "decrease_role", "author_decrease_role")
_POSITIVE_INT_KEYS = ("max_reviewers", "max_retries", "max_workers")


def load_config(config_path: str = ".prgate.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .prgate.yml in the current directory
      3. CLI argument overrides
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    for key in _ROLE_KEYS:
        if not is_known_role(config[key]):
            raise ValueError(f"Invalid {key} in configuration: {config[key]!r}")
    for key in _POSITIVE_INT_KEYS:
        if not isinstance(config[key], int) or config[key] < 1:
            raise ValueError(f"{key} must be a positive integer, got {config[key]!r}")

    config["github_token"] = os.environ.get("GITHUB_TOKEN")

    return config


def load_census(config: dict, github=None) -> Census:
    """
    Load the census named by the configuration.

    When ``census_repo`` is set, the ``census`` path is read from that GitHub
    repository through ``github`` (a PyGithub ``Github`` client). Otherwise it
    is read from disk, relative to the current directory.
    """
    census_repo = config.get("census_repo")
    if census_repo:
        if github is None:
            raise ValueError("census_repo is configured but no GitHub client was provided.")
        return load_census_from_repo(github.get_repo(census_repo), config["census"])
    return load_census_file(config["census"])
