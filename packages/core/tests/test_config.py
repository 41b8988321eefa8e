"""Tests for configuration loading."""

from unittest.mock import MagicMock

import pytest

from prgate_core.config import load_census, load_config


def test_defaults_applied_when_no_config_file(tmp_path):
    config = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    assert config["trigger"] == "/reviewers"
    assert config["max_reviewers"] == 10
    assert config["default_role"] == "authors"
    assert config["implicit_role"] == "reviewers"
    assert config["ready_label"] == "ready"
    assert config["census_repo"] is None


def test_config_file_overrides_defaults(tmp_path):
    cfg = tmp_path / ".gate.yml"
    cfg.write_text("ready_label: approved\nmax_retries: 5\n")
    config = load_config(config_path=str(cfg))
    assert config["ready_label"] == "approved"
    assert config["max_retries"] == 5


def test_cli_overrides_config_file(tmp_path):
    cfg = tmp_path / ".gate.yml"
    cfg.write_text("poll_interval: 30\n")
    config = load_config(config_path=str(cfg), cli_overrides={"poll_interval": 5})
    assert config["poll_interval"] == 5


def test_none_cli_overrides_ignored(tmp_path):
    cfg = tmp_path / ".gate.yml"
    cfg.write_text("poll_interval: 30\n")
    config = load_config(config_path=str(cfg), cli_overrides={"poll_interval": None})
    assert config["poll_interval"] == 30


def test_invalid_role_rejected(tmp_path):
    cfg = tmp_path / ".gate.yml"
    cfg.write_text("decrease_role: penguins\n")
    with pytest.raises(ValueError, match="decrease_role"):
        load_config(config_path=str(cfg))


@pytest.mark.parametrize("line", ["max_workers: 0", "max_retries: -1", "max_reviewers: ten"])
def test_non_positive_limits_rejected(tmp_path, line):
    cfg = tmp_path / ".gate.yml"
    cfg.write_text(line + "\n")
    with pytest.raises(ValueError, match="positive integer"):
        load_config(config_path=str(cfg))


def test_env_token_loaded(monkeypatch):
    monkeypatch.setenv("GITHUB_TOKEN", "gh-token")
    config = load_config(config_path="nonexistent.yml")
    assert config["github_token"] == "gh-token"


def test_load_census_from_local_file(tmp_path):
    census_file = tmp_path / "census.yml"
    census_file.write_text("reviewers: [alice]\n")
    census = load_census({"census": str(census_file), "census_repo": None})
    assert census.resolve_role("alice") == "reviewers"


def test_load_census_from_repo():
    github = MagicMock()
    github.get_repo.return_value.get_contents.return_value.decoded_content = b"lead: duke\n"
    census = load_census({"census": "census.yml", "census_repo": "org/census"}, github)
    github.get_repo.assert_called_once_with("org/census")
    assert census.resolve_role("duke") == "lead"


def test_census_repo_requires_client():
    with pytest.raises(ValueError):
        load_census({"census": "census.yml", "census_repo": "org/census"})
