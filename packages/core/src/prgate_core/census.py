"""Role registry and census lookup.

The census maps a GitHub login to the single highest role that login holds in
the project. Roles are ordered; holding a role implies the standing of every
role below it, so a reviewer also counts wherever a committer is required.

Census file format (YAML), one key per role, each a login or list of logins:

    lead: duke
    reviewers: [alice, bob]
    committers: [carol]
    authors: [dave]
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

# Lowest to highest rank.
ROLES: tuple[str, ...] = ("contributors", "authors", "committers", "reviewers", "lead")

_RANK = {role: rank for rank, role in enumerate(ROLES)}


def is_known_role(role: str) -> bool:
    return role in _RANK


def role_rank(role: str | None) -> int:
    """Return the rank of ``role``; -1 for None so it never satisfies a requirement."""
    if role is None:
        return -1
    try:
        return _RANK[role]
    except KeyError:
        raise ValueError(f"Unknown role: {role!r}. Choose one of {', '.join(ROLES)}.")


def has_standing(role: str | None, required: str) -> bool:
    """True if an account holding ``role`` satisfies a ``required`` role."""
    return role_rank(role) >= role_rank(required)


@dataclass
class Census:
    """In-memory login → role lookup built from a census document."""

    members: dict[str, str] = field(default_factory=dict)

    def resolve_role(self, login: str) -> str | None:
        """Return the role of ``login`` or None when the census does not know it."""
        return self.members.get(login)

    @classmethod
    def from_mapping(cls, data: dict) -> Census:
        members: dict[str, str] = {}
        for role, logins in (data or {}).items():
            if not is_known_role(role):
                raise ValueError(f"Unknown role {role!r} in census.")
            if isinstance(logins, str):
                logins = [logins]
            for login in logins or []:
                # A login listed under several roles keeps the highest one.
                current = members.get(login)
                if current is None or role_rank(role) > role_rank(current):
                    members[login] = role
        return cls(members=members)


def load_census_file(path: str) -> Census:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Census file not found: {path}")
    census = Census.from_mapping(yaml.safe_load(p.read_text()) or {})
    logger.debug("Loaded census with %d member(s) from %s", len(census.members), path)
    return census


def load_census_from_repo(repo, path: str, ref: str | None = None) -> Census:
    """Load the census YAML stored in a GitHub repository.

    ``repo`` is a PyGithub Repository. GithubException propagates so the
    caller can retry on its next pass.
    """
    kwargs = {"ref": ref} if ref else {}
    contents = repo.get_contents(path, **kwargs)
    text = contents.decoded_content.decode("utf-8", errors="replace")
    census = Census.from_mapping(yaml.safe_load(text) or {})
    logger.debug("Loaded census with %d member(s) from %s:%s", len(census.members), repo.full_name, path)
    return census
