"""Parsing of `/reviewers` command lines.

Parsing never raises for user input: every line maps to exactly one outcome
object, and the caller decides how to answer it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Union

from prgate_core.census import ROLES

TRIGGER = "/reviewers"
MAX_REVIEWERS = 10
DEFAULT_ROLE = "authors"

_INT_RE = re.compile(r"^-?\d+$")


@dataclass(frozen=True)
class HelpRequested:
    pass


@dataclass(frozen=True)
class Malformed:
    arguments: str


@dataclass(frozen=True)
class OutOfRange:
    value: int
    bound: int
    role: str
    literal: str | None = None  # count as written, when too long to hold as an int

    @property
    def too_high(self) -> bool:
        return self.value > self.bound

    @property
    def requested(self) -> str:
        return self.literal if self.literal is not None else str(self.value)


@dataclass(frozen=True)
class UnknownRole:
    token: str


@dataclass(frozen=True)
class ParsedCommand:
    count: int
    role: str | None = None


ParseOutcome = Union[HelpRequested, Malformed, OutOfRange, UnknownRole, ParsedCommand]


@dataclass(frozen=True)
class Command:
    """One command line attributed to the account that wrote it."""

    actor: str
    outcome: ParseOutcome
    raw_text: str
    source_id: str  # "description" or the issue comment id
    sequence: tuple[int, int]  # (source position, line within source); description is position 0
    created_at: datetime | None = None

    @property
    def requested_total(self) -> int | None:
        return self.outcome.count if isinstance(self.outcome, ParsedCommand) else None

    @property
    def requested_role(self) -> str | None:
        return self.outcome.role if isinstance(self.outcome, ParsedCommand) else None


def is_command_line(line: str, trigger: str = TRIGGER) -> bool:
    stripped = line.strip()
    return stripped == trigger or stripped.startswith(trigger + " ") or stripped.startswith(trigger + "\t")


def parse_command(
    line: str,
    known_roles: Iterable[str] = ROLES,
    trigger: str = TRIGGER,
    default_role: str = DEFAULT_ROLE,
    max_reviewers: int = MAX_REVIEWERS,
) -> ParseOutcome:
    """Parse one command line into an outcome.

    ``line`` must start with ``trigger`` (see :func:`is_command_line`).
    The role token is checked before the count range so that a low-bound
    rejection always names a role that exists.
    """
    args = line.strip()[len(trigger) :].split()
    if not args:
        return HelpRequested()
    if len(args) > 2 or not _INT_RE.match(args[0]):
        return Malformed(arguments=" ".join(args))

    role = args[1] if len(args) == 2 else None
    if role is not None and role not in set(known_roles):
        return UnknownRole(token=role)
    named_role = role or default_role

    token = args[0]
    negative = token.startswith("-")
    digits = token.lstrip("-").lstrip("0") or "0"
    if len(digits) > len(str(max_reviewers)):
        # Arbitrarily long tokens are out of range without converting them.
        if negative:
            return OutOfRange(value=-1, bound=0, role=named_role, literal=token)
        return OutOfRange(value=max_reviewers + 1, bound=max_reviewers, role=named_role, literal=token)

    count = -int(digits) if negative else int(digits)
    if count > max_reviewers:
        return OutOfRange(value=count, bound=max_reviewers, role=named_role)
    if count < 0:
        return OutOfRange(value=count, bound=0, role=named_role)
    return ParsedCommand(count=count, role=role)


def extract_commands(
    body: str | None,
    actor: str,
    source_id: str,
    position: int,
    created_at: datetime | None = None,
    known_roles: Iterable[str] = ROLES,
    trigger: str = TRIGGER,
    default_role: str = DEFAULT_ROLE,
    max_reviewers: int = MAX_REVIEWERS,
) -> list[Command]:
    """Return a Command for every line of ``body`` that starts with ``trigger``."""
    roles = tuple(known_roles)
    commands = []
    for line in (body or "").splitlines():
        if not is_command_line(line, trigger):
            continue
        outcome = parse_command(line, roles, trigger, default_role, max_reviewers)
        commands.append(
            Command(
                actor=actor,
                outcome=outcome,
                raw_text=line.strip(),
                source_id=source_id,
                sequence=(position, len(commands)),
                created_at=created_at,
            )
        )
    return commands
