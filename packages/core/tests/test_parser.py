"""Tests for /reviewers command parsing."""

import pytest

from prgate_core.parser import (
    Command,
    HelpRequested,
    Malformed,
    OutOfRange,
    ParsedCommand,
    UnknownRole,
    extract_commands,
    is_command_line,
    parse_command,
)


class TestParseCommand:
    def test_no_arguments_requests_help(self):
        assert parse_command("/reviewers") == HelpRequested()

    def test_trailing_whitespace_still_requests_help(self):
        assert parse_command("/reviewers   ") == HelpRequested()

    def test_non_integer_is_malformed(self):
        assert parse_command("/reviewers two") == Malformed(arguments="two")

    def test_decimal_is_malformed(self):
        assert isinstance(parse_command("/reviewers 1.5"), Malformed)

    def test_too_many_arguments_is_malformed(self):
        assert isinstance(parse_command("/reviewers 2 lead extra"), Malformed)

    @pytest.mark.parametrize("count", range(0, 11))
    def test_counts_in_range_accepted(self, count):
        assert parse_command(f"/reviewers {count}") == ParsedCommand(count=count, role=None)

    def test_count_above_ten_out_of_range(self):
        outcome = parse_command("/reviewers 7001")
        assert outcome == OutOfRange(value=7001, bound=10, role="authors")
        assert outcome.too_high

    def test_negative_count_names_default_role(self):
        outcome = parse_command("/reviewers -3")
        assert outcome == OutOfRange(value=-3, bound=0, role="authors")
        assert not outcome.too_high

    def test_negative_count_names_given_role(self):
        assert parse_command("/reviewers -1 lead") == OutOfRange(value=-1, bound=0, role="lead")

    def test_huge_count_out_of_range(self):
        token = "9" * 5000
        outcome = parse_command(f"/reviewers {token}")
        assert isinstance(outcome, OutOfRange)
        assert outcome.too_high
        assert outcome.bound == 10
        assert outcome.requested == token

    def test_huge_negative_count_out_of_range(self):
        outcome = parse_command("/reviewers -" + "9" * 5000 + " lead")
        assert isinstance(outcome, OutOfRange)
        assert not outcome.too_high
        assert (outcome.bound, outcome.role) == (0, "lead")

    def test_leading_zeros_ignored(self):
        assert parse_command("/reviewers " + "0" * 5000 + "2") == ParsedCommand(count=2, role=None)

    def test_unknown_role(self):
        assert parse_command("/reviewers 2 penguins") == UnknownRole(token="penguins")

    def test_role_names_are_case_sensitive(self):
        assert parse_command("/reviewers 2 Lead") == UnknownRole(token="Lead")

    def test_unknown_role_checked_before_range(self):
        assert parse_command("/reviewers 50 penguins") == UnknownRole(token="penguins")

    def test_known_role_accepted(self):
        assert parse_command("/reviewers 1 lead") == ParsedCommand(count=1, role="lead")

    def test_custom_known_roles(self):
        assert parse_command("/reviewers 1 lead", known_roles=["reviewers"]) == UnknownRole(token="lead")

    def test_custom_bound(self):
        assert parse_command("/reviewers 4", max_reviewers=3) == OutOfRange(value=4, bound=3, role="authors")


class TestIsCommandLine:
    def test_exact_trigger(self):
        assert is_command_line("/reviewers")

    def test_trigger_with_arguments(self):
        assert is_command_line("  /reviewers 2")

    def test_longer_word_is_not_trigger(self):
        assert not is_command_line("/reviewersplease 2")

    def test_trigger_is_case_sensitive(self):
        assert not is_command_line("/Reviewers 2")

    def test_text_before_trigger_is_not_command(self):
        assert not is_command_line("please run /reviewers 2")


class TestExtractCommands:
    def test_extracts_command_lines_only(self):
        body = "Some context\n/reviewers 2\nmore text\n/reviewers 1 lead\n"
        commands = extract_commands(body, actor="alice", source_id="17", position=3)
        assert [c.raw_text for c in commands] == ["/reviewers 2", "/reviewers 1 lead"]
        assert [c.sequence for c in commands] == [(3, 0), (3, 1)]
        assert all(c.actor == "alice" and c.source_id == "17" for c in commands)

    def test_none_body_yields_nothing(self):
        assert extract_commands(None, actor="alice", source_id="description", position=0) == []

    def test_requested_values_exposed(self):
        [command] = extract_commands("/reviewers 3 reviewers", actor="bob", source_id="1", position=1)
        assert command.requested_total == 3
        assert command.requested_role == "reviewers"

    def test_requested_values_absent_for_help(self):
        command = Command(actor="bob", outcome=HelpRequested(), raw_text="/reviewers", source_id="1", sequence=(1, 0))
        assert command.requested_total is None
        assert command.requested_role is None

    def test_custom_trigger(self):
        commands = extract_commands("/approvals 2", actor="a", source_id="1", position=1, trigger="/approvals")
        assert commands[0].outcome == ParsedCommand(count=2)
