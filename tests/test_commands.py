"""Tests for command line parsing and dispatch."""

import pytest

from core import commands
from core.commands import ALL_COMMANDS, ALL_EXAMPLES, ALL_OPTIONS, Command, has_command_arguments, strip_host_flags
from core.duration import INVALID_DURATION

VERSION = "1.2.3"


class TestParse:
    """Test resolving the command name."""

    def test_parse_valid_simple_command(self):
        """Test that a registered command is resolved."""
        cmd = Command(["help"], VERSION)

        assert cmd.command == "help"

    def test_no_command_defaults_to_help(self):
        """Test that an empty argument list means help."""
        cmd = Command([], VERSION)

        assert cmd.command == "help"

    def test_parse_more_complex_command(self):
        """Test that duration keywords are kept verbatim."""
        cmd = Command(["pause", "-d", "until-morning"], VERSION)

        assert cmd.command == "pause"
        assert cmd.options["duration"] == "until-morning"

    def test_drops_host_flags_before_command(self):
        """Test that leading host runtime flags are never taken as the command."""
        cmd = Command(["--some-electron-flag=value", "mini", "-T", "test", "--noskip"], VERSION)

        assert cmd.command == "mini"
        assert cmd.options["title"] == "test"
        assert cmd.options["noskip"] is True

    def test_only_host_flags_defaults_to_help(self):
        """Test that a command line of host flags alone means help."""
        cmd = Command(["--inspect", "--no-sandbox"], VERSION)

        assert cmd.command == "help"

    def test_unsupported_command_is_invalid(self, log_messages):
        """Test that an unknown command is logged and left unusable."""
        cmd = Command(["dance", "-T", "x"], VERSION)

        assert cmd.command is None
        assert cmd.requested == "dance"
        assert cmd.options is None
        assert not cmd.is_valid
        assert "Error: command dance is not supported" in log_messages

    def test_host_flag_after_command_is_an_option(self, log_messages):
        """Test that only the leading run of flags is stripped."""
        cmd = Command(["--flag", "pause", "--other"], VERSION)

        assert cmd.command == "pause"
        assert cmd.options == {}
        assert "Error: option --other is not valid for command pause" in log_messages


class TestGetOpts:
    """Test option scanning."""

    def test_get_options_from_command(self):
        """Test short forms of value and flag options."""
        cmd = Command(["mini"], VERSION)

        options = cmd.get_opts(["-T", "test", "-n"])

        assert options["title"] == "test"
        assert options["noskip"] is True

    def test_long_forms(self):
        """Test long forms of every long break option."""
        cmd = Command(["long", "--text", "Go stretch", "--title", "Stretch", "--noskip"], VERSION)

        assert cmd.options == {"text": "Go stretch", "title": "Stretch", "noskip": True}

    def test_command_without_options_returns_none(self):
        """Test that commands declaring no options have no option mapping."""
        cmd = Command(["resume", "-T", "x"], VERSION)

        assert cmd.options is None

    def test_value_looking_like_option_is_consumed(self):
        """Test that the token after a value option is always its value."""
        cmd = Command(["mini", "-T", "-n"], VERSION)

        assert cmd.options == {"title": "-n"}

    def test_invalid_option_is_skipped(self, log_messages):
        """Test that invalid options do not abort parsing of the rest."""
        cmd = Command(["mini", "-x", "-T", "test", "--bogus", "-n"], VERSION)

        assert cmd.command == "mini"
        assert cmd.options == {"title": "test", "noskip": True}
        assert "Error: option -x is not valid for command mini" in log_messages
        assert "Error: option --bogus is not valid for command mini" in log_messages

    def test_option_of_other_command_is_rejected(self, log_messages):
        """Test that options are validated against the resolved command."""
        cmd = Command(["mini", "-t", "text"], VERSION)

        assert cmd.options == {}
        assert "Error: option -t is not valid for command mini" in log_messages
        assert "Error: option text is not valid for command mini" in log_messages

    def test_missing_value_is_not_stored(self, log_messages):
        """Test that a trailing value option without value is reported."""
        cmd = Command(["pause", "-d"], VERSION)

        assert cmd.options == {}
        assert "Error: option -d of command pause requires a value" in log_messages

    def test_repeated_option_keeps_last_value(self):
        """Test that a later occurrence overrides an earlier one."""
        cmd = Command(["mini", "-T", "first", "--title", "second"], VERSION)

        assert cmd.options["title"] == "second"


class TestDurationToMs:
    """Test resolution of the pause duration."""

    def test_parse_duration_from_args(self):
        """Test a minutes suffix."""
        cmd = Command(["pause", "-d", "60m"], VERSION)

        assert cmd.duration_to_ms(None) == 3600000

    def test_badly_formatted_duration(self):
        """Test that an unparseable duration is passed through as -1."""
        cmd = Command(["pause", "-d", "10i20k"], VERSION)

        assert cmd.duration_to_ms(None) == INVALID_DURATION

    def test_no_duration_is_indefinite(self):
        """Test that pause without duration yields 1."""
        cmd = Command(["pause"], VERSION)

        assert cmd.duration_to_ms(None) == 1

    def test_indefinitely_keyword(self):
        """Test the indefinitely keyword."""
        cmd = Command(["pause", "--duration", "indefinitely"], VERSION)

        assert cmd.duration_to_ms(None) == 1

    def test_bare_minutes(self):
        """Test a plain number of minutes."""
        cmd = Command(["pause", "-d", "90"], VERSION)

        assert cmd.duration_to_ms(None) == 90 * 60000

    def test_until_morning_uses_resolver(self, monkeypatch, settings):
        """Test that until-morning is resolved only now, through the settings."""
        seen = []

        def fake_time_until_morning(received):
            seen.append(received)
            return 12345

        monkeypatch.setattr(commands, "time_until_morning", fake_time_until_morning)
        cmd = Command(["pause", "-d", "until-morning"], VERSION)

        assert cmd.duration_to_ms(settings) == 12345
        assert seen == [settings]

    def test_command_without_options(self):
        """Test that commands without options are treated as no duration."""
        cmd = Command(["reset"], VERSION)

        assert cmd.duration_to_ms(None) == 1


class TestCheckInMain:
    """Test the local versus forwarded decision."""

    @pytest.mark.parametrize("name", ["help", "version"])
    def test_local_commands(self, name):
        """Test that help and version run in the invoking process."""
        assert Command([name], VERSION).check_in_main() is False

    @pytest.mark.parametrize("name", ["reset", "pause", "resume", "toggle", "mini", "long"])
    def test_forwarded_commands(self, name):
        """Test that every other registered command is forwarded."""
        assert Command([name], VERSION).check_in_main() is True

    def test_invalid_command(self):
        """Test that an unsupported command is never forwarded."""
        assert Command(["nope"], VERSION).check_in_main() is False

    def test_registry_is_fully_covered(self):
        """Test that the decision covers the whole registry."""
        local = {name for name in ALL_COMMANDS if not Command([name], VERSION).check_in_main()}

        assert local == {"help", "version"}


class TestRunOrForward:
    """Test local execution of help and version."""

    def test_version_prints(self, capsys):
        """Test that version prints the version string."""
        assert Command(["version"], VERSION).run_or_forward() is False

        assert capsys.readouterr().out == "Breaktime version 1.2.3\n"

    def test_help_prints(self, capsys):
        """Test that help prints all three sections."""
        assert Command(["help"], VERSION).run_or_forward() is False

        output = capsys.readouterr().out
        assert output.startswith("Usage: breaktime <command> [options]")
        assert "\n\nOptions:" in output
        assert "\n\nExamples:" in output

    def test_other_command_requests_forwarding(self, capsys, log_messages):
        """Test that non-local commands only signal forwarding."""
        assert Command(["toggle"], VERSION).run_or_forward() is True

        assert capsys.readouterr().out == ""
        assert "Forwarding command to main instance" in log_messages


class TestHelpText:
    """Test help rendering."""

    def test_every_command_listed(self):
        """Test that each command appears with an options marker when needed."""
        text = Command(["help"], VERSION).cmd_help()

        for desc in ALL_COMMANDS.values():
            assert desc.description in text
        assert "breaktime pause [options]" in text
        assert "breaktime resume " in text
        assert "breaktime resume [options]" not in text

    def test_command_columns_aligned(self):
        """Test that descriptions start in the same column."""
        lines = Command(["help"], VERSION).cmd_help().split("\n")[3:]
        columns = {
            line.index(desc.description) for line, desc in zip(lines, ALL_COMMANDS.values())
        }

        assert len(lines) == len(ALL_COMMANDS)
        assert len(columns) == 1

    def test_options_listed(self):
        """Test that every option shows both forms."""
        text = Command(["help"], VERSION).options_help()

        for opt in ALL_OPTIONS.values():
            assert f"\t{opt.short}, {opt.long}" in text
        assert "\t-T, --title    Specify title" in text

    def test_examples_listed(self):
        """Test that every example is rendered, one per line."""
        text = Command(["help"], VERSION).examples_help()

        assert text.startswith("\n\nExamples:")
        assert text.count("\n\t") == len(ALL_EXAMPLES)
        for example in ALL_EXAMPLES:
            assert example.cmd in text


class TestMessages:
    """Test the forwarded command representation."""

    def test_round_trip(self):
        """Test that a forwarded command keeps command and options."""
        cmd = Command(["long", "-T", "Up", "-t", "Stretch"], VERSION)

        rebuilt = Command.from_message(cmd.to_message(), VERSION)

        assert rebuilt.command == "long"
        assert rebuilt.options == {"title": "Up", "text": "Stretch"}

    def test_message_of_command_without_options(self):
        """Test that commands without options serialise None."""
        assert Command(["reset"], VERSION).to_message() == {"command": "reset", "options": None}

    def test_unknown_forwarded_command(self, log_messages):
        """Test that an unknown forwarded command is rejected."""
        cmd = Command.from_message({"command": "dance", "options": {"x": 1}}, VERSION)

        assert not cmd.is_valid
        assert cmd.options is None
        assert "Error: forwarded command dance is not supported" in log_messages


class TestHostFlags:
    """Test stripping of host runtime flags."""

    def test_strip_stops_at_first_other_token(self):
        """Test that flags after a positional token are kept."""
        assert strip_host_flags(["--a", "--b=1", "pause", "--c"]) == ["pause", "--c"]

    def test_single_dash_is_not_host_flag(self):
        """Test that short options are not stripped."""
        assert strip_host_flags(["-d", "pause"]) == ["-d", "pause"]

    def test_has_command_arguments(self):
        """Test detection of a real command line."""
        assert has_command_arguments(["--flag", "pause"]) is True
        assert has_command_arguments(["--flag"]) is False
        assert has_command_arguments([]) is False


class TestUntilMorningIntegration:
    """Test until-morning with the real resolver."""

    def test_until_morning_is_positive(self, settings):
        """Test that the delay is positive and at most one day."""
        cmd = Command(["pause", "-d", "until-morning"], VERSION)

        delay = cmd.duration_to_ms(settings)

        assert 0 < delay <= 24 * 60 * 60 * 1000
