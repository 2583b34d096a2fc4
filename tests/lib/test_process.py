"""Tests for process utilities."""

import subprocess

import pytest

from watchdogctl.lib.process import CommandError, check_tool, command_succeeds, run_command


class TestRunCommand:
    """Tests for run_command function."""

    def test_runs_simple_command(self, mock_context):
        """Runs command and returns output."""
        ctx = mock_context(command_outputs={("uname", "-m"): "x86_64\n"})

        assert run_command(["uname", "-m"], context=ctx) == "x86_64\n"

    def test_raises_on_failure(self, mock_context):
        """Raises CommandError on non-zero exit."""
        ctx = mock_context(command_outputs={("modprobe", "softdog"): (1, "")})

        with pytest.raises(CommandError, match="Command failed: modprobe softdog"):
            run_command(["modprobe", "softdog"], context=ctx)

    def test_keeps_cause(self, mock_context):
        """The underlying error is chained."""
        error = subprocess.CalledProcessError(1, "false")
        ctx = mock_context(command_outputs={("false",): error})

        with pytest.raises(CommandError) as excinfo:
            run_command(["false"], context=ctx)

        assert excinfo.value.__cause__ is error

    def test_unchecked_returns_output(self, mock_context):
        """check=False returns stdout even on non-zero exit."""
        ctx = mock_context(command_outputs={("systemd-detect-virt",): (1, "none\n")})

        assert run_command(["systemd-detect-virt"], context=ctx, check=False) == "none\n"


class TestCommandSucceeds:
    """Tests for command_succeeds function."""

    def test_zero_exit(self, mock_context):
        """Exit 0 is success."""
        ctx = mock_context(command_outputs={("dpkg", "-s", "watchdog"): "installed"})

        assert command_succeeds(["dpkg", "-s", "watchdog"], context=ctx) is True

    def test_non_zero_exit(self, mock_context):
        """Non-zero exit is failure, not an error."""
        ctx = mock_context(command_outputs={("dpkg", "-s", "watchdog"): (1, "")})

        assert command_succeeds(["dpkg", "-s", "watchdog"], context=ctx) is False

    def test_missing_binary(self, mock_context):
        """A binary that cannot be run raises CommandError."""
        ctx = mock_context(command_outputs={("rpm", "-q", "watchdog"): FileNotFoundError("rpm")})

        with pytest.raises(CommandError):
            command_succeeds(["rpm", "-q", "watchdog"], context=ctx)


class TestCheckTool:
    """Tests for check_tool function."""

    def test_returns_true_for_available_tool(self, mock_context):
        """Returns True when tool is in PATH."""
        assert check_tool("modprobe", context=mock_context(tools_available=["modprobe"])) is True

    def test_returns_false_for_missing_tool(self, mock_context):
        """Returns False when tool is not in PATH."""
        assert check_tool("dmidecode", context=mock_context()) is False

    def test_raises_when_required(self, mock_context):
        """Raises CommandError when required tool is missing."""
        with pytest.raises(CommandError, match="Required tool"):
            check_tool("systemctl", required=True, context=mock_context())
