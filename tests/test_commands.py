"""
Unit tests for travelrouter/utils/commands.py and travelrouter/utils/polling.py
"""

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from travelrouter.utils import CommandResult, poll_until, run_command


@pytest.mark.unit
class TestRunCommand:
    """Tests for run_command."""

    def test_success_returns_stripped_output(self):
        completed = MagicMock(returncode=0, stdout="wlan1:connected\n", stderr="")

        with patch("travelrouter.utils.commands.subprocess.run", return_value=completed) as mock_run:
            result = run_command(["nmcli", "-t", "dev"])

        assert result.ok
        assert result.stdout == "wlan1:connected"
        assert mock_run.call_args.args[0] == ["nmcli", "-t", "dev"]
        assert mock_run.call_args.kwargs["check"] is False

    def test_failure_keeps_tool_message(self):
        completed = MagicMock(returncode=4, stdout="", stderr="Error: Secrets were required.\n")

        with patch("travelrouter.utils.commands.subprocess.run", return_value=completed):
            result = run_command(["nmcli", "dev", "wifi", "connect", "x"])

        assert not result.ok
        assert result.returncode == 4
        assert result.output == "Error: Secrets were required."

    def test_missing_binary(self):
        with patch("travelrouter.utils.commands.subprocess.run", side_effect=FileNotFoundError):
            result = run_command(["nordvpn", "status"])

        assert result.returncode == 127
        assert "command not found" in result.output

    def test_timeout(self):
        with patch(
            "travelrouter.utils.commands.subprocess.run",
            side_effect=subprocess.TimeoutExpired(["sysctl"], 5),
        ):
            result = run_command(["sysctl", "-n", "net.ipv4.ip_forward"], timeout=5)

        assert not result.ok
        assert "timed out" in result.output

    def test_output_combines_streams(self):
        result = CommandResult(1, "partial", "Error: boom")

        assert result.output == "partial\nError: boom"


@pytest.mark.unit
class TestPollUntil:
    """Tests for poll_until."""

    def test_immediate_success_does_not_sleep(self):
        sleep = MagicMock()

        result = poll_until(lambda: True, timeout=10, sleep=sleep)

        assert result.succeeded
        assert result.elapsed == 0
        assert result.attempts == 1
        sleep.assert_not_called()

    def test_succeeds_on_later_tick(self):
        answers = iter([False, False, True])
        ticks = []

        result = poll_until(lambda: next(answers), timeout=10, sleep=lambda s: None, on_tick=ticks.append)

        assert result.succeeded
        assert result.elapsed == 2
        assert result.attempts == 3
        assert ticks == [1, 2]

    def test_times_out_after_budget(self):
        checks = []

        def never():
            checks.append(1)
            return False

        result = poll_until(never, timeout=3, sleep=lambda s: None)

        assert result.timed_out
        assert result.elapsed == 3
        assert len(checks) == 3
