"""Unit tests for subprocess helpers."""

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from reencoder.core.subprocess_utils import ToolInvocation, run_command, run_streaming


class TestToolInvocation:
    """Tests for ToolInvocation."""

    def test_argv(self) -> None:
        """Should put the executable first."""
        invocation = ToolInvocation(Path("/usr/bin/ffmpeg"), ("-i", "in.mkv"))
        assert invocation.argv == ["/usr/bin/ffmpeg", "-i", "in.mkv"]
        assert invocation.command_name == "ffmpeg"

    def test_describe_quotes_special_characters(self) -> None:
        """Should shell-quote arguments with spaces and quotes for display."""
        invocation = ToolInvocation("ffmpeg", ("-i", "it's a movie.mkv"))
        assert invocation.describe() == "ffmpeg -i 'it'\"'\"'s a movie.mkv'"


class TestRunCommand:
    """Tests for run_command."""

    def test_returns_output(self) -> None:
        """Should return stdout, stderr and returncode."""
        completed = subprocess.CompletedProcess(["x"], 0, stdout="out", stderr="")
        with patch("subprocess.run", return_value=completed) as mock_run:
            result = run_command(ToolInvocation("x", ("a",)), timeout=5)

        assert result == ("out", "", 0)
        assert mock_run.call_args.args[0] == ["x", "a"]
        assert mock_run.call_args.kwargs["timeout"] == 5

    def test_timeout_propagates(self) -> None:
        """Should re-raise TimeoutExpired."""
        with patch(
            "subprocess.run", side_effect=subprocess.TimeoutExpired(["x"], 1)
        ):
            with pytest.raises(subprocess.TimeoutExpired):
                run_command(ToolInvocation("x"), timeout=1)


class TestRunStreaming:
    """Tests for run_streaming."""

    def test_returns_code(self) -> None:
        """Should return the process exit code."""
        with patch("subprocess.run", return_value=MagicMock(returncode=3)):
            assert run_streaming(ToolInvocation("x")) == 3

    def test_unstartable_returns_127(self) -> None:
        """Should report 127 when the executable cannot be started."""
        with patch("subprocess.run", side_effect=FileNotFoundError("x")):
            assert run_streaming(ToolInvocation("x")) == 127
