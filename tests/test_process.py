"""Unit tests for subprocess helpers."""

import subprocess

import pytest
from unittest.mock import Mock, patch

from deploy_tools.core.process import (
    CommandNotFoundError,
    CommandResult,
    WorkingDirectoryError,
    command_exists,
    run_command,
)


class TestCommandExists:
    """Test cases for command_exists."""

    @patch("deploy_tools.core.process.shutil.which")
    def test_found(self, mock_which):
        """Test an executable on PATH is found."""
        mock_which.return_value = "/usr/local/bin/cdk"

        assert command_exists("cdk") is True
        mock_which.assert_called_once_with("cdk")

    @patch("deploy_tools.core.process.shutil.which")
    def test_not_found(self, mock_which):
        """Test a missing executable is reported."""
        mock_which.return_value = None

        assert command_exists("cdk") is False


class TestRunCommand:
    """Test cases for run_command."""

    @patch("deploy_tools.core.process.subprocess.run")
    def test_streams_output_by_default(self, mock_run, tmp_path):
        """Test commands inherit the terminal unless capturing."""
        mock_run.return_value = Mock(returncode=0, stdout=None)

        result = run_command(
            ["npm", "run", "build"], cwd=str(tmp_path), env={"A": "1"}
        )

        mock_run.assert_called_once_with(
            ["npm", "run", "build"], cwd=str(tmp_path), env={"A": "1"}
        )
        assert result.succeeded
        assert result.output == ""

    @patch("deploy_tools.core.process.subprocess.run")
    def test_capture_output(self, mock_run):
        """Test captured output is returned."""
        mock_run.return_value = Mock(returncode=1, stdout="synth error\n")

        result = run_command(["cdk", "synth", "--quiet"], capture=True)

        _, kwargs = mock_run.call_args
        assert kwargs["stdout"] == subprocess.PIPE
        assert kwargs["stderr"] == subprocess.STDOUT
        assert kwargs["text"] is True
        assert result.returncode == 1
        assert not result.succeeded
        assert result.output == "synth error\n"

    @patch("deploy_tools.core.process.subprocess.run")
    def test_missing_executable(self, mock_run):
        """Test a missing executable raises CommandNotFoundError."""
        mock_run.side_effect = FileNotFoundError("npm")

        with pytest.raises(CommandNotFoundError) as exc_info:
            run_command(["npm", "run", "build"])

        assert "npm" in str(exc_info.value)

    @patch("deploy_tools.core.process.subprocess.run")
    def test_missing_working_directory(self, mock_run, tmp_path):
        """Test a missing cwd is not reported as a missing executable."""
        missing = tmp_path / "no-such-dir"

        with pytest.raises(WorkingDirectoryError) as exc_info:
            run_command(["npm", "run", "build"], cwd=str(missing))

        assert str(exc_info.value) == f"Project directory not found: {missing}"
        mock_run.assert_not_called()


class TestCommandResult:
    """Test cases for CommandResult."""

    def test_succeeded(self):
        """Test only exit status 0 counts as success."""
        assert CommandResult(args=["true"], returncode=0).succeeded
        assert not CommandResult(args=["false"], returncode=2).succeeded
