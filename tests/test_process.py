"""Tests for cherrybridge.services.process (run_command, CommandResult)."""

import sys

import pytest

from cherrybridge.errors import CommandNotFoundError
from cherrybridge.services.process import CommandResult, run_command


def test_run_command_captures_stdout_and_exit_code() -> None:
    """run_command returns captured stdout and a zero exit code."""
    result = run_command([sys.executable, "-c", "print('hello')"])
    assert result.ok
    assert result.returncode == 0
    assert result.stdout.strip() == "hello"


def test_run_command_captures_failure() -> None:
    """Non-zero exit is returned, not raised; stderr is captured."""
    result = run_command([sys.executable, "-c", "import sys; sys.stderr.write('boom'); sys.exit(3)"])
    assert not result.ok
    assert result.returncode == 3
    assert "boom" in result.stderr


def test_run_command_missing_binary_raises_not_found() -> None:
    """A program missing from PATH is a distinct CommandNotFoundError."""
    with pytest.raises(CommandNotFoundError) as exc_info:
        run_command(["cherrybridge-definitely-not-a-real-binary"])
    assert exc_info.value.command == "cherrybridge-definitely-not-a-real-binary"


def test_run_command_uses_cwd(tmp_path) -> None:
    """cwd is passed to the child process."""
    result = run_command([sys.executable, "-c", "import os; print(os.getcwd())"], cwd=tmp_path)
    assert result.stdout.strip() == str(tmp_path.resolve())


def test_command_result_repr_and_ok() -> None:
    result = CommandResult(["git", "status"], 1)
    assert not result.ok
    assert "git" in repr(result)
