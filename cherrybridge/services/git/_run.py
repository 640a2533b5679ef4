"""Internal helpers: run git commands, GitRunnerError."""

import logging
from pathlib import Path

from cherrybridge.errors import GitRunnerError
from cherrybridge.services.process import CommandResult, run_command


def _run_git(
    args: list[str],
    cwd: Path,
    log: logging.Logger | None = None,
    check: bool = True,
    stream: bool = False,
) -> CommandResult:
    """Run git command and return its result.

    With check=True a non-zero exit raises GitRunnerError carrying the
    captured stderr. With check=False the caller inspects the result.
    CommandNotFoundError propagates when git is not installed.
    """
    result = run_command(["git"] + args, cwd=cwd, stream=stream)
    if check and not result.ok:
        err = (result.stderr or result.stdout or "").strip()
        if log:
            log.warning("Git %s failed: %s", args, err)
        raise GitRunnerError(f"git {' '.join(args)}: {err or f'exit code {result.returncode}'}", stderr=err)
    return result
