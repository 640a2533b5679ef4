"""Run external commands (git, gh) and capture their result.

No retries and no timeout: each command runs to completion before the
caller continues.
"""

import logging
import subprocess
from pathlib import Path

from cherrybridge.errors import CommandNotFoundError

LOG = logging.getLogger("cherrybridge.services.process")


class CommandResult:
    """Exit status and captured output of one command."""

    def __init__(self, args: list[str], returncode: int, stdout: str = "", stderr: str = "") -> None:
        self.args = args
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def __repr__(self) -> str:
        return f"CommandResult(args={self.args!r}, returncode={self.returncode})"


def run_command(
    cmd: list[str],
    cwd: Path | None = None,
    stream: bool = False,
    env: dict[str, str] | None = None,
) -> CommandResult:
    """Run cmd and return its CommandResult.

    Args:
        cmd: Program and arguments.
        cwd: Working directory; current directory if None.
        stream: If True, stdout/stderr go straight to the terminal (used for
            cherry-pick so the operator sees conflict output) and are not
            captured.
        env: Optional full environment for the child.

    Raises:
        CommandNotFoundError: The program is not on PATH.
    """
    LOG.debug("Running %s (cwd=%s)", cmd, cwd)
    try:
        if stream:
            proc = subprocess.run(cmd, cwd=cwd, env=env, check=False)
            return CommandResult(list(cmd), proc.returncode)
        proc = subprocess.run(cmd, cwd=cwd, env=env, check=False, capture_output=True, text=True)
    except FileNotFoundError as e:
        raise CommandNotFoundError(cmd[0]) from e
    return CommandResult(list(cmd), proc.returncode, proc.stdout or "", proc.stderr or "")
