"""Error kinds raised by cherrybridge.

A cherry-pick conflict is not an error: the workflow reports it as a
"conflicted" result and exits cleanly.
"""


class CherrybridgeError(Exception):
    """Base class for all errors reported to the user."""

    pass


class NotARepositoryError(CherrybridgeError):
    """Raised when the current directory is not inside a git working tree."""

    pass


class DirtyWorkingTreeError(CherrybridgeError):
    """Raised when uncommitted changes (or a stray cherry-pick) block a run."""

    pass


class HostToolUnavailableError(CherrybridgeError):
    """Raised when the code host tool is missing or not authenticated."""

    pass


class HostQueryFailedError(CherrybridgeError):
    """Raised when a code host query fails (network, API, bad output)."""

    pass


class InvalidConfigurationError(CherrybridgeError):
    """Raised when label/from/to/promotion branch do not form a valid config."""

    pass


class NoSessionFoundError(CherrybridgeError):
    """Raised when no stored session matches the requested label."""

    pass


class CommandNotFoundError(CherrybridgeError):
    """Raised when an external binary (git, gh) is not on PATH."""

    def __init__(self, command: str) -> None:
        super().__init__(f"Command not found: {command}")
        self.command = command


class GitRunnerError(CherrybridgeError):
    """Raised when a git command expected to succeed exits non-zero."""

    def __init__(self, message: str, stderr: str = "") -> None:
        super().__init__(message)
        self.stderr = stderr
