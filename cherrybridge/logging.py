"""Logging for the cherrybridge command line.

Levels (inclusive):
- ERROR: the reason a command failed
- WARNING: failed git/gh calls, cherry-picks stopped on conflicts
- INFO: progress of a promotion run (default)
- DEBUG: every git/gh command run

Level comes from --log-level, else logging.level in .cherrybridge.yaml or
LOGGING_LEVEL. Output is the bare message so it reads like the rest of
the command's terminal output; at DEBUG the logger name and level are
prefixed unless a custom format is configured.
"""

import logging

from cherrybridge.config import LoggingConfig

# Supported levels only (DEBUG, INFO, WARNING, ERROR)
LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}

DEFAULT_FORMAT = "%(message)s"
DEBUG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def _resolve_level(level: str) -> int:
    """Map level name to logging constant.

    Falls back to INFO if unknown.
    """
    return LEVELS.get(level.upper().strip(), logging.INFO)


class CherrybridgeLogging:
    """Configures the root logger for one command run."""

    def __init__(self, config: LoggingConfig) -> None:
        self._config = config

    def setup(self, level_override: str | None = None) -> int:
        """Apply level and format to the root logger.

        Args:
            level_override: --log-level value; wins over the configured level.

        Returns:
            The effective logging level.
        """
        level = _resolve_level(level_override or self._config.level)
        fmt = self._config.format or DEFAULT_FORMAT
        if level == logging.DEBUG and fmt == DEFAULT_FORMAT:
            fmt = DEBUG_FORMAT
        logging.basicConfig(level=level, format=fmt, force=True)
        return level
