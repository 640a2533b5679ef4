"""cherrybridge: promote labeled merged PRs between branches by cherry-picking."""

__version__ = "0.1.0"
