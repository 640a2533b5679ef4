"""Code host adapters."""

from cherrybridge.adapters.base import HostAdapter, sort_by_merged_at
from cherrybridge.adapters.gh_cli import GhCliAdapter
from cherrybridge.adapters.github import GitHubApiAdapter

__all__ = ["GhCliAdapter", "GitHubApiAdapter", "HostAdapter", "sort_by_merged_at"]
