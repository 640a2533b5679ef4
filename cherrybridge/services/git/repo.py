"""Repository checks and identity: work tree, clean state, current branch.

resolve_repository() builds the RepositoryContext that every other git,
host and store call receives instead of relying on the process cwd.
"""

import logging
import re
from pathlib import Path

from pydantic import BaseModel, Field

from cherrybridge.errors import DirtyWorkingTreeError, NotARepositoryError
from cherrybridge.services.git._run import _run_git

# github.com/owner/repo(.git), git@host:owner/repo(.git), ssh://host/owner/repo
_REMOTE_OWNER_REPO_RE = re.compile(r"[/:]([^/:]+)/([^/]+?)(?:\.git)?/?$")


class RepositoryContext(BaseModel):
    """Resolved repository: root path plus identity derived from the remote."""

    root: Path = Field(..., description="Top-level directory of the working tree")
    identity: str = Field(..., description="Storage namespace, e.g. owner-repo or directory name")
    remote_url: str | None = Field(default=None, description="remote.origin.url if configured")
    slug: str | None = Field(default=None, description="owner/repo parsed from the remote URL")

    model_config = {"frozen": True}


def parse_remote_slug(remote_url: str | None) -> str | None:
    """Return owner/repo from a remote URL, or None if it cannot be parsed."""
    if not remote_url:
        return None
    match = _REMOTE_OWNER_REPO_RE.search(remote_url.strip())
    if not match:
        return None
    return f"{match.group(1)}/{match.group(2)}"


def repo_identity(remote_url: str | None, root: Path) -> str:
    """Derive a stable storage namespace for the repository.

    Prefers owner-repo from the remote URL; falls back to the directory
    name of the working tree root.
    """
    slug = parse_remote_slug(remote_url)
    if slug:
        return slug.replace("/", "-")
    return Path(root).name


def is_inside_work_tree(repo_dir: Path) -> bool:
    """True if repo_dir is inside a git working tree."""
    result = _run_git(["rev-parse", "--is-inside-work-tree"], cwd=repo_dir, check=False)
    return result.ok and result.stdout.strip() == "true"


def resolve_repository(start_dir: Path | None = None, log: logging.Logger | None = None) -> RepositoryContext:
    """Resolve the repository containing start_dir (cwd if None).

    Raises:
        NotARepositoryError: start_dir is not inside a git working tree.
    """
    cwd = Path(start_dir) if start_dir is not None else Path.cwd()
    if not is_inside_work_tree(cwd):
        raise NotARepositoryError("Not in a git repository. Run this command from inside a git working tree.")
    root = Path(_run_git(["rev-parse", "--show-toplevel"], cwd=cwd, log=log).stdout.strip())
    remote = _run_git(["config", "--get", "remote.origin.url"], cwd=cwd, check=False)
    remote_url = remote.stdout.strip() if remote.ok and remote.stdout.strip() else None
    ctx = RepositoryContext(
        root=root,
        identity=repo_identity(remote_url, root),
        remote_url=remote_url,
        slug=parse_remote_slug(remote_url),
    )
    if log:
        log.debug("Repository %s at %s", ctx.identity, ctx.root)
    return ctx


def is_working_tree_clean(repo_dir: Path, log: logging.Logger | None = None) -> bool:
    """True if git status --porcelain reports nothing."""
    result = _run_git(["status", "--porcelain"], cwd=repo_dir, log=log)
    return not result.stdout.strip()


def ensure_clean_working_tree(repo_dir: Path, log: logging.Logger | None = None) -> None:
    """Raise DirtyWorkingTreeError if the working tree has uncommitted changes."""
    if not is_working_tree_clean(repo_dir, log=log):
        raise DirtyWorkingTreeError("Working tree is not clean. Commit or stash your changes first.")


def current_branch(repo_dir: Path, log: logging.Logger | None = None) -> str:
    """Name of the checked out branch (empty string on detached HEAD)."""
    return _run_git(["branch", "--show-current"], cwd=repo_dir, log=log).stdout.strip()
