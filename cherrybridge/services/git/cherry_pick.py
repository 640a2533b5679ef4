"""Cherry-pick PR merge commits and detect ones already applied.

Commits are picked with -m 1 (mainline is the first parent, so a merge
commit applies as the diff it introduced into the base branch) and -x,
which appends the marker line used for idempotence checks.
"""

import logging
from pathlib import Path
from typing import Literal

from cherrybridge.errors import GitRunnerError
from cherrybridge.services.git._run import _run_git

PickOutcome = Literal["success", "conflict"]


def cherry_pick_in_progress(repo_dir: Path) -> bool:
    """True if CHERRY_PICK_HEAD exists (a pick is waiting for resolution)."""
    result = _run_git(["rev-parse", "--verify", "--quiet", "CHERRY_PICK_HEAD"], cwd=repo_dir, check=False)
    return result.ok


def cherry_pick_head(repo_dir: Path) -> str | None:
    """SHA of the commit being cherry-picked, or None if nothing is in progress."""
    result = _run_git(["rev-parse", "--verify", "--quiet", "CHERRY_PICK_HEAD"], cwd=repo_dir, check=False)
    if not result.ok:
        return None
    return result.stdout.strip() or None


def cherry_pick_commit(sha: str, repo_dir: Path, log: logging.Logger | None = None) -> PickOutcome:
    """Cherry-pick sha onto the current branch with mainline 1 and marker.

    Output streams to the terminal so the operator sees conflicted paths.

    Returns:
        "success" when the commit applied cleanly, "conflict" when git
        stopped with CHERRY_PICK_HEAD set.

    Raises:
        GitRunnerError: git failed without entering a cherry-pick (e.g.
            unknown commit).
    """
    result = _run_git(["cherry-pick", "-m", "1", "-x", sha], cwd=repo_dir, check=False, stream=True)
    if result.ok:
        return "success"
    if cherry_pick_in_progress(repo_dir):
        if log:
            log.warning("Cherry-pick of %s stopped with conflicts", sha[:8])
        return "conflict"
    raise GitRunnerError(f"git cherry-pick {sha} failed with exit code {result.returncode}")


def continue_cherry_pick(repo_dir: Path, log: logging.Logger | None = None) -> PickOutcome:
    """Continue the in-progress cherry-pick with the staged resolution.

    --no-edit keeps the prepared message, including the -x marker line.
    """
    result = _run_git(["cherry-pick", "--continue", "--no-edit"], cwd=repo_dir, check=False, stream=True)
    if result.ok and not cherry_pick_in_progress(repo_dir):
        if log:
            log.info("Continued cherry-pick")
        return "success"
    if log:
        log.warning("Cherry-pick still has unresolved conflicts")
    return "conflict"


def abort_cherry_pick(repo_dir: Path, log: logging.Logger | None = None) -> bool:
    """Abort the in-progress cherry-pick, discarding any staged resolution.

    No-op when nothing is in progress.

    Returns:
        True if a cherry-pick was aborted.
    """
    if not cherry_pick_in_progress(repo_dir):
        if log:
            log.debug("No cherry-pick in progress, nothing to abort")
        return False
    _run_git(["cherry-pick", "--abort"], cwd=repo_dir, log=log)
    if log:
        log.info("Aborted in-progress cherry-pick")
    return True


def has_pick_marker(sha: str, repo_dir: Path, ref: str = "HEAD") -> bool:
    """True if any commit message reachable from ref contains sha.

    Matches the SHA as a fixed substring rather than the exact marker line;
    full 40-character SHAs do not collide in practice.
    """
    result = _run_git(
        ["log", "--fixed-strings", "--grep", sha, "--format=%H", "-n", "1", ref],
        cwd=repo_dir,
        check=False,
    )
    if not result.ok:
        return False
    return bool(result.stdout.strip())
