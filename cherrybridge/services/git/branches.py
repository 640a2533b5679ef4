"""Label sanitization, promotion branch setup, and branch-attached config."""

import logging
import re
from pathlib import Path

from cherrybridge.services.git._run import _run_git

# Anything outside [A-Za-z0-9._-] collapses to a single dash
_INVALID_LABEL_CHARS_RE = re.compile(r"[^A-Za-z0-9._-]+")

DEFAULT_BRANCH_PREFIX = "promote/"

BRANCH_CONFIG_FIELDS = ("label", "fromBranch", "toBranch")
_BRANCH_CONFIG_KEY_RE = re.compile(r"^branch\.(.+)\.cherrybridge\.(label|frombranch|tobranch)$", re.IGNORECASE)
_CANONICAL_FIELD = {field.lower(): field for field in BRANCH_CONFIG_FIELDS}


def sanitize_label(label: str) -> str:
    """Map a label to a string safe for paths and branch names.

    Every run of characters outside [A-Za-z0-9._-] becomes one dash.
    Idempotent: sanitize_label(sanitize_label(x)) == sanitize_label(x).
    """
    return _INVALID_LABEL_CHARS_RE.sub("-", label)


def promotion_branch_name(label: str, prefix: str = DEFAULT_BRANCH_PREFIX) -> str:
    """Default promotion branch for a label, e.g. promote/feature-ABC-123."""
    return f"{prefix}{sanitize_label(label)}"


def fetch_all(repo_dir: Path, log: logging.Logger | None = None) -> bool:
    """Fetch all remotes with prune. Best effort: returns False on failure."""
    result = _run_git(["fetch", "--all", "--prune"], cwd=repo_dir, check=False)
    if not result.ok:
        if log:
            log.warning("git fetch --all failed, continuing with local refs: %s", result.stderr.strip())
        return False
    return True


def pull_ff_only(repo_dir: Path, log: logging.Logger | None = None) -> bool:
    """Fast-forward the current branch from its upstream. Best effort."""
    result = _run_git(["pull", "--ff-only"], cwd=repo_dir, check=False)
    if not result.ok and log:
        log.info("Could not fast-forward (no upstream?): %s", result.stderr.strip())
    return result.ok


def branch_exists_locally(name: str, repo_dir: Path) -> bool:
    """True if refs/heads/<name> exists."""
    result = _run_git(["rev-parse", "--verify", "--quiet", f"refs/heads/{name}"], cwd=repo_dir, check=False)
    return result.ok


def branch_exists(name: str, repo_dir: Path) -> bool:
    """True if name exists locally or as a remote-tracking branch checkout can start from."""
    result = _run_git(
        ["for-each-ref", "--format=%(refname)", f"refs/heads/{name}", f"refs/remotes/*/{name}"],
        cwd=repo_dir,
        check=False,
    )
    if not result.ok:
        return False
    # Patterns also match by prefix up to a slash, so compare full names
    local = f"refs/heads/{name}"
    return any(
        ref == local or (ref.startswith("refs/remotes/") and ref.split("/", 3)[-1] == name)
        for ref in result.stdout.split()
    )


def checkout_branch(name: str, repo_dir: Path, log: logging.Logger | None = None) -> None:
    """Checkout an existing branch."""
    _run_git(["checkout", name], cwd=repo_dir, log=log)
    if log:
        log.info("Checked out branch %s", name)


def checkout_new_branch(name: str, base: str, repo_dir: Path, log: logging.Logger | None = None) -> None:
    """Create branch name from base and check it out."""
    _run_git(["checkout", "-b", name, base], cwd=repo_dir, log=log)
    if log:
        log.info("Created branch %s from %s", name, base)


def ensure_promotion_branch(
    name: str,
    base: str,
    repo_dir: Path,
    log: logging.Logger | None = None,
) -> bool:
    """Checkout the promotion branch, creating it from base if missing.

    An existing branch is checked out as-is so picks already on it are kept.
    Otherwise base is checked out, fast-forwarded when possible, and the
    promotion branch is created from it.

    Returns:
        True if the branch was created, False if it already existed.
    """
    if branch_exists_locally(name, repo_dir):
        checkout_branch(name, repo_dir, log=log)
        return False
    checkout_branch(base, repo_dir, log=log)
    pull_ff_only(repo_dir, log=log)
    checkout_new_branch(name, base, repo_dir, log=log)
    return True


def _branch_config_key(branch: str, field: str) -> str:
    return f"branch.{branch}.cherrybridge.{field}"


def get_branch_config(branch: str, repo_dir: Path) -> dict[str, str]:
    """Read label/fromBranch/toBranch attached to branch; missing keys are omitted."""
    config: dict[str, str] = {}
    for field in BRANCH_CONFIG_FIELDS:
        result = _run_git(["config", "--get", _branch_config_key(branch, field)], cwd=repo_dir, check=False)
        if result.ok and result.stdout.strip():
            config[field] = result.stdout.strip()
    return config


def set_branch_config(
    branch: str,
    label: str,
    from_branch: str,
    to_branch: str,
    repo_dir: Path,
    log: logging.Logger | None = None,
) -> None:
    """Attach label/fromBranch/toBranch to branch in the repository config."""
    values = {"label": label, "fromBranch": from_branch, "toBranch": to_branch}
    for field, value in values.items():
        _run_git(["config", _branch_config_key(branch, field), value], cwd=repo_dir, log=log)
    if log:
        log.debug("Stored promotion config on branch %s", branch)


def unset_branch_config(branch: str, repo_dir: Path, log: logging.Logger | None = None) -> None:
    """Remove the cherrybridge keys from branch. Missing keys are ignored."""
    for field in BRANCH_CONFIG_FIELDS:
        _run_git(["config", "--unset", _branch_config_key(branch, field)], cwd=repo_dir, check=False)
    if log:
        log.debug("Removed promotion config from branch %s", branch)


def list_branch_configs(repo_dir: Path) -> dict[str, dict[str, str]]:
    """All branches carrying cherrybridge config, keyed by branch name.

    git prints config variable names lowercased, so keys are matched
    case-insensitively and mapped back to their canonical field names.
    """
    result = _run_git(["config", "--get-regexp", r"^branch\..*\.cherrybridge\."], cwd=repo_dir, check=False)
    configs: dict[str, dict[str, str]] = {}
    if not result.ok:
        return configs
    for line in result.stdout.splitlines():
        key, _, value = line.partition(" ")
        match = _BRANCH_CONFIG_KEY_RE.match(key)
        if not match:
            continue
        branch, field = match.group(1), _CANONICAL_FIELD[match.group(2).lower()]
        configs.setdefault(branch, {})[field] = value.strip()
    return configs
