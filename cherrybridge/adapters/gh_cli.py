"""GitHub CLI (gh) adapter."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

from cherrybridge.adapters.base import HostAdapter, sort_by_merged_at
from cherrybridge.errors import CommandNotFoundError, HostQueryFailedError, HostToolUnavailableError
from cherrybridge.models import PRRecord
from cherrybridge.services.process import CommandResult, run_command

DEFAULT_LIMIT = 1000

PR_JSON_FIELDS = "number,title,mergedAt,mergeCommit"

LOG = logging.getLogger("cherrybridge.adapters.gh_cli")


def _pr_from_gh(data: Dict[str, Any]) -> PRRecord | None:
    merge_commit = data.get("mergeCommit") or {}
    sha = merge_commit.get("oid") if isinstance(merge_commit, dict) else None
    if not sha or not data.get("mergedAt"):
        LOG.debug("Skipping PR #%s: no merge commit reported", data.get("number"))
        return None
    return PRRecord(
        number=data["number"],
        title=data.get("title") or "",
        merge_commit_sha=sha,
        merged_at=data["mergedAt"],
    )


class GhCliAdapter(HostAdapter):
    """Queries GitHub through an authenticated gh CLI."""

    def __init__(self, repo_dir: Path, command: str = "gh", limit: int = DEFAULT_LIMIT) -> None:
        self._repo_dir = Path(repo_dir)
        self._command = command
        self._limit = limit

    def _run(self, args: List[str]) -> CommandResult:
        try:
            return run_command([self._command] + args, cwd=self._repo_dir)
        except CommandNotFoundError as e:
            raise HostToolUnavailableError(
                f"GitHub CLI ({self._command}) is required. Install it and run `gh auth login`."
            ) from e

    def ensure_available(self) -> None:
        if not self._run(["--version"]).ok:
            raise HostToolUnavailableError(f"{self._command} --version failed; is the GitHub CLI installed?")
        auth = self._run(["auth", "status"])
        if not auth.ok:
            detail = (auth.stderr or auth.stdout).strip()
            raise HostToolUnavailableError(f"GitHub CLI is not authenticated. Run `gh auth login`. {detail}".strip())

    def list_merged_prs(self, base_branch: str, label: str) -> List[PRRecord]:
        result = self._run(
            [
                "pr",
                "list",
                "--state",
                "merged",
                "--base",
                base_branch,
                "--label",
                label,
                "--json",
                PR_JSON_FIELDS,
                "--limit",
                str(self._limit),
            ]
        )
        if not result.ok:
            err = result.stderr.strip() or f"exit code {result.returncode}"
            LOG.warning("gh pr list failed: %s", err)
            raise HostQueryFailedError(f"Failed to list merged PRs: {err}")
        try:
            data = json.loads(result.stdout or "[]")
        except json.JSONDecodeError as e:
            raise HostQueryFailedError(f"gh returned invalid JSON: {e}") from e
        if not isinstance(data, list):
            raise HostQueryFailedError("gh returned unexpected JSON (expected a list)")
        prs = [pr for pr in (_pr_from_gh(d) for d in data) if pr is not None]
        LOG.debug("gh returned %s PR(s), %s with merge commits", len(data), len(prs))
        return sort_by_merged_at(prs)
