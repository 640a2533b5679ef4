"""Integration tests against a real git repository (skipped without git)."""

import shutil
import subprocess
from pathlib import Path

import pytest

from cherrybridge.models import PRRecord
from cherrybridge.services.git import (
    abort_cherry_pick,
    branch_exists,
    cherry_pick_commit,
    cherry_pick_in_progress,
    continue_cherry_pick,
    ensure_promotion_branch,
    get_branch_config,
    has_pick_marker,
    list_branch_configs,
    resolve_repository,
    set_branch_config,
    unset_branch_config,
)
from cherrybridge.services.promotion import compute_pending

pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


def _git(repo: Path, *args: str) -> str:
    return subprocess.run(["git", *args], cwd=repo, check=True, capture_output=True, text=True).stdout.strip()


def _commit(repo: Path, path: str, content: str, message: str) -> None:
    (repo / path).write_text(content, encoding="utf-8")
    _git(repo, "add", path)
    _git(repo, "commit", "-m", message)


def _pr(number: int, sha: str) -> PRRecord:
    return PRRecord(number=number, title=f"PR {number}", merge_commit_sha=sha, merged_at=f"2024-01-0{number}T00:00:00Z")


def _merge_feature(repo: Path, name: str, path: str, content: str) -> str:
    """Simulate a PR: branch off development, commit, merge --no-ff. Returns merge SHA."""
    _git(repo, "checkout", "-b", name, "development")
    _commit(repo, path, content, f"work on {name}")
    _git(repo, "checkout", "development")
    _git(repo, "merge", "--no-ff", name, "-m", f"Merge {name}")
    return _git(repo, "rev-parse", "HEAD")


@pytest.fixture
def repo(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Repo whose staging and development branches share one initial commit."""
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    for key, value in {
        "GIT_AUTHOR_NAME": "Test",
        "GIT_AUTHOR_EMAIL": "test@example.com",
        "GIT_COMMITTER_NAME": "Test",
        "GIT_COMMITTER_EMAIL": "test@example.com",
    }.items():
        monkeypatch.setenv(key, value)
    path = tmp_path / "widgets"
    path.mkdir()
    _git(path, "init", "-q")
    _git(path, "checkout", "-q", "-b", "staging")
    _commit(path, "README.md", "base\n", "initial")
    _git(path, "branch", "development")
    return path


def test_resolve_repository_uses_directory_name_without_remote(repo: Path) -> None:
    ctx = resolve_repository(repo)
    assert ctx.identity == "widgets"
    assert ctx.root.resolve() == repo.resolve()


def test_cherry_pick_merge_commit_records_marker(repo: Path) -> None:
    """-m 1 -x applies a merge commit and leaves a detectable marker."""
    sha_a = _merge_feature(repo, "feature-a", "a.txt", "a\n")
    sha_b = _merge_feature(repo, "feature-b", "b.txt", "b\n")

    assert ensure_promotion_branch("promote/feat", "staging", repo) is True
    assert not has_pick_marker(sha_a, repo)

    assert cherry_pick_commit(sha_a, repo) == "success"
    assert has_pick_marker(sha_a, repo)
    assert f"(cherry picked from commit {sha_a})" in _git(repo, "log", "-1", "--format=%B")
    assert (repo / "a.txt").exists()

    pending = compute_pending([_pr(1, sha_a), _pr(2, sha_b)], repo)
    assert [pr.number for pr in pending] == [2]

    # Re-running setup keeps the branch and its picks.
    _git(repo, "checkout", "staging")
    assert ensure_promotion_branch("promote/feat", "staging", repo) is False
    assert has_pick_marker(sha_a, repo)


def test_conflicting_pick_then_abort(repo: Path) -> None:
    """A conflicting pick reports conflict and abort restores a clean tree."""
    sha = _merge_feature(repo, "feature-c", "README.md", "from development\n")
    ensure_promotion_branch("promote/conflict", "staging", repo)
    _commit(repo, "README.md", "from promotion\n", "conflicting change")

    assert cherry_pick_commit(sha, repo) == "conflict"
    assert cherry_pick_in_progress(repo)
    assert abort_cherry_pick(repo) is True
    assert not cherry_pick_in_progress(repo)
    assert _git(repo, "status", "--porcelain") == ""
    assert abort_cherry_pick(repo) is False


def _conflicted_pick(repo: Path, name: str) -> str:
    """Leave a cherry-pick of a development merge stopped on README.md. Returns the merge SHA."""
    sha = _merge_feature(repo, name, "README.md", "from development\n")
    ensure_promotion_branch(f"promote/{name}", "staging", repo)
    _commit(repo, "README.md", "from promotion\n", "conflicting change")
    assert cherry_pick_commit(sha, repo) == "conflict"
    return sha


def test_continue_after_resolution_keeps_marker(repo: Path) -> None:
    """A resolved pick finished with continue is recorded, so it is no longer pending."""
    sha = _conflicted_pick(repo, "feature-d")
    (repo / "README.md").write_text("resolved\n", encoding="utf-8")
    _git(repo, "add", "README.md")

    assert continue_cherry_pick(repo) == "success"
    assert not cherry_pick_in_progress(repo)
    assert has_pick_marker(sha, repo)
    assert compute_pending([_pr(1, sha)], repo) == []
    assert (repo / "README.md").read_text(encoding="utf-8") == "resolved\n"


def test_continue_with_unresolved_files_stays_conflicted(repo: Path) -> None:
    sha = _conflicted_pick(repo, "feature-e")

    assert continue_cherry_pick(repo) == "conflict"
    assert cherry_pick_in_progress(repo)
    assert not has_pick_marker(sha, repo)
    assert abort_cherry_pick(repo) is True


def test_branch_exists_local_and_remote(repo: Path) -> None:
    _git(repo, "update-ref", "refs/remotes/origin/release", "HEAD")
    _git(repo, "branch", "hotfix/one")
    assert branch_exists("staging", repo)
    assert branch_exists("release", repo)
    assert not branch_exists("hotfix", repo)
    assert not branch_exists("missing", repo)


def test_branch_config_round_trip(repo: Path) -> None:
    set_branch_config("promote/feat", "feature:ABC", "development", "staging", repo)
    assert get_branch_config("promote/feat", repo) == {
        "label": "feature:ABC",
        "fromBranch": "development",
        "toBranch": "staging",
    }
    assert list_branch_configs(repo)["promote/feat"]["fromBranch"] == "development"
    unset_branch_config("promote/feat", repo)
    assert get_branch_config("promote/feat", repo) == {}
