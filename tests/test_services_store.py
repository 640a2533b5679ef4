"""Unified tests for store (session_store, branch_store, schemas)."""

import json
from pathlib import Path
from unittest.mock import patch

from cherrybridge.models import PRRecord
from cherrybridge.services.store import BranchConfigStore, SessionRecord, SessionStore


def _record(label: str = "feature:ABC-123", prs: list[PRRecord] | None = None) -> SessionRecord:
    return SessionRecord(
        label=label,
        from_branch="development",
        to_branch="staging",
        promotion_branch="promote/feature-ABC-123",
        last_synced_at="2024-05-01T12:00:00Z",
        prs=prs
        if prs is not None
        else [
            PRRecord(number=1, title="First", merge_commit_sha="a" * 40, merged_at="2024-01-01T00:00:00Z"),
            PRRecord(number=2, title="Second", merge_commit_sha="b" * 40, merged_at="2024-01-02T00:00:00Z"),
        ],
        created_from_branch="main",
    )


class TestSessionStore:
    """SessionStore: JSON files under <state_root>/<identity>/<label>/session.json."""

    def test_save_then_load_round_trip(self, tmp_path: Path) -> None:
        """Saving then loading yields a field-for-field equal record."""
        store = SessionStore("acme-widgets", state_root=tmp_path)
        record = _record()
        store.save(record.label, record)
        loaded = store.load(record.label)
        assert loaded == record

    def test_path_uses_identity_and_sanitized_label(self, tmp_path: Path) -> None:
        store = SessionStore("acme-widgets", state_root=tmp_path)
        store.save("feature:ABC-123", _record())
        path = tmp_path / "acme-widgets" / "feature-ABC-123" / "session.json"
        assert path.is_file()
        assert store.session_path("feature:ABC-123") == path

    def test_json_uses_camel_case_keys(self, tmp_path: Path) -> None:
        store = SessionStore("acme-widgets", state_root=tmp_path)
        store.save("feature:ABC-123", _record())
        data = json.loads(store.session_path("feature:ABC-123").read_text(encoding="utf-8"))
        assert data["fromBranch"] == "development"
        assert data["promotionBranch"] == "promote/feature-ABC-123"
        assert data["lastSyncedAt"] == "2024-05-01T12:00:00Z"
        assert data["createdFromBranch"] == "main"
        assert data["prs"][0] == {
            "number": 1,
            "title": "First",
            "mergeCommitSha": "a" * 40,
            "mergedAt": "2024-01-01T00:00:00Z",
        }

    def test_save_overwrites_whole_record(self, tmp_path: Path) -> None:
        """A sync replaces the PR list rather than merging it."""
        store = SessionStore("acme-widgets", state_root=tmp_path)
        store.save("feat", _record("feat"))
        store.save("feat", _record("feat", prs=[]))
        loaded = store.load("feat")
        assert loaded is not None
        assert loaded.prs == []
        leftovers = [p.name for p in store.session_path("feat").parent.iterdir()]
        assert leftovers == ["session.json"]

    def test_load_missing_returns_none(self, tmp_path: Path) -> None:
        assert SessionStore("acme-widgets", state_root=tmp_path).load("nope") is None

    def test_load_corrupt_returns_none(self, tmp_path: Path) -> None:
        store = SessionStore("acme-widgets", state_root=tmp_path)
        path = store.session_path("feat")
        path.parent.mkdir(parents=True)
        path.write_text("{not json", encoding="utf-8")
        assert store.load("feat") is None

    def test_ensure_creates_directory(self, tmp_path: Path) -> None:
        store = SessionStore("acme-widgets", state_root=tmp_path)
        path = store.ensure("feature:X")
        assert path.is_dir()
        assert path.name == "feature-X"

    def test_delete_removes_session_dir(self, tmp_path: Path) -> None:
        store = SessionStore("acme-widgets", state_root=tmp_path)
        store.save("feat", _record("feat"))
        assert store.delete("feat") is True
        assert store.load("feat") is None
        assert not store.session_path("feat").parent.exists()
        assert store.delete("feat") is False

    def test_list_labels_returns_real_labels(self, tmp_path: Path) -> None:
        """Labels come from the records, not the sanitized directory names."""
        store = SessionStore("acme-widgets", state_root=tmp_path)
        store.save("feature:ABC-123", _record("feature:ABC-123"))
        store.save("hotfix", _record("hotfix"))
        store.ensure("empty-dir-only")
        assert store.list_labels() == ["feature:ABC-123", "hotfix"]

    def test_list_labels_empty(self, tmp_path: Path) -> None:
        assert SessionStore("acme-widgets", state_root=tmp_path / "missing").list_labels() == []

    def test_sessions_are_namespaced_by_repository(self, tmp_path: Path) -> None:
        SessionStore("acme-widgets", state_root=tmp_path).save("feat", _record("feat"))
        assert SessionStore("acme-gadgets", state_root=tmp_path).load("feat") is None

    def test_find_by_branch(self, tmp_path: Path) -> None:
        store = SessionStore("acme-widgets", state_root=tmp_path)
        store.save("feature:ABC-123", _record())
        found = store.find_by_branch("promote/feature-ABC-123")
        assert found is not None
        assert found.label == "feature:ABC-123"
        assert store.find_by_branch("main") is None
        assert store.find_by_branch("") is None


class TestBranchConfigStore:
    """BranchConfigStore: label/from/to kept in branch.<name>.cherrybridge.*."""

    def test_load_finds_branch_by_label(self) -> None:
        configs = {"promote/feat": {"label": "feat", "fromBranch": "development", "toBranch": "staging"}}
        with (
            patch("cherrybridge.services.store.branch_store.list_branch_configs", return_value=configs),
            patch("cherrybridge.services.store.branch_store.get_branch_config", return_value=configs["promote/feat"]),
        ):
            record = BranchConfigStore(Path("/tmp/repo")).load("feat")
        assert record is not None
        assert record.promotion_branch == "promote/feat"
        assert record.from_branch == "development"
        assert record.prs == []
        assert record.last_synced_at is None

    def test_load_missing_label(self) -> None:
        with patch("cherrybridge.services.store.branch_store.list_branch_configs", return_value={}):
            assert BranchConfigStore(Path("/tmp/repo")).load("feat") is None

    def test_save_writes_branch_config(self) -> None:
        record = _record("feat")
        with (
            patch("cherrybridge.services.store.branch_store.list_branch_configs", return_value={}),
            patch("cherrybridge.services.store.branch_store.set_branch_config") as mock_set,
        ):
            BranchConfigStore(Path("/tmp/repo")).save("feat", record)
        args = mock_set.call_args[0]
        assert args[:5] == ("promote/feature-ABC-123", "feat", "development", "staging", Path("/tmp/repo"))

    def test_save_moves_config_when_branch_changes(self) -> None:
        configs = {"promote/old": {"label": "feat", "fromBranch": "development", "toBranch": "staging"}}
        with (
            patch("cherrybridge.services.store.branch_store.list_branch_configs", return_value=configs),
            patch("cherrybridge.services.store.branch_store.set_branch_config"),
            patch("cherrybridge.services.store.branch_store.unset_branch_config") as mock_unset,
        ):
            BranchConfigStore(Path("/tmp/repo")).save("feat", _record("feat"))
        assert mock_unset.call_args[0][0] == "promote/old"

    def test_delete_and_list_labels(self) -> None:
        configs = {
            "promote/a": {"label": "a", "fromBranch": "d", "toBranch": "s"},
            "promote/b": {"label": "b", "fromBranch": "d", "toBranch": "s"},
        }
        with (
            patch("cherrybridge.services.store.branch_store.list_branch_configs", return_value=configs),
            patch("cherrybridge.services.store.branch_store.unset_branch_config") as mock_unset,
        ):
            store = BranchConfigStore(Path("/tmp/repo"))
            assert store.list_labels() == ["a", "b"]
            assert store.delete("b") is True
            assert store.delete("zzz") is False
        assert mock_unset.call_count == 1
        assert mock_unset.call_args[0][0] == "promote/b"
