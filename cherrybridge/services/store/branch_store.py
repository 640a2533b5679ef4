"""Session storage attached to the promotion branch in the repository config.

Keys: branch.<promotion>.cherrybridge.{label,fromBranch,toBranch}. This
backend keeps no PR list and no sync timestamp; the workflow refetches
candidates on every run anyway.
"""

import logging
from pathlib import Path
from typing import List

from cherrybridge.services.git.branches import (
    get_branch_config,
    list_branch_configs,
    set_branch_config,
    unset_branch_config,
)
from cherrybridge.services.store.base import ConfigStore
from cherrybridge.services.store.schemas import SessionRecord

LOG = logging.getLogger("cherrybridge.services.store.branch_store")


def _record_from_config(branch: str, config: dict[str, str]) -> SessionRecord | None:
    if not config.get("label") or not config.get("fromBranch") or not config.get("toBranch"):
        return None
    return SessionRecord(
        label=config["label"],
        from_branch=config["fromBranch"],
        to_branch=config["toBranch"],
        promotion_branch=branch,
    )


class BranchConfigStore(ConfigStore):
    """ConfigStore backed by per-branch git config entries."""

    def __init__(self, repo_dir: Path) -> None:
        self._repo_dir = Path(repo_dir)

    def _branch_for(self, label: str) -> str | None:
        for branch, config in list_branch_configs(self._repo_dir).items():
            if config.get("label") == label:
                return branch
        return None

    def ensure(self, label: str) -> None:
        return None

    def load(self, label: str) -> SessionRecord | None:
        branch = self._branch_for(label)
        if branch is None:
            return None
        return _record_from_config(branch, get_branch_config(branch, self._repo_dir))

    def save(self, label: str, record: SessionRecord) -> None:
        previous = self._branch_for(label)
        if previous is not None and previous != record.promotion_branch:
            unset_branch_config(previous, self._repo_dir, log=LOG)
        set_branch_config(
            record.promotion_branch,
            label,
            record.from_branch,
            record.to_branch,
            self._repo_dir,
            log=LOG,
        )

    def delete(self, label: str) -> bool:
        branch = self._branch_for(label)
        if branch is None:
            return False
        unset_branch_config(branch, self._repo_dir, log=LOG)
        LOG.info("Removed promotion config for label %r from branch %s", label, branch)
        return True

    def list_labels(self) -> List[str]:
        labels = [c["label"] for c in list_branch_configs(self._repo_dir).values() if c.get("label")]
        return sorted(set(labels))

    def find_by_branch(self, branch: str) -> SessionRecord | None:
        if not branch:
            return None
        return _record_from_config(branch, get_branch_config(branch, self._repo_dir))
