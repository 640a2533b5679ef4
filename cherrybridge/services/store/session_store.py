"""Session storage as JSON files outside the working tree.

One file per label: <state_root>/<repo-identity>/<sanitized-label>/session.json.
Living outside the clone, sessions survive branch switches and are never
committed. Saves overwrite the whole file atomically.
"""

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import List

from pydantic import ValidationError

from cherrybridge.services.git.branches import sanitize_label
from cherrybridge.services.store.base import ConfigStore
from cherrybridge.services.store.schemas import SessionRecord

DEFAULT_STATE_DIR = Path.home() / ".cherrybridge"
SESSION_FILE = "session.json"

LOG = logging.getLogger("cherrybridge.services.store.session_store")


class SessionStore(ConfigStore):
    """ConfigStore backed by session.json files under a per-user state root."""

    def __init__(self, identity: str, state_root: Path | None = None) -> None:
        self._root = Path(state_root or DEFAULT_STATE_DIR).expanduser() / sanitize_label(identity)

    @property
    def root(self) -> Path:
        return self._root

    def _session_dir(self, label: str) -> Path:
        return self._root / sanitize_label(label)

    def session_path(self, label: str) -> Path:
        return self._session_dir(label) / SESSION_FILE

    def ensure(self, label: str) -> Path:
        path = self._session_dir(label)
        path.mkdir(parents=True, exist_ok=True)
        return path

    def load(self, label: str) -> SessionRecord | None:
        """Load session for label. Returns None if missing or invalid."""
        path = self.session_path(label)
        if not path.is_file():
            return None
        try:
            return SessionRecord.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            LOG.warning("Failed to load session %s: %s", path, e)
            return None

    def save(self, label: str, record: SessionRecord) -> None:
        """Write session for label via a temp file and rename."""
        path = self.session_path(label)
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = record.model_dump_json(by_alias=True, indent=2)
        fd, tmp_name = tempfile.mkstemp(prefix=".session-", suffix=".json", dir=path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        LOG.debug("Saved session %r to %s", label, path)

    def delete(self, label: str) -> bool:
        path = self._session_dir(label)
        if not path.exists():
            return False
        shutil.rmtree(path)
        LOG.info("Removed session for label %r", label)
        return True

    def list_labels(self) -> List[str]:
        """Labels of stored sessions, as written in each record."""
        if not self._root.is_dir():
            return []
        labels: List[str] = []
        for entry in sorted(self._root.iterdir()):
            if not (entry / SESSION_FILE).is_file():
                continue
            record = self.load(entry.name)
            labels.append(record.label if record is not None else entry.name)
        return labels
