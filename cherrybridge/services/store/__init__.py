"""Storage for promotion sessions (JSON session files or branch config)."""

from cherrybridge.services.store.base import ConfigStore
from cherrybridge.services.store.branch_store import BranchConfigStore
from cherrybridge.services.store.schemas import SessionRecord
from cherrybridge.services.store.session_store import DEFAULT_STATE_DIR, SessionStore

__all__ = [
    "DEFAULT_STATE_DIR",
    "BranchConfigStore",
    "ConfigStore",
    "SessionRecord",
    "SessionStore",
]
