"""Abstract interface for persisting promotion sessions."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List

from cherrybridge.services.store.schemas import SessionRecord


class ConfigStore(ABC):
    """Where the {label, from, to, promotion branch} tuple lives between runs."""

    @abstractmethod
    def ensure(self, label: str) -> Path | None:
        """Prepare storage for label; returns its location if it has one."""
        ...

    @abstractmethod
    def load(self, label: str) -> SessionRecord | None:
        """Return the record for label, or None if none is stored."""
        ...

    @abstractmethod
    def save(self, label: str, record: SessionRecord) -> None:
        """Overwrite the record for label."""
        ...

    @abstractmethod
    def delete(self, label: str) -> bool:
        """Remove the record for label; False if there was none."""
        ...

    @abstractmethod
    def list_labels(self) -> List[str]:
        """Labels that have a stored record."""
        ...

    def find_by_branch(self, branch: str) -> SessionRecord | None:
        """Return the record whose promotion branch is branch, if any."""
        if not branch:
            return None
        for label in self.list_labels():
            record = self.load(label)
            if record is not None and record.promotion_branch == branch:
                return record
        return None
