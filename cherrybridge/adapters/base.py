"""Abstract base for code host adapters."""

from abc import ABC, abstractmethod
from typing import Iterable, List

from cherrybridge.models import PRRecord


def sort_by_merged_at(prs: Iterable[PRRecord]) -> List[PRRecord]:
    """Order PRs by merge time ascending; ties keep the host's order.

    Timestamps are compared as ISO strings, which sort chronologically for
    the UTC "Z" form both GitHub and gh emit.
    """
    return sorted(prs, key=lambda pr: pr.merged_at)


class HostAdapter(ABC):
    """Code host queries needed to find PRs to promote."""

    @abstractmethod
    def ensure_available(self) -> None:
        """Raise HostToolUnavailableError if the host cannot be queried."""
        ...

    @abstractmethod
    def list_merged_prs(self, base_branch: str, label: str) -> List[PRRecord]:
        """PRs merged into base_branch carrying label, merge time ascending.

        Only PRs with a merge commit SHA (true merge or squash) are returned.
        An empty list is a valid answer.

        Raises:
            HostToolUnavailableError: Missing tool or not authenticated.
            HostQueryFailedError: The query itself failed.
        """
        ...
