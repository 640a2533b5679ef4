"""Data models for merged PRs, promotion config, and workflow results."""

from typing import List, Literal

from pydantic import BaseModel, Field

ResultKind = Literal["completed", "conflicted", "cancelled"]


class PRRecord(BaseModel):
    """Merged pull request as reported by the code host."""

    number: int = Field(..., description="Pull request number")
    title: str = Field(default="", description="Pull request title")
    merge_commit_sha: str = Field(..., alias="mergeCommitSha", description="Merge or squash commit SHA")
    merged_at: str = Field(..., alias="mergedAt", description="ISO timestamp of the merge")

    model_config = {"frozen": True, "populate_by_name": True}

    @property
    def short_sha(self) -> str:
        return self.merge_commit_sha[:8]


class PromotionConfig(BaseModel):
    """One promotion effort: which label moves from which branch to which."""

    label: str = Field(..., description="PR label selecting what to promote")
    from_branch: str = Field(..., alias="fromBranch", description="Base branch the PRs were merged into")
    to_branch: str = Field(..., alias="toBranch", description="Base branch to promote into")
    promotion_branch: str = Field(..., alias="promotionBranch", description="Branch the picks land on")

    model_config = {"frozen": True, "populate_by_name": True}


class PartialConfig(BaseModel):
    """Config fields known so far (flags, stored record); None means unknown."""

    label: str | None = None
    from_branch: str | None = None
    to_branch: str | None = None
    promotion_branch: str | None = None

    def merged_with(self, other: "PartialConfig") -> "PartialConfig":
        """Fill fields missing here from other; fields set here win."""
        return PartialConfig(
            label=self.label or other.label,
            from_branch=self.from_branch or other.from_branch,
            to_branch=self.to_branch or other.to_branch,
            promotion_branch=self.promotion_branch or other.promotion_branch,
        )


class PromotionResult:
    """Outcome of pick/continue/cancel.

    kind is "conflicted" when a cherry-pick stopped and needs resolution;
    this is a normal pause, not an error.
    """

    def __init__(
        self,
        kind: ResultKind,
        message: str,
        config: PromotionConfig | None = None,
        applied: List[PRRecord] | None = None,
        pending: List[PRRecord] | None = None,
        conflict: PRRecord | None = None,
    ) -> None:
        self.kind = kind
        self.message = message
        self.config = config
        self.applied = applied or []
        self.pending = pending or []
        self.conflict = conflict


class StatusReport:
    """Read-mostly view of a promotion: candidates vs. still pending."""

    def __init__(
        self,
        config: PromotionConfig,
        prs: List[PRRecord],
        pending: List[PRRecord],
        last_synced_at: str | None = None,
        branch_exists: bool = True,
    ) -> None:
        self.config = config
        self.prs = prs
        self.pending = pending
        self.last_synced_at = last_synced_at
        self.branch_exists = branch_exists

    @property
    def applied_count(self) -> int:
        return len(self.prs) - len(self.pending)

    def to_text(self) -> str:
        """Render the report for the terminal."""
        lines = [
            f"Session: {self.config.label}",
            f"From: {self.config.from_branch} -> To: {self.config.to_branch}",
            f"Promotion branch: {self.config.promotion_branch}"
            + ("" if self.branch_exists else " (not created yet)"),
            f"PRs found: {len(self.prs)}",
            f"Applied: {self.applied_count}",
            f"Pending: {len(self.pending)}",
        ]
        if self.last_synced_at:
            lines.append(f"Last synced: {self.last_synced_at}")
        if self.pending:
            lines.append("")
            lines.append("Pending PRs:")
            for pr in self.pending:
                lines.append(f"- #{pr.number} {pr.title} ({pr.short_sha})")
        return "\n".join(lines) + "\n"
