"""Session record as stored in <state_root>/<repo>/<label>/session.json."""

from typing import List, Optional

from pydantic import BaseModel, Field

from cherrybridge.models import PRRecord


class SessionRecord(BaseModel):
    """Promotion session: config plus the last synced candidate list."""

    label: str = Field(..., description="PR label (unsanitized)")
    from_branch: str = Field(..., alias="fromBranch", description="Source base branch")
    to_branch: str = Field(..., alias="toBranch", description="Target base branch")
    promotion_branch: str = Field(..., alias="promotionBranch", description="Branch the picks land on")
    last_synced_at: Optional[str] = Field(
        default=None,
        alias="lastSyncedAt",
        description="ISO timestamp of the last PR list refresh",
    )
    prs: List[PRRecord] = Field(default_factory=list, description="Candidates, merge time ascending")
    created_from_branch: str = Field(
        default="",
        alias="createdFromBranch",
        description="Branch checked out when the session was created",
    )

    model_config = {"extra": "ignore", "populate_by_name": True}
