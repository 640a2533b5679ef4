"""Git operations: repository checks, branches, branch config, cherry-picks."""

from cherrybridge.errors import GitRunnerError
from cherrybridge.services.git.branches import (
    branch_exists,
    branch_exists_locally,
    checkout_branch,
    checkout_new_branch,
    ensure_promotion_branch,
    fetch_all,
    get_branch_config,
    list_branch_configs,
    promotion_branch_name,
    pull_ff_only,
    sanitize_label,
    set_branch_config,
    unset_branch_config,
)
from cherrybridge.services.git.cherry_pick import (
    PickOutcome,
    abort_cherry_pick,
    cherry_pick_commit,
    cherry_pick_head,
    cherry_pick_in_progress,
    continue_cherry_pick,
    has_pick_marker,
)
from cherrybridge.services.git.repo import (
    RepositoryContext,
    current_branch,
    ensure_clean_working_tree,
    is_inside_work_tree,
    is_working_tree_clean,
    parse_remote_slug,
    repo_identity,
    resolve_repository,
)

__all__ = [
    "GitRunnerError",
    "PickOutcome",
    "RepositoryContext",
    "abort_cherry_pick",
    "branch_exists",
    "branch_exists_locally",
    "checkout_branch",
    "checkout_new_branch",
    "cherry_pick_commit",
    "cherry_pick_head",
    "cherry_pick_in_progress",
    "continue_cherry_pick",
    "current_branch",
    "ensure_clean_working_tree",
    "ensure_promotion_branch",
    "fetch_all",
    "get_branch_config",
    "has_pick_marker",
    "is_inside_work_tree",
    "is_working_tree_clean",
    "list_branch_configs",
    "parse_remote_slug",
    "promotion_branch_name",
    "pull_ff_only",
    "repo_identity",
    "resolve_repository",
    "sanitize_label",
    "set_branch_config",
    "unset_branch_config",
]
