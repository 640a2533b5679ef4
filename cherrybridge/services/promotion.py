"""
Promotion workflow: cherry-pick labeled, merged PRs onto a promotion branch.

pick:     preconditions -> resolve config -> fetch candidates -> branch setup
          -> filter pending -> cherry-pick loop -> completed | conflicted
continue: finish an in-progress cherry-pick, then refetch and resume the loop
cancel:   abort any in-progress cherry-pick and drop the stored session
status:   refresh candidates and report pending vs. applied

The pending set is never stored: every run recomputes it by searching the
promotion branch history for the -x marker of each candidate's SHA.
Conflicts are a normal pause ("conflicted"), not an error; picks already
made stay on the branch.
"""

import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import List

from cherrybridge.adapters.base import HostAdapter
from cherrybridge.errors import DirtyWorkingTreeError, InvalidConfigurationError, NoSessionFoundError
from cherrybridge.models import PartialConfig, PromotionConfig, PromotionResult, PRRecord, StatusReport
from cherrybridge.services.git import (
    RepositoryContext,
    abort_cherry_pick,
    branch_exists,
    branch_exists_locally,
    cherry_pick_commit,
    cherry_pick_head,
    cherry_pick_in_progress,
    continue_cherry_pick,
    current_branch,
    ensure_clean_working_tree,
    ensure_promotion_branch,
    fetch_all,
    has_pick_marker,
)
from cherrybridge.services.resolver import ConfigResolver
from cherrybridge.services.store import ConfigStore, SessionRecord

LOG = logging.getLogger("cherrybridge.services.promotion")

IN_PROGRESS_MESSAGE = (
    "A cherry-pick is in progress. Resolve it and run `cherrybridge continue`, or run `cherrybridge cancel`."
)


def _now_iso() -> str:
    return datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


def _partial_from_record(record: SessionRecord | None) -> PartialConfig:
    if record is None:
        return PartialConfig()
    return PartialConfig(
        label=record.label,
        from_branch=record.from_branch,
        to_branch=record.to_branch,
        promotion_branch=record.promotion_branch,
    )


def _session_record(
    config: PromotionConfig,
    prs: List[PRRecord],
    existing: SessionRecord | None,
    created_from_branch: str,
) -> SessionRecord:
    """Fresh record for config with prs replacing any previously synced list."""
    return SessionRecord(
        label=config.label,
        from_branch=config.from_branch,
        to_branch=config.to_branch,
        promotion_branch=config.promotion_branch,
        last_synced_at=_now_iso(),
        prs=list(prs),
        created_from_branch=existing.created_from_branch if existing is not None else created_from_branch,
    )


def conflict_message(pr: PRRecord | None, sha: str | None = None) -> str:
    """Next-step instructions after a cherry-pick stops on conflicts."""
    if pr is not None:
        what = f"PR #{pr.number} ({pr.short_sha})"
    elif sha:
        what = f"commit {sha[:8]}"
    else:
        what = "the current cherry-pick"
    return (
        f"Conflict encountered on {what}.\n"
        "Resolve conflicts and stage the files, then run:\n"
        "  cherrybridge continue\n\n"
        "Or to abort:\n"
        "  cherrybridge cancel\n"
    )


def completion_message(config: PromotionConfig, applied: List[PRRecord]) -> str:
    """Push/PR suggestions once nothing is pending."""
    head = f"Done. Picked {len(applied)} PR(s)." if applied else "Done."
    return (
        f"{head} You can now push and open a PR into {config.to_branch!r}.\n"
        "Suggested:\n"
        f"  git push -u origin {config.promotion_branch}\n"
        f"  gh pr create --base {config.to_branch} --head {config.promotion_branch}\n"
    )


def compute_pending(prs: List[PRRecord], repo_dir: Path, ref: str = "HEAD") -> List[PRRecord]:
    """Candidates whose merge SHA has no cherry-pick marker reachable from ref.

    Read-only; preserves the order of prs.
    """
    return [pr for pr in prs if not has_pick_marker(pr.merge_commit_sha, repo_dir, ref=ref)]


def apply_pending_cherry_picks(
    ctx: RepositoryContext,
    config: PromotionConfig,
    prs: List[PRRecord],
    log: logging.Logger | None = None,
) -> PromotionResult:
    """Cherry-pick every pending PR in order onto the checked out promotion branch.

    Stops at the first conflict and leaves earlier picks in place.
    """
    logger = log or LOG
    pending = compute_pending(prs, ctx.root)
    if not pending:
        logger.info("Nothing to pick. All PR merge commits for %r appear to be applied.", config.label)
        return PromotionResult("completed", completion_message(config, []), config=config)

    logger.info("Found %s pending PR(s) to cherry-pick onto %s:", len(pending), config.promotion_branch)
    for pr in pending:
        logger.info("- #%s %s (%s)", pr.number, pr.title, pr.short_sha)

    applied: List[PRRecord] = []
    for index, pr in enumerate(pending):
        logger.info("Cherry-picking PR #%s: %s", pr.number, pr.merge_commit_sha)
        outcome = cherry_pick_commit(pr.merge_commit_sha, ctx.root, log=logger)
        if outcome == "conflict":
            return PromotionResult(
                "conflicted",
                conflict_message(pr),
                config=config,
                applied=applied,
                pending=pending[index:],
                conflict=pr,
            )
        applied.append(pr)

    return PromotionResult("completed", completion_message(config, applied), config=config, applied=applied)


def _sync_candidates(
    ctx: RepositoryContext,
    host: HostAdapter,
    store: ConfigStore,
    config: PromotionConfig,
    existing: SessionRecord | None,
    logger: logging.Logger,
) -> List[PRRecord]:
    """Refetch candidates and overwrite the stored session with them.

    A promotion branch that still has to be created needs its target
    branch; that is checked before anything is written.
    """
    fetch_all(ctx.root, log=logger)
    if not branch_exists_locally(config.promotion_branch, ctx.root) and not branch_exists(
        config.to_branch, ctx.root
    ):
        raise InvalidConfigurationError(
            f"Target branch {config.to_branch!r} was not found locally or on any remote; "
            f"cannot create promotion branch {config.promotion_branch!r}."
        )
    prs = host.list_merged_prs(config.from_branch, config.label)
    logger.info("Found %s merged PR(s) labeled %r into %s", len(prs), config.label, config.from_branch)
    store.ensure(config.label)
    store.save(config.label, _session_record(config, prs, existing, current_branch(ctx.root)))
    return prs


def run_pick(
    ctx: RepositoryContext,
    host: HostAdapter,
    store: ConfigStore,
    resolver: ConfigResolver,
    flags: PartialConfig,
    log: logging.Logger | None = None,
) -> PromotionResult:
    """Start (or resume on an existing promotion branch) a labeled promotion."""
    logger = log or LOG
    if cherry_pick_in_progress(ctx.root):
        raise DirtyWorkingTreeError(IN_PROGRESS_MESSAGE)
    ensure_clean_working_tree(ctx.root, log=logger)
    host.ensure_available()

    stored = store.load(flags.label) if flags.label else None
    config = resolver.resolve(flags.merged_with(_partial_from_record(stored)))
    if stored is None:
        stored = store.load(config.label)

    prs = _sync_candidates(ctx, host, store, config, stored, logger)
    ensure_promotion_branch(config.promotion_branch, config.to_branch, ctx.root, log=logger)
    return apply_pending_cherry_picks(ctx, config, prs, log=logger)


def run_continue(
    ctx: RepositoryContext,
    host: HostAdapter,
    store: ConfigStore,
    resolver: ConfigResolver,
    flags: PartialConfig,
    log: logging.Logger | None = None,
) -> PromotionResult:
    """Finish a conflicted cherry-pick, then pick anything merged since."""
    logger = log or LOG
    in_progress = cherry_pick_in_progress(ctx.root)
    if not in_progress:
        ensure_clean_working_tree(ctx.root, log=logger)
    host.ensure_available()

    branch = current_branch(ctx.root)
    stored = store.load(flags.label) if flags.label else store.find_by_branch(branch)
    # Promotion branch: --via, then the stored session, then the branch checked out now
    partial = flags.merged_with(_partial_from_record(stored))
    if branch:
        partial = partial.merged_with(PartialConfig(promotion_branch=branch))
    config = resolver.resolve(partial)
    if stored is None:
        stored = store.load(config.label)
        if stored is not None:
            config = resolver.resolve(
                PartialConfig(label=config.label).merged_with(flags).merged_with(_partial_from_record(stored))
            )

    if in_progress:
        if branch and branch != config.promotion_branch:
            raise InvalidConfigurationError(
                f"A cherry-pick is in progress on {branch!r}, not on promotion branch {config.promotion_branch!r}."
            )
        sha = cherry_pick_head(ctx.root)
        if continue_cherry_pick(ctx.root, log=logger) == "conflict":
            known = {pr.merge_commit_sha: pr for pr in (stored.prs if stored is not None else [])}
            return PromotionResult(
                "conflicted",
                conflict_message(known.get(sha or ""), sha),
                config=config,
                conflict=known.get(sha or ""),
            )
        logger.info("Continued cherry-pick.")

    prs = _sync_candidates(ctx, host, store, config, stored, logger)
    if current_branch(ctx.root) != config.promotion_branch:
        ensure_promotion_branch(config.promotion_branch, config.to_branch, ctx.root, log=logger)
    return apply_pending_cherry_picks(ctx, config, prs, log=logger)


def run_cancel(
    ctx: RepositoryContext,
    store: ConfigStore,
    label: str | None = None,
    log: logging.Logger | None = None,
) -> PromotionResult:
    """Abort any in-progress cherry-pick and release the stored session.

    The promotion branch itself is left for the operator to delete.
    """
    logger = log or LOG
    aborted = abort_cherry_pick(ctx.root, log=logger)

    target = label
    branch_record = None
    if not target:
        branch_record = store.find_by_branch(current_branch(ctx.root))
        target = branch_record.label if branch_record is not None else None

    parts = ["Cancelled cherry-pick." if aborted else "No cherry-pick in progress."]
    if target:
        if store.delete(target):
            parts.append(f"Removed stored configuration for {target!r}.")
        else:
            parts.append(f"No stored configuration for {target!r}.")
    else:
        logger.info("No label given and no session attached to the current branch")
    if branch_record is not None:
        parts.append(f"Branch {branch_record.promotion_branch} was left in place.")
    return PromotionResult("cancelled", " ".join(parts))


def run_status(
    ctx: RepositoryContext,
    host: HostAdapter,
    store: ConfigStore,
    resolver: ConfigResolver,
    flags: PartialConfig,
    log: logging.Logger | None = None,
) -> StatusReport:
    """Report candidates and which of them are still pending.

    Only the stored candidate list and sync time are updated.
    """
    logger = log or LOG
    host.ensure_available()

    label = flags.label
    if not label:
        labels = store.list_labels()
        if not labels:
            raise NoSessionFoundError('No sessions found. Run "cherrybridge pick" first.')
        label = resolver.select_label(labels)

    stored = store.load(label)
    if stored is None and not (flags.from_branch and flags.to_branch):
        raise NoSessionFoundError(
            f'No session found for label "{label}". Run "cherrybridge pick" first or pass --from and --to.'
        )
    config = resolver.resolve(PartialConfig(label=label).merged_with(flags).merged_with(_partial_from_record(stored)))

    prs = host.list_merged_prs(config.from_branch, config.label)
    last_synced_at = None
    if stored is not None:
        refreshed = stored.model_copy(update={"prs": prs, "last_synced_at": _now_iso()})
        store.save(stored.label, refreshed)
        last_synced_at = refreshed.last_synced_at

    exists = branch_exists_locally(config.promotion_branch, ctx.root)
    if exists:
        pending = compute_pending(prs, ctx.root, ref=f"refs/heads/{config.promotion_branch}")
    else:
        pending = list(prs)
    logger.debug("Status for %r: %s candidate(s), %s pending", config.label, len(prs), len(pending))
    return StatusReport(config, prs, pending, last_synced_at=last_synced_at, branch_exists=exists)
