"""cherrybridge entry point.

Promote merged PRs by label via cherry-picking their merge commits.
Usage: cherrybridge pick | continue | cancel | status.
"""

import argparse
import logging
import sys
from pathlib import Path

import click

from cherrybridge import __version__
from cherrybridge.adapters import GhCliAdapter, GitHubApiAdapter, HostAdapter
from cherrybridge.config import AppConfig, load_config
from cherrybridge.errors import CherrybridgeError
from cherrybridge.logging import CherrybridgeLogging
from cherrybridge.models import PartialConfig, PromotionResult
from cherrybridge.services.git import RepositoryContext, resolve_repository
from cherrybridge.services.promotion import run_cancel, run_continue, run_pick, run_status
from cherrybridge.services.resolver import ConfigResolver, InteractiveResolver, NonInteractiveResolver
from cherrybridge.services.store import BranchConfigStore, ConfigStore, SessionStore

LOG = logging.getLogger("cherrybridge")

COMMANDS = ("pick", "continue", "cancel", "status")


def _add_branch_args(parser: argparse.ArgumentParser, branch_flags: tuple[str, ...]) -> None:
    parser.add_argument("--from", dest="from_branch", help="Source base branch PRs were merged into")
    parser.add_argument("--to", dest="to_branch", help="Target base branch to promote into")
    parser.add_argument("--label", help="Label used to group PRs (e.g. feature:ABC-123)")
    parser.add_argument(
        *branch_flags,
        dest="promotion_branch",
        help="Promotion branch name (default: promote/<label-sanitized>)",
    )


def build_parser() -> argparse.ArgumentParser:
    """Argument parser with one subcommand per workflow operation."""
    parser = argparse.ArgumentParser(
        prog="cherrybridge",
        description="Promote merged PRs by label via cherry-picking PR merge commits.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help="Path to YAML config file (default: .cherrybridge.yaml if present)",
    )
    parser.add_argument(
        "--no-input",
        action="store_true",
        help="Never prompt; fail when a required value is missing",
    )
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING or ERROR")

    sub = parser.add_subparsers(dest="command", metavar="{pick,continue,cancel,status}")
    sub.required = True

    pick = sub.add_parser("pick", help="Pick merged PR merge commits (by label) onto a promotion branch")
    _add_branch_args(pick, ("--branch", "--via"))

    cont = sub.add_parser("continue", help="Continue an in-progress cherry-pick, then pick newly merged PRs")
    _add_branch_args(cont, ("--via",))

    cancel = sub.add_parser("cancel", help="Abort an in-progress cherry-pick and release stored config")
    cancel.add_argument("--label", help="Label whose stored session is removed")

    status = sub.add_parser("status", help="Show which PRs are pending for a session")
    _add_branch_args(status, ("--via",))
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    argv = argv if argv is not None else sys.argv[1:]
    return build_parser().parse_args(argv)


def flags_from_args(args: argparse.Namespace) -> PartialConfig:
    return PartialConfig(
        label=getattr(args, "label", None),
        from_branch=getattr(args, "from_branch", None),
        to_branch=getattr(args, "to_branch", None),
        promotion_branch=getattr(args, "promotion_branch", None),
    )


def build_host(config: AppConfig, ctx: RepositoryContext) -> HostAdapter:
    """Host adapter selected by host.provider."""
    if config.host.provider == "github_api":
        return GitHubApiAdapter(config.github_token_resolved, ctx.slug, api_url=config.github.api_url)
    return GhCliAdapter(ctx.root, command=config.host.command, limit=config.host.limit)


def build_store(config: AppConfig, ctx: RepositoryContext) -> ConfigStore:
    """Session store selected by store.backend."""
    if config.store.backend == "branch":
        return BranchConfigStore(ctx.root)
    return SessionStore(ctx.identity, state_root=config.store.state_dir)


def build_resolver(config: AppConfig, no_input: bool) -> ConfigResolver:
    if no_input or not sys.stdin.isatty():
        return NonInteractiveResolver(config.promotion)
    return InteractiveResolver(config.promotion)


def _report(result: PromotionResult) -> None:
    print(result.message.rstrip())


def run_command(args: argparse.Namespace, config: AppConfig) -> int:
    """Dispatch one subcommand. Returns the process exit code."""
    ctx = resolve_repository(log=LOG)
    store = build_store(config, ctx)

    if args.command == "cancel":
        _report(run_cancel(ctx, store, label=args.label))
        return 0

    host = build_host(config, ctx)
    resolver = build_resolver(config, args.no_input)
    flags = flags_from_args(args)

    if args.command == "status":
        print(run_status(ctx, host, store, resolver, flags).to_text().rstrip())
        return 0

    runner = run_pick if args.command == "pick" else run_continue
    _report(runner(ctx, host, store, resolver, flags))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point: parse args, set up logging, run the subcommand."""
    args = parse_args(argv)
    config = load_config(args.config)
    CherrybridgeLogging(config.logging).setup(args.log_level)

    try:
        return run_command(args, config)
    except CherrybridgeError as e:
        LOG.error("%s", e)
        return 1
    except click.exceptions.Abort:
        LOG.error("Aborted.")
        return 130


if __name__ == "__main__":
    sys.exit(main())
