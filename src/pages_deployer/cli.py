"""Command-line interface for the pages deployer."""

from __future__ import annotations

import argparse
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .config import AppConfig, load_config
from .fingerprint import check_for_changes
from .gitops.cli import GitCli
from .hook import DeployHook
from .models import DeployContext
from .runner import CommandError
from .utils.logging import get_logger


@dataclass
class CLIContext:
    """Context captured from CLI arguments."""

    config: AppConfig
    project: Path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pages-deployer",
        description="Publish a compiled moss site to the gh-pages branch.",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to a JSON config file overriding defaults.",
    )
    parser.add_argument(
        "--project",
        type=str,
        default=".",
        help="Project (git repository) directory. Defaults to the current directory.",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Log every git command.")

    subparsers = parser.add_subparsers(dest="command", required=True)

    deploy_parser = subparsers.add_parser("deploy", help="Deploy the compiled site to GitHub Pages")
    deploy_parser.add_argument("--site-dir", default=None, help="Compiled site directory (default: .moss/site)")
    deploy_parser.add_argument("--remote-url", default=None, help="Make the remote point at this URL first")
    deploy_parser.add_argument("--branch", default=None, help="Branch to publish to (default: gh-pages)")
    deploy_parser.add_argument("--json", action="store_true", help="Print the result as JSON")

    check_parser = subparsers.add_parser("check", help="Compare the compiled site with the deployed branch")
    check_parser.add_argument("--site-dir", default=None, help="Compiled site directory (default: .moss/site)")
    check_parser.add_argument("--branch", default=None, help="Branch to compare with (default: gh-pages)")

    subparsers.add_parser("prune", help="Remove registrations of worktrees whose directories are gone")

    return parser


def _build_context(args: argparse.Namespace) -> CLIContext:
    config = load_config(args.config)
    if getattr(args, "branch", None):
        config.deploy.branch = args.branch
    if getattr(args, "remote_url", None):
        config.deploy.remote_url = args.remote_url
    if getattr(args, "site_dir", None):
        config.deploy.site_dir = args.site_dir
    return CLIContext(config=config, project=Path(args.project).resolve())


def handle_deploy_command(args: argparse.Namespace, context: CLIContext) -> int:
    hook = DeployHook(config=context.config)
    result = hook.run(
        DeployContext(project_path=str(context.project), output_dir=context.config.deploy.site_dir)
    )
    # the process must not exit before the worktree is gone
    if hook.cleanup_thread is not None:
        hook.cleanup_thread.join(timeout=context.config.deploy.cleanup_timeout * 2)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    else:
        print(result.message)
    return 0 if result.success else 1


def handle_check_command(args: argparse.Namespace, context: CLIContext) -> int:
    git = GitCli(context.project, context.config.git)
    site_dir = context.project / context.config.deploy.site_dir
    check = check_for_changes(git, site_dir, context.config.deploy.branch)

    if check.reason:
        print(f"Changes assumed: {check.reason}")
    elif check.diff is not None and check.diff.has_changes:
        print(f"Changes detected: {check.diff.summary()}")
        for label, paths in (("+", check.diff.added), ("~", check.diff.modified), ("-", check.diff.deleted)):
            for path in sorted(paths):
                print(f"  {label} {path}")
    else:
        print("No changes detected.")
    return 0


def handle_prune_command(context: CLIContext) -> int:
    git = GitCli(context.project, context.config.git)
    try:
        git.worktree_prune()
    except CommandError as exc:
        print(f"git worktree prune failed: {exc}")
        return 1
    print("Pruned stale worktree registrations.")
    return 0


def dispatch_command(args: argparse.Namespace) -> int:
    get_logger(__name__, verbose=args.verbose)
    context = _build_context(args)

    if args.command == "deploy":
        return handle_deploy_command(args, context)
    if args.command == "check":
        return handle_check_command(args, context)
    if args.command == "prune":
        return handle_prune_command(context)
    return 1


def run_cli(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    return dispatch_command(args)
