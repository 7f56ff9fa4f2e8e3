"""Publish a compiled site to the gh-pages branch through a temporary worktree.

The user's checked-out branch, index and working tree are never touched:
the deploy branch is created with plumbing commands and populated in a
separate worktree under the system temp directory.
"""

from __future__ import annotations

import logging
import shutil
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, Union

from .config import AppConfig
from .gitops.branches import branch_exists, create_orphan_branch
from .gitops.port import GitPort
from .gitops.push import force_push_with_retry
from .gitops.worktree import WorktreeManager, make_worktree_path
from .reporting import Reporter

logger = logging.getLogger(__name__)

TOTAL_STEPS = 5


class DeployError(RuntimeError):
    """Raised when the site cannot be deployed."""


@dataclass
class DeployResult:
    """Commit SHA of the deploy plus the action that removes its worktree.

    An empty ``commit_sha`` means there was nothing to deploy. ``cleanup``
    is safe to call more than once; it may be called inline or detached
    with :meth:`cleanup_in_background`.
    """

    commit_sha: str
    worktree_path: str
    cleanup: Callable[[], None] = field(repr=False)

    @property
    def has_changes(self) -> bool:
        return bool(self.commit_sha)

    def cleanup_in_background(self) -> threading.Thread:
        return _run_detached(self.cleanup, self.worktree_path)


def _run_detached(action: Callable[[], None], path: str) -> threading.Thread:
    thread = threading.Thread(target=action, name=f"worktree-cleanup:{Path(path).name}", daemon=True)
    thread.start()
    return thread


def _wipe_worktree(worktree: Path) -> None:
    for child in worktree.iterdir():
        if child.name == ".git":
            continue
        if child.is_dir() and not child.is_symlink():
            shutil.rmtree(child)
        else:
            child.unlink()


def _copy_dir_contents(src: Path, dst: Path) -> None:
    for child in src.iterdir():
        if child.name == ".git":
            continue
        target = dst / child.name
        if child.is_dir() and not child.is_symlink():
            shutil.copytree(child, target, symlinks=True)
        else:
            shutil.copy2(child, target, follow_symlinks=False)


class DeployOrchestrator:
    """Runs one deploy: worktree, copy, commit, force-push."""

    def __init__(
        self,
        git: GitPort,
        config: Optional[AppConfig] = None,
        reporter: Optional[Reporter] = None,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.git = git
        self.config = config or AppConfig()
        self.reporter = reporter or Reporter()
        self.sleep = sleep
        self.worktrees = WorktreeManager(
            git,
            cleanup_timeout=self.config.deploy.cleanup_timeout,
            reporter=self.reporter,
        )
        self.pending_cleanup: Optional[threading.Thread] = None

    def deploy_to_gh_pages(self, site_dir: Union[str, Path, None] = None) -> DeployResult:
        """Deploy `site_dir` to the configured branch.

        Returns the new commit SHA, or an empty SHA when the branch already
        holds exactly this content. The caller owns the returned cleanup.
        On failure the worktree is cleaned up in the background and the
        error is re-raised.
        """
        deploy_cfg = self.config.deploy
        site_path = Path(site_dir or deploy_cfg.site_dir).resolve()
        if not site_path.is_dir():
            raise DeployError(f"Site directory not found: {site_path}\n\nPlease compile your site first.")

        branch = deploy_cfg.branch
        worktree_path = make_worktree_path(deploy_cfg.worktree_root, deploy_cfg.worktree_prefix)
        cleanup = self._make_cleanup(worktree_path)

        try:
            self.reporter.progress("deploying", 1, TOTAL_STEPS, "Preparing worktree...")
            logger.info("Preparing %s worktree...", branch)
            self.worktrees.prepare(worktree_path)

            self.reporter.progress("deploying", 2, TOTAL_STEPS, "Creating worktree...")
            if not branch_exists(self.git, branch, deploy_cfg.remote):
                create_orphan_branch(self.git, branch, deploy_cfg.orphan_message)
            self.worktrees.add_with_recovery(worktree_path, branch)

            worktree = Path(worktree_path)
            logger.info("Cleaning worktree...")
            _wipe_worktree(worktree)

            self.reporter.progress("deploying", 3, TOTAL_STEPS, "Copying site files...")
            logger.info("Copying site files to %s...", branch)
            _copy_dir_contents(site_path, worktree)

            self.reporter.progress("deploying", 4, TOTAL_STEPS, "Committing changes...")
            self.git.add_all(cwd=worktree_path)
            if not self.git.status_porcelain(cwd=worktree_path).strip():
                logger.info("No changes to deploy")
                return DeployResult(commit_sha="", worktree_path=worktree_path, cleanup=cleanup)

            self.git.commit(deploy_cfg.commit_message, cwd=worktree_path)
            commit_sha = self.git.head_sha(cwd=worktree_path).strip()

            self.reporter.progress("deploying", 5, TOTAL_STEPS, "Pushing to GitHub...")
            logger.info("Pushing %s to %s...", branch, deploy_cfg.remote)
            force_push_with_retry(
                self.git,
                branch,
                remote=deploy_cfg.remote,
                max_attempts=self.config.retry.max_attempts,
                base_delay=self.config.retry.base_delay,
                sleep=self.sleep,
                cwd=worktree_path,
            )
            return DeployResult(commit_sha=commit_sha, worktree_path=worktree_path, cleanup=cleanup)
        except Exception:
            self.pending_cleanup = _run_detached(cleanup, worktree_path)
            raise

    def _make_cleanup(self, worktree_path: str) -> Callable[[], None]:
        lock = threading.Lock()
        done = False

        def cleanup() -> None:
            nonlocal done
            with lock:
                if done:
                    return
                done = True
                try:
                    self.worktrees.cleanup(worktree_path)
                except Exception:
                    logger.warning("Worktree cleanup failed for %s", worktree_path, exc_info=True)

        return cleanup
