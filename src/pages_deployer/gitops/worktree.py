"""Isolated worktrees for the deploy branch, with stale-worktree recovery."""

from __future__ import annotations

import logging
import random
import re
import shutil
import string
import tempfile
import time
from pathlib import Path
from typing import List, Optional, Pattern

from ..reporting import Reporter
from ..runner import CommandError
from .port import GitPort

logger = logging.getLogger(__name__)

# Known phrasings of "branch is held by another worktree". Git changed the
# wording in 2.42; append new variants here as they appear.
STALE_WORKTREE_PATTERNS: List[Pattern[str]] = [
    re.compile(r"already checked out at '([^']+)'"),
    re.compile(r"already used by worktree at '([^']+)'"),
]

_ALREADY_HELD = re.compile(r"already (?:checked out|used)", re.IGNORECASE)


def parse_stale_worktree_path(error_message: str) -> Optional[str]:
    """Extract the path of the worktree holding the branch, if any."""
    for pattern in STALE_WORKTREE_PATTERNS:
        match = pattern.search(error_message)
        if match:
            return match.group(1)
    if _ALREADY_HELD.search(error_message):
        logger.warning("Unrecognized worktree conflict message: %s", error_message)
    return None


def make_worktree_path(root: Optional[str] = None, prefix: str = "moss-gh-pages") -> str:
    """Unique temp path: millisecond timestamp plus a short random suffix."""
    base = Path(root or tempfile.gettempdir())
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=6))
    return str(base / f"{prefix}-{int(time.time() * 1000)}-{suffix}")


class BranchCheckedOutError(RuntimeError):
    """The branch is held by a working tree this tool must not delete."""


def is_linked_worktree(path: str) -> bool:
    """True when `path` is gone or is a linked worktree (`.git` file into `worktrees/`).

    The main working tree has a `.git` directory and a submodule checkout
    points into `modules/`; neither may be removed during recovery.
    """
    root = Path(path)
    if not root.exists():
        return True
    marker = root / ".git"
    if not marker.is_file():
        return False
    try:
        content = marker.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return False
    return "/worktrees/" in content.replace("\\", "/")


def _remove_dir(path: str) -> None:
    target = Path(path)
    if target.exists():
        shutil.rmtree(target)


class WorktreeManager:
    """Creates, recovers and removes worktrees for a single branch."""

    def __init__(
        self,
        git: GitPort,
        *,
        cleanup_timeout: float = 30.0,
        reporter: Optional[Reporter] = None,
    ) -> None:
        self.git = git
        self.cleanup_timeout = cleanup_timeout
        self.reporter = reporter

    def prepare(self, path: str) -> None:
        """Clear leftovers from crashed runs before any worktree is added."""
        try:
            self.git.worktree_prune()
        except CommandError as exc:
            logger.debug("worktree prune failed: %s", exc)

        try:
            self.git.worktree_remove(path)
        except CommandError:
            pass  # nothing registered at this path

        try:
            _remove_dir(path)
        except OSError as exc:
            logger.debug("Could not remove %s: %s", path, exc)

    def add_with_recovery(self, path: str, branch: str) -> None:
        """Add a worktree for `branch`, recovering once from a stale registration.

        If git reports the branch is held by another linked worktree, that worktree
        is removed (git first, then the directory), pruned, and the add is
        retried exactly once. Any other failure propagates unchanged, and a
        failed retry re-raises the original error. A branch held by the main
        working tree (or anything that is not a linked worktree) raises
        :class:`BranchCheckedOutError` without touching the filesystem.
        """
        try:
            self.git.worktree_add(path, branch)
            return
        except CommandError as exc:
            stale_path = parse_stale_worktree_path(str(exc))
            if not stale_path:
                raise
            original_error = exc

        if not is_linked_worktree(stale_path):
            raise BranchCheckedOutError(
                f"'{branch}' is checked out in {stale_path}.\n\n"
                "Switch that working tree to another branch and deploy again."
            ) from original_error

        logger.warning("Found stale worktree at %s, cleaning up...", stale_path)
        if self.reporter:
            self.reporter.error("Recovering from stale worktree...", "deploy", fatal=False)

        try:
            self.git.worktree_remove(stale_path)
        except CommandError:
            logger.info("Worktree remove failed, trying direct cleanup...")

        try:
            _remove_dir(stale_path)
        except OSError as exc:
            logger.debug("Could not remove %s: %s", stale_path, exc)

        try:
            self.git.worktree_prune()
        except CommandError as exc:
            logger.debug("worktree prune failed: %s", exc)

        logger.info("Retrying worktree creation...")
        try:
            self.git.worktree_add(path, branch)
        except CommandError as retry_exc:
            logger.warning("Worktree creation failed again after recovery: %s", retry_exc)
            raise original_error

    def cleanup(self, path: str) -> None:
        """Best-effort removal of `path`; never raises.

        Runs after the deploy result has been reported, so failures are
        only logged. ``worktree prune`` is attempted whatever happened before.
        """
        logger.info("Cleaning up worktree %s...", path)
        try:
            try:
                self.git.worktree_remove(path, timeout=self.cleanup_timeout)
            except CommandError as exc:
                logger.warning("git worktree remove failed (%s), deleting directory", exc)
                try:
                    _remove_dir(path)
                except OSError as rm_exc:
                    logger.warning("Could not delete worktree directory %s: %s", path, rm_exc)
        finally:
            try:
                self.git.worktree_prune()
            except CommandError as exc:
                logger.warning("worktree prune after cleanup failed: %s", exc)
