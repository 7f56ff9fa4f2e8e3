"""Branch inspection and history-free branch creation."""

from __future__ import annotations

import logging

from ..runner import CommandError
from .port import GitPort

logger = logging.getLogger(__name__)

# SHA-1 of the empty tree object ("tree 0\0"); identical in every repository
EMPTY_TREE_SHA = "4b825dc642cb6eb9a060e54bf8d69288fbee4904"

DEFAULT_BRANCH_CANDIDATES = ("main", "master")


def is_git_available(git: GitPort) -> bool:
    try:
        git.version()
        return True
    except CommandError:
        return False


def is_repository(git: GitPort) -> bool:
    try:
        git.git_dir()
        return True
    except CommandError:
        return False


def has_upstream(git: GitPort) -> bool:
    try:
        git.upstream()
        return True
    except CommandError:
        return False


def has_local_commits(git: GitPort) -> bool:
    try:
        git.head_sha()
        return True
    except CommandError:
        return False


def detect_branch(git: GitPort) -> str:
    """Return the checked-out branch, else the first of main/master that exists."""
    try:
        branch = git.current_branch()
        if branch:
            return branch
    except CommandError:
        pass

    for candidate in DEFAULT_BRANCH_CANDIDATES:
        try:
            git.verify_ref(candidate)
            return candidate
        except CommandError:
            continue
    return DEFAULT_BRANCH_CANDIDATES[0]


def branch_exists(git: GitPort, branch: str, remote: str = "origin") -> bool:
    """True when `branch` exists locally or as a remote-tracking ref."""
    for ref in (f"refs/heads/{branch}", f"refs/remotes/{remote}/{branch}"):
        try:
            git.verify_ref(ref)
            return True
        except CommandError:
            continue
    return False


def create_orphan_branch(git: GitPort, branch: str, message: str) -> str:
    """Create `branch` as a single empty commit without touching HEAD or the index.

    Uses commit-tree/update-ref instead of ``checkout --orphan`` so the
    current branch and working tree stay exactly as they were.
    """
    logger.info("Creating orphan commit for %s...", branch)
    commit = git.commit_tree(EMPTY_TREE_SHA, message).strip()
    git.update_ref(f"refs/heads/{branch}", commit)
    return commit
