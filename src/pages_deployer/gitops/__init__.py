"""Git operations helpers."""

from .branches import (
    EMPTY_TREE_SHA,
    branch_exists,
    create_orphan_branch,
    detect_branch,
    has_local_commits,
    has_upstream,
    is_git_available,
    is_repository,
)
from .cli import GitCli
from .port import GitPort
from .push import (
    force_push_with_retry,
    is_transient_network_error,
    push_with_retry,
    with_retry,
)
from .remote import (
    ensure_remote,
    github_pages_url,
    has_remote,
    is_ssh_remote,
    pages_site_url,
    parse_github_url,
)
from .worktree import (
    STALE_WORKTREE_PATTERNS,
    BranchCheckedOutError,
    WorktreeManager,
    is_linked_worktree,
    make_worktree_path,
    parse_stale_worktree_path,
)

__all__ = [
    "BranchCheckedOutError",
    "EMPTY_TREE_SHA",
    "GitCli",
    "GitPort",
    "STALE_WORKTREE_PATTERNS",
    "WorktreeManager",
    "branch_exists",
    "create_orphan_branch",
    "detect_branch",
    "ensure_remote",
    "force_push_with_retry",
    "github_pages_url",
    "has_local_commits",
    "has_remote",
    "has_upstream",
    "is_git_available",
    "is_linked_worktree",
    "is_repository",
    "is_ssh_remote",
    "is_transient_network_error",
    "make_worktree_path",
    "pages_site_url",
    "parse_github_url",
    "parse_stale_worktree_path",
    "push_with_retry",
    "with_retry",
]
