"""The narrow set of git operations the deploy engine depends on."""

from __future__ import annotations

from typing import List, Optional, Protocol, Sequence


class GitPort(Protocol):
    """Git operations used by the deployer.

    Every method raises :class:`~pages_deployer.runner.CommandError` when
    the underlying git command fails. ``cwd`` arguments run the command
    inside another working tree (``git -C``).
    """

    def version(self) -> str: ...

    def git_dir(self) -> str: ...

    def remote_url(self, name: str) -> str: ...

    def add_remote(self, name: str, url: str) -> None: ...

    def set_remote_url(self, name: str, url: str) -> None: ...

    def current_branch(self) -> str: ...

    def verify_ref(self, ref: str) -> str: ...

    def upstream(self) -> str: ...

    def ls_tree(self, ref: str) -> str: ...

    def hash_objects(self, paths: Sequence[str]) -> List[str]: ...

    def commit_tree(self, tree: str, message: str) -> str: ...

    def update_ref(self, ref: str, commit: str) -> None: ...

    def worktree_add(self, path: str, branch: str) -> None: ...

    def worktree_remove(self, path: str, *, timeout: Optional[float] = None) -> None: ...

    def worktree_prune(self) -> None: ...

    def add_all(self, cwd: Optional[str] = None) -> None: ...

    def status_porcelain(self, cwd: Optional[str] = None) -> str: ...

    def commit(self, message: str, cwd: Optional[str] = None) -> None: ...

    def head_sha(self, cwd: Optional[str] = None) -> str: ...

    def push(
        self,
        remote: Optional[str] = None,
        branch: Optional[str] = None,
        *,
        force: bool = False,
        set_upstream: bool = False,
        cwd: Optional[str] = None,
    ) -> None: ...
