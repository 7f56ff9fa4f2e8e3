"""GitPort implementation on top of the git command-line client."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Union

from ..config import GitConfig
from ..runner import CommandRunner

logger = logging.getLogger(__name__)


class GitCli:
    """Wraps `git` CLI commands run against a single repository."""

    def __init__(
        self,
        repo_dir: Union[str, Path, None] = None,
        config: Optional[GitConfig] = None,
        runner: Optional[CommandRunner] = None,
    ) -> None:
        self.config = config or GitConfig()
        self.runner = runner or CommandRunner(cwd=repo_dir)

    # -- Probes ---------------------------------------------------------------

    def version(self) -> str:
        return self._run(["--version"], timeout=self.config.probe_timeout)

    def git_dir(self) -> str:
        return self._run(["rev-parse", "--git-dir"], timeout=self.config.probe_timeout)

    def current_branch(self) -> str:
        return self._run(["branch", "--show-current"], timeout=self.config.probe_timeout)

    def verify_ref(self, ref: str) -> str:
        return self._run(["rev-parse", "--verify", ref], timeout=self.config.probe_timeout)

    def upstream(self) -> str:
        return self._run(
            ["rev-parse", "--abbrev-ref", "--symbolic-full-name", "@{u}"],
            timeout=self.config.probe_timeout,
        )

    # -- Remotes --------------------------------------------------------------

    def remote_url(self, name: str) -> str:
        return self._run(["remote", "get-url", name])

    def add_remote(self, name: str, url: str) -> None:
        self._run(["remote", "add", name, url])

    def set_remote_url(self, name: str, url: str) -> None:
        self._run(["remote", "set-url", name, url])

    # -- Trees and objects ----------------------------------------------------

    def ls_tree(self, ref: str) -> str:
        # core.quotePath=false keeps non-ASCII filenames unescaped
        return self._run(["-c", "core.quotePath=false", "ls-tree", "-r", ref])

    def hash_objects(self, paths: Sequence[str]) -> List[str]:
        if not paths:
            return []
        output = self._run(
            ["hash-object", "--stdin-paths"],
            stdin="\n".join(paths) + "\n",
            timeout=self.config.file_timeout,
        )
        return output.splitlines()

    def commit_tree(self, tree: str, message: str) -> str:
        return self._run(["commit-tree", tree, "-m", message])

    def update_ref(self, ref: str, commit: str) -> None:
        self._run(["update-ref", ref, commit])

    # -- Worktrees ------------------------------------------------------------

    def worktree_add(self, path: str, branch: str) -> None:
        self._run(["worktree", "add", path, branch])

    def worktree_remove(self, path: str, *, timeout: Optional[float] = None) -> None:
        self._run(["worktree", "remove", path, "--force"], timeout=timeout)

    def worktree_prune(self) -> None:
        self._run(["worktree", "prune"])

    # -- Working tree ---------------------------------------------------------

    def add_all(self, cwd: Optional[str] = None) -> None:
        self._run(self._in(cwd, ["add", "-A"]))

    def status_porcelain(self, cwd: Optional[str] = None) -> str:
        return self._run(self._in(cwd, ["status", "--porcelain"]))

    def commit(self, message: str, cwd: Optional[str] = None) -> None:
        self._run(self._in(cwd, ["commit", "-m", message]))

    def head_sha(self, cwd: Optional[str] = None) -> str:
        return self._run(self._in(cwd, ["rev-parse", "HEAD"]))

    def push(
        self,
        remote: Optional[str] = None,
        branch: Optional[str] = None,
        *,
        force: bool = False,
        set_upstream: bool = False,
        cwd: Optional[str] = None,
    ) -> None:
        args = ["push"]
        if force:
            args.append("--force")
        if set_upstream:
            args.append("-u")
        if remote:
            args.append(remote)
            if branch:
                args.append(branch)
        self._run(self._in(cwd, args))

    def _in(self, cwd: Optional[str], args: List[str]) -> List[str]:
        return ["-C", cwd, *args] if cwd else args

    def _run(
        self,
        args: List[str],
        *,
        stdin: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> str:
        logger.debug("git %s", " ".join(args))
        return self.runner.run_checked(
            self.config.binary,
            args,
            stdin=stdin,
            timeout=timeout if timeout is not None else self.config.command_timeout,
        )
