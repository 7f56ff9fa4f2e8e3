"""In-memory stand-ins for git used by the unit tests."""

from __future__ import annotations

import hashlib
import shutil
import subprocess
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from pages_deployer.runner import CommandError


def blob_sha(data: bytes) -> str:
    return hashlib.sha1(b"blob %d\0" % len(data) + data).hexdigest()


def git_error(message: str, command: str = "git") -> CommandError:
    return CommandError([command], 128, message)


def run_git(args: List[str], cwd: Path) -> str:
    process = subprocess.run(
        ["git", *args],
        cwd=str(cwd),
        check=True,
        capture_output=True,
        text=True,
    )
    return process.stdout.strip()


class FakeGit:
    """A GitPort that keeps repository state in dictionaries.

    Branch contents are fingerprints (path -> blob hash). Worktrees are real
    directories so the orchestrator's file copying can run against them.
    ``failures`` maps a method name to errors raised on successive calls.
    """

    def __init__(self, current_branch: str = "main") -> None:
        self.current = current_branch
        self.remotes: Dict[str, str] = {}
        self.refs: Dict[str, str] = {}
        self.trees: Dict[str, Dict[str, str]] = {}
        self.worktrees: Dict[str, str] = {}
        self.upstream_ref: Optional[str] = None
        self.pushes: List[dict] = []
        self.calls: List[tuple] = []
        self.failures: Dict[str, List[Exception]] = {}
        self._counter = 0
        if current_branch:
            self.refs[f"refs/heads/{current_branch}"] = self._new_sha()
            self.trees[current_branch] = {}

    # -- helpers --------------------------------------------------------------

    def _new_sha(self) -> str:
        self._counter += 1
        return hashlib.sha1(f"commit-{self._counter}".encode()).hexdigest()

    def _record(self, name: str, *args) -> None:
        self.calls.append((name, *args))
        pending = self.failures.get(name)
        if pending:
            raise pending.pop(0)

    def calls_named(self, name: str) -> List[tuple]:
        return [call for call in self.calls if call[0] == name]

    def add_branch(self, branch: str, tree: Optional[Dict[str, str]] = None) -> None:
        self.refs[f"refs/heads/{branch}"] = self._new_sha()
        self.trees[branch] = dict(tree or {})

    @staticmethod
    def fingerprint_dir(root: Path) -> Dict[str, str]:
        result = {}
        for path in root.rglob("*"):
            rel = path.relative_to(root)
            if rel.parts[0] == ".git" or not path.is_file():
                continue
            result[rel.as_posix()] = blob_sha(path.read_bytes())
        return result

    # -- GitPort --------------------------------------------------------------

    def version(self) -> str:
        self._record("version")
        return "git version 2.43.0"

    def git_dir(self) -> str:
        self._record("git_dir")
        return ".git"

    def remote_url(self, name: str) -> str:
        self._record("remote_url", name)
        if name not in self.remotes:
            raise git_error(f"error: No such remote '{name}'")
        return self.remotes[name]

    def add_remote(self, name: str, url: str) -> None:
        self._record("add_remote", name, url)
        if name in self.remotes:
            raise git_error(f"error: remote {name} already exists.")
        self.remotes[name] = url

    def set_remote_url(self, name: str, url: str) -> None:
        self._record("set_remote_url", name, url)
        self.remotes[name] = url

    def current_branch(self) -> str:
        self._record("current_branch")
        return self.current

    def verify_ref(self, ref: str) -> str:
        self._record("verify_ref", ref)
        for candidate in (ref, f"refs/heads/{ref}"):
            if candidate in self.refs:
                return self.refs[candidate]
        raise git_error("fatal: Needed a single revision")

    def upstream(self) -> str:
        self._record("upstream")
        if not self.upstream_ref:
            raise git_error("fatal: no upstream configured for branch")
        return self.upstream_ref

    def ls_tree(self, ref: str) -> str:
        self._record("ls_tree", ref)
        if ref not in self.trees:
            raise git_error(f"fatal: Not a valid object name {ref}")
        return "\n".join(
            f"100644 blob {digest}\t{path}" for path, digest in self.trees[ref].items()
        )

    def hash_objects(self, paths: Sequence[str]) -> List[str]:
        self._record("hash_objects", list(paths))
        return [blob_sha(Path(path).read_bytes()) for path in paths]

    def commit_tree(self, tree: str, message: str) -> str:
        self._record("commit_tree", tree, message)
        return self._new_sha()

    def update_ref(self, ref: str, commit: str) -> None:
        self._record("update_ref", ref, commit)
        self.refs[ref] = commit
        if ref.startswith("refs/heads/"):
            self.trees.setdefault(ref[len("refs/heads/"):], {})

    def worktree_add(self, path: str, branch: str) -> None:
        self._record("worktree_add", path, branch)
        for other_path, other_branch in self.worktrees.items():
            if other_branch == branch:
                raise git_error(f"fatal: '{branch}' is already used by worktree at '{other_path}'")
        if f"refs/heads/{branch}" not in self.refs:
            raise git_error(f"fatal: invalid reference: {branch}")
        root = Path(path)
        root.mkdir(parents=True)
        (root / ".git").write_text(f"gitdir: /fake/.git/worktrees/{root.name}\n", encoding="utf-8")
        for name in self.trees.get(branch, {}):
            target = root / name
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(f"checked out {name}", encoding="utf-8")
        self.worktrees[path] = branch

    def worktree_remove(self, path: str, *, timeout: Optional[float] = None) -> None:
        self._record("worktree_remove", path, timeout)
        if path not in self.worktrees:
            raise git_error(f"fatal: '{path}' is not a working tree")
        shutil.rmtree(path, ignore_errors=True)
        del self.worktrees[path]

    def worktree_prune(self) -> None:
        self._record("worktree_prune")
        for path in [p for p in self.worktrees if not Path(p).exists()]:
            del self.worktrees[path]

    def add_all(self, cwd: Optional[str] = None) -> None:
        self._record("add_all", cwd)

    def status_porcelain(self, cwd: Optional[str] = None) -> str:
        self._record("status_porcelain", cwd)
        branch = self.worktrees[cwd]
        current = self.fingerprint_dir(Path(cwd))
        tree = self.trees.get(branch, {})
        lines = [f"A  {p}" for p in current if p not in tree]
        lines += [f"M  {p}" for p in current if p in tree and tree[p] != current[p]]
        lines += [f"D  {p}" for p in tree if p not in current]
        return "\n".join(lines)

    def commit(self, message: str, cwd: Optional[str] = None) -> None:
        self._record("commit", message, cwd)
        branch = self.worktrees[cwd] if cwd else self.current
        self.trees[branch] = self.fingerprint_dir(Path(cwd)) if cwd else self.trees.get(branch, {})
        self.refs[f"refs/heads/{branch}"] = self._new_sha()

    def head_sha(self, cwd: Optional[str] = None) -> str:
        self._record("head_sha", cwd)
        branch = self.worktrees[cwd] if cwd else self.current
        ref = f"refs/heads/{branch}"
        if ref not in self.refs:
            raise git_error("fatal: ambiguous argument 'HEAD'")
        return self.refs[ref]

    def push(
        self,
        remote: Optional[str] = None,
        branch: Optional[str] = None,
        *,
        force: bool = False,
        set_upstream: bool = False,
        cwd: Optional[str] = None,
    ) -> None:
        self._record("push", remote, branch)
        self.pushes.append(
            {"remote": remote, "branch": branch, "force": force, "set_upstream": set_upstream, "cwd": cwd}
        )
