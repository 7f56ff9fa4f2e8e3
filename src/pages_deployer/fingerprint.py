"""Content fingerprints of the deploy branch and the local site output.

A fingerprint maps each relative file path to its git blob hash. Two
fingerprints are compared as mappings, never as joined or sorted strings:
sort order of non-ASCII names differs between platforms and locales.
"""

from __future__ import annotations

import hashlib
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

from .runner import CommandError
from .gitops.port import GitPort

logger = logging.getLogger(__name__)

Fingerprint = Dict[str, str]


@dataclass
class FingerprintDiff:
    """Differences between a local and a remote fingerprint."""

    added: List[str] = field(default_factory=list)
    modified: List[str] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.added or self.modified or self.deleted)

    def summary(self) -> str:
        return f"{len(self.added)} added, {len(self.modified)} modified, {len(self.deleted)} deleted"


@dataclass
class ChangeCheck:
    """Outcome of the early change check."""

    has_changes: bool
    reason: Optional[str] = None
    diff: Optional[FingerprintDiff] = None


def parse_ls_tree(output: str) -> Fingerprint:
    """Parse ``ls-tree -r`` lines of the form ``<mode> <type> <hash>\\t<path>``.

    Only the first tab separates metadata from the path, so paths may hold
    spaces or further tabs. Lines without a tab or with too few metadata
    fields are skipped.
    """
    fingerprint: Fingerprint = {}
    for line in output.splitlines():
        meta, sep, path = line.partition("\t")
        if not sep or not path:
            continue
        fields = meta.split()
        if len(fields) < 3:
            continue
        fingerprint[path] = fields[2]
    return fingerprint


def remote_fingerprint(git: GitPort, branch: str = "gh-pages") -> Optional[Fingerprint]:
    """Fingerprint of `branch`, or None when it cannot be read."""
    try:
        output = git.ls_tree(branch)
    except CommandError as exc:
        logger.debug("Could not list %s: %s", branch, exc)
        return None
    return parse_ls_tree(output)


def list_site_files(site_dir: Union[str, Path]) -> List[str]:
    root = Path(site_dir)
    return [
        path.relative_to(root).as_posix()
        for path in root.rglob("*")
        if path.is_symlink() or path.is_file()
    ]


def _symlink_blob_sha(path: Path) -> str:
    # git stores a symlink as a blob holding the link target
    target = os.fsencode(os.readlink(path))
    return hashlib.sha1(b"blob %d\0" % len(target) + target).hexdigest()


def local_fingerprint(git: GitPort, site_dir: Union[str, Path]) -> Optional[Fingerprint]:
    """Fingerprint of the files under `site_dir`, hashed in one git call.

    Returns None when the directory is missing or hashing fails; partial
    results are never returned.
    """
    root = Path(site_dir).resolve()
    if not root.is_dir():
        return None

    files = list_site_files(root)
    if not files:
        return {}

    links = {name: _symlink_blob_sha(root / name) for name in files if (root / name).is_symlink()}
    regular = [name for name in files if name not in links]
    if not regular:
        return links

    try:
        hashes = git.hash_objects([str(root / name) for name in regular])
    except CommandError as exc:
        logger.warning("Hashing site files failed: %s", exc)
        return None

    if len(hashes) != len(regular):
        logger.warning("Expected %d hashes from hash-object, got %d", len(regular), len(hashes))
        return None
    return {**dict(zip(regular, hashes)), **links}


def diff_fingerprints(local: Fingerprint, remote: Fingerprint) -> FingerprintDiff:
    diff = FingerprintDiff()
    remaining = dict(remote)
    for path, digest in local.items():
        remote_digest = remaining.pop(path, None)
        if remote_digest is None:
            diff.added.append(path)
        elif remote_digest != digest:
            diff.modified.append(path)
    diff.deleted.extend(remaining)
    return diff


def check_for_changes(
    git: GitPort,
    site_dir: Union[str, Path],
    branch: str = "gh-pages",
) -> ChangeCheck:
    """Compare the site output with `branch` without creating a worktree."""
    try:
        remote = remote_fingerprint(git, branch)
        if remote is None:
            return ChangeCheck(has_changes=True, reason=f"Could not read {branch}")

        local = local_fingerprint(git, site_dir)
        if local is None:
            return ChangeCheck(has_changes=True, reason="Could not read site directory")

        diff = diff_fingerprints(local, remote)
    except Exception as exc:
        logger.warning("Early change detection failed: %s", exc)
        return ChangeCheck(has_changes=True, reason="Detection error")

    if diff.has_changes:
        logger.info("Site changed: %s", diff.summary())
    else:
        logger.info("No changes detected (skipping worktree)")
    return ChangeCheck(has_changes=diff.has_changes, diff=diff)
