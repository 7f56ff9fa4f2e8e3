"""Remote configuration and GitHub URL helpers."""

from __future__ import annotations

import logging
import re
from typing import Optional, Tuple

from ..runner import CommandError
from .port import GitPort

logger = logging.getLogger(__name__)

_HTTPS_URL = re.compile(r"^https://github\.com/([^/]+)/([^/]+?)(?:\.git)?/?$")
_SSH_URL = re.compile(r"^(?:ssh://)?git@github\.com[:/]([^/]+)/([^/]+?)(?:\.git)?$")


def ensure_remote(git: GitPort, name: str, url: str) -> None:
    """Make remote `name` point at `url`, adding or rewriting it as needed.

    Idempotent: nothing is changed when the remote already has that URL.
    """
    try:
        existing = git.remote_url(name)
    except CommandError:
        logger.info("Adding remote '%s'...", name)
        git.add_remote(name, url)
        return

    if existing.strip() == url:
        logger.debug("Remote '%s' already configured", name)
        return

    logger.info("Updating remote '%s' URL...", name)
    git.set_remote_url(name, url)


def has_remote(git: GitPort, name: str = "origin") -> bool:
    try:
        git.remote_url(name)
        return True
    except CommandError:
        return False


def is_ssh_remote(remote_url: str) -> bool:
    return remote_url.startswith("git@") or remote_url.startswith("ssh://")


def parse_github_url(remote_url: str) -> Optional[Tuple[str, str]]:
    """Return ``(owner, repo)`` for GitHub HTTPS or SSH remote URLs."""
    remote_url = remote_url.strip()
    for pattern in (_HTTPS_URL, _SSH_URL):
        match = pattern.match(remote_url)
        if match:
            return match.group(1), match.group(2)
    return None


def pages_site_url(owner: str, repo: str) -> str:
    """User/org sites (`<owner>.github.io`) are served from the root."""
    if repo.lower() == f"{owner.lower()}.github.io":
        return f"https://{owner}.github.io/"
    return f"https://{owner}.github.io/{repo}"


def github_pages_url(remote_url: str) -> str:
    parsed = parse_github_url(remote_url)
    if not parsed:
        raise ValueError("Could not parse GitHub URL from remote")
    return pages_site_url(*parsed)
