"""Requirement validation for GitHub Pages deployment."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

from .deploy import DeployError
from .gitops.branches import is_repository
from .gitops.port import GitPort
from .gitops.remote import has_remote

logger = logging.getLogger(__name__)


class ValidationError(DeployError):
    """A deployment requirement is not met."""


def validate_git_repository(git: GitPort) -> None:
    if not is_repository(git):
        raise ValidationError(
            "This folder is not a git repository.\n\n"
            "To publish to GitHub Pages, you need to:\n"
            "1. Run: git init\n"
            "2. Create a GitHub repository\n"
            "3. Add it as remote: git remote add origin <url>"
        )


def validate_site_compiled(site_dir: Union[str, Path]) -> None:
    root = Path(site_dir)
    if not root.is_dir():
        raise ValidationError(f"Site not found at {site_dir}\n\nPlease compile your site first.")
    if not any(path.is_file() for path in root.rglob("*")):
        raise ValidationError("Site directory is empty. Please compile your site first.")


def validate_github_remote(git: GitPort, remote: str = "origin") -> str:
    if not has_remote(git, remote):
        raise ValidationError(
            "No git remote configured.\n\n"
            "To publish, you need to:\n"
            "1. Create a GitHub repository\n"
            f"2. Add it as remote: git remote add {remote} <url>"
        )

    remote_url = git.remote_url(remote).strip()
    if "github.com" not in remote_url:
        raise ValidationError(
            f"Remote '{remote_url}' is not a GitHub URL.\n\n"
            "GitHub Pages deployment only works with GitHub repositories.\n"
            "Please add a GitHub remote or use a different deployment method."
        )
    return remote_url


def validate_all(git: GitPort, site_dir: Union[str, Path], remote: str = "origin") -> str:
    """Run all validations and return the remote URL."""
    logger.info("Validating git repository...")
    validate_git_repository(git)

    logger.info("Validating compiled site...")
    validate_site_compiled(site_dir)

    logger.info("Validating GitHub remote...")
    remote_url = validate_github_remote(git, remote)

    logger.info("All validations passed")
    return remote_url
