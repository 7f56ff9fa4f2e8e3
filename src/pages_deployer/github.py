"""Minimal GitHub REST client for Pages status lookups."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from .config import GitHubConfig
from .gitops.remote import pages_site_url

logger = logging.getLogger(__name__)

_REPO_NAME = re.compile(r"[a-zA-Z0-9._-]+")
PAGES_STATUSES = ("built", "building", "errored")


class GitHubAPIError(RuntimeError):
    """Raised when a GitHub API request fails unexpectedly."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.status_code = status_code
        super().__init__(message)


@dataclass
class PagesStatus:
    status: str
    url: str


def is_valid_repo_name(name: str) -> bool:
    """Letters, digits, '-', '_' and '.', not starting with '.', at most 100 chars."""
    if not name or name.startswith(".") or len(name) > 100:
        return False
    return bool(_REPO_NAME.fullmatch(name))


class GitHubClient:
    """Thin wrapper over the endpoints the deployer needs."""

    def __init__(self, config: GitHubConfig, session: Optional[requests.Session] = None) -> None:
        self.config = config
        self.base_url = config.api_base.rstrip("/")
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Accept": "application/vnd.github.v3+json",
                "User-Agent": "Moss-GitHub-Deployer",
            }
        )
        if config.token:
            self.session.headers["Authorization"] = f"Bearer {config.token}"

    def get_authenticated_user(self) -> Dict[str, Any]:
        response = self._get("/user")
        if response.status_code == 401:
            raise GitHubAPIError("Invalid or expired token", status_code=401)
        if not response.ok:
            raise GitHubAPIError(f"Failed to get user: {response.status_code}", status_code=response.status_code)
        return response.json()

    def repo_exists(self, owner: str, repo: str) -> bool:
        response = self._get(f"/repos/{owner}/{repo}")
        if response.status_code == 404:
            return False
        if not response.ok:
            raise GitHubAPIError(
                f"Failed to check repository: {response.status_code}", status_code=response.status_code
            )
        return True

    def pages_status(self, owner: str, repo: str) -> PagesStatus:
        """Latest Pages build status; any failure maps to ``unknown``."""
        try:
            response = self._get(f"/repos/{owner}/{repo}/pages/builds/latest")
        except requests.RequestException as exc:
            logger.debug("Pages status request failed: %s", exc)
            return PagesStatus(status="unknown", url="")

        if not response.ok:
            return PagesStatus(status="unknown", url="")

        try:
            status = response.json().get("status")
        except ValueError:
            status = None
        if status not in PAGES_STATUSES:
            status = "unknown"
        return PagesStatus(status=status, url=pages_site_url(owner, repo))

    def _get(self, path: str) -> requests.Response:
        return self.session.get(f"{self.base_url}{path}", timeout=self.config.timeout)
