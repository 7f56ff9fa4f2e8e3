"""Configuration loading utilities for the pages deployer."""

from __future__ import annotations

import json
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()

_DEFAULT_CONFIG_PATH = Path("config/pages_deployer.json")


@dataclass
class GitConfig:
    """How the git binary is invoked."""

    binary: str = "git"
    command_timeout: float = 60.0   # regular git operations
    file_timeout: float = 30.0      # file helpers (hash-object batches, removals)
    probe_timeout: float = 5.0      # lightweight existence checks


@dataclass
class DeployConfig:
    """Settings for publishing the compiled site."""

    branch: str = "gh-pages"
    remote: str = "origin"
    remote_url: Optional[str] = None
    site_dir: str = ".moss/site"
    worktree_root: str = field(default_factory=tempfile.gettempdir)
    worktree_prefix: str = "moss-gh-pages"
    commit_message: str = "Deploy site\n\nGenerated by Moss"
    orphan_message: str = "Initialize gh-pages branch"
    # must cover a full `worktree remove` of a large site
    cleanup_timeout: float = 30.0


@dataclass
class RetryConfig:
    """Backoff policy for pushes that hit transient network errors."""

    max_attempts: int = 3
    base_delay: float = 1.0


@dataclass
class GitHubConfig:
    """Optional GitHub REST access used to report Pages status."""

    token: Optional[str] = None
    api_base: str = "https://api.github.com"
    timeout: float = 15.0


@dataclass
class AppConfig:
    """Top-level configuration."""

    git: GitConfig = field(default_factory=GitConfig)
    deploy: DeployConfig = field(default_factory=DeployConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)
    github: GitHubConfig = field(default_factory=GitHubConfig)

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "AppConfig":
        def section(name: str) -> Dict[str, Any]:
            raw = payload.get(name, {}) or {}
            # keys starting with "_" are comments
            return {k: v for k, v in raw.items() if not k.startswith("_")}

        return cls(
            git=GitConfig(**{**GitConfig().__dict__, **section("git")}),
            deploy=DeployConfig(**{**DeployConfig().__dict__, **section("deploy")}),
            retry=RetryConfig(**{**RetryConfig().__dict__, **section("retry")}),
            github=GitHubConfig(**{**GitHubConfig().__dict__, **section("github")}),
        )


def load_config(path: Optional[str] = None) -> AppConfig:
    """Load configuration from `path` or the default location.

    Environment variables (higher priority than config file):
    - PAGES_DEPLOYER_BRANCH: branch to publish to
    - PAGES_DEPLOYER_REMOTE: remote name
    - PAGES_DEPLOYER_REMOTE_URL: URL the remote must point at
    - PAGES_DEPLOYER_SITE_DIR: compiled site directory
    - PAGES_DEPLOYER_GIT_BINARY: path to the git executable
    - PAGES_DEPLOYER_GITHUB_TOKEN or GITHUB_TOKEN: GitHub API token
    - PAGES_DEPLOYER_MAX_RETRIES: push attempts on network errors
    """

    if path and not Path(path).is_file():
        raise FileNotFoundError(f"Could not find configuration file: {path}")

    candidate = Path(path) if path else _DEFAULT_CONFIG_PATH
    if candidate.is_file():
        with candidate.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
        config = AppConfig.from_dict(data)
    else:
        config = AppConfig()

    _apply_env_overrides(config)
    return config


def _apply_env_overrides(config: AppConfig) -> None:
    env_branch = os.getenv("PAGES_DEPLOYER_BRANCH")
    if env_branch:
        config.deploy.branch = env_branch

    env_remote = os.getenv("PAGES_DEPLOYER_REMOTE")
    if env_remote:
        config.deploy.remote = env_remote

    env_remote_url = os.getenv("PAGES_DEPLOYER_REMOTE_URL")
    if env_remote_url:
        config.deploy.remote_url = env_remote_url

    env_site_dir = os.getenv("PAGES_DEPLOYER_SITE_DIR")
    if env_site_dir:
        config.deploy.site_dir = env_site_dir

    env_binary = os.getenv("PAGES_DEPLOYER_GIT_BINARY")
    if env_binary:
        config.git.binary = env_binary

    if not config.github.token:
        config.github.token = os.getenv("PAGES_DEPLOYER_GITHUB_TOKEN") or os.getenv("GITHUB_TOKEN")

    env_retries = os.getenv("PAGES_DEPLOYER_MAX_RETRIES")
    if env_retries:
        config.retry.max_attempts = int(env_retries)
