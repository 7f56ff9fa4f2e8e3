"""The deploy hook invoked by the host application."""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from .config import AppConfig
from .deploy import DeployOrchestrator
from .fingerprint import check_for_changes
from .github import GitHubClient
from .gitops.branches import branch_exists, is_git_available
from .gitops.cli import GitCli
from .gitops.port import GitPort
from .gitops.remote import ensure_remote, github_pages_url, parse_github_url
from .models import DeployContext, DeploymentInfo, HookResult
from .reporting import Reporter
from .validation import ValidationError, validate_all

logger = logging.getLogger(__name__)


class DeployHook:
    """Validates the project and publishes its compiled site to GitHub Pages.

    Never raises: failures come back as an unsuccessful :class:`HookResult`
    and are reported to the host as fatal errors. Worktree cleanup runs in
    the background after the result is built; ``cleanup_thread`` lets
    callers wait for it.
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        reporter: Optional[Reporter] = None,
        git: Optional[GitPort] = None,
        github: Optional[GitHubClient] = None,
    ) -> None:
        self.config = config or AppConfig()
        self.reporter = reporter or Reporter()
        self.git = git
        self.github = github
        self.cleanup_thread: Optional[threading.Thread] = None

    def run(self, context: DeployContext) -> HookResult:
        self.reporter.set_hook("deploy")
        logger.info("GitHub Pages: starting deployment of %s", context.project_path)

        try:
            return self._deploy(context)
        except Exception as exc:
            message = str(exc) or exc.__class__.__name__
            self.reporter.error(message, "deploy", fatal=True)
            logger.error("GitHub Pages: failed - %s", message)
            return HookResult(success=False, message=message)

    def _deploy(self, context: DeployContext) -> HookResult:
        deploy_cfg = self.config.deploy
        git = self.git or GitCli(context.project_path, self.config.git)
        site_dir = Path(context.output_dir or deploy_cfg.site_dir)
        if not site_dir.is_absolute():
            site_dir = Path(context.project_path) / site_dir

        self.reporter.progress("validating", 1, 2, "Validating requirements...")
        if not is_git_available(git):
            raise ValidationError("Git is not available. Install Git and try again.")
        if deploy_cfg.remote_url:
            ensure_remote(git, deploy_cfg.remote, deploy_cfg.remote_url)
        remote_url = validate_all(git, site_dir, deploy_cfg.remote)
        pages_url = github_pages_url(remote_url)

        self.reporter.progress("validating", 2, 2, "Checking for changes...")
        branch = deploy_cfg.branch
        if branch_exists(git, branch, deploy_cfg.remote):
            check = check_for_changes(git, site_dir, branch)
            if not check.has_changes:
                self.reporter.progress("complete", 1, 1, "No changes to deploy")
                return self._result(f"No changes to deploy.\n\nYour site: {pages_url}", pages_url, "")
            if check.reason:
                logger.info("Deploying anyway: %s", check.reason)

        orchestrator = DeployOrchestrator(git, self.config, self.reporter)
        try:
            result = orchestrator.deploy_to_gh_pages(site_dir)
        except Exception:
            self.cleanup_thread = orchestrator.pending_cleanup
            raise
        self.cleanup_thread = result.cleanup_in_background()

        if not result.has_changes:
            self.reporter.progress("complete", 1, 1, "No changes to deploy")
            return self._result(f"No changes to deploy.\n\nYour site: {pages_url}", pages_url, "")

        metadata = {}
        status = self._pages_status(remote_url)
        if status:
            metadata["pages_status"] = status

        logger.info("Committed %s", result.commit_sha[:7])
        self.reporter.progress("complete", 1, 1, "Deployed to GitHub Pages!")
        return self._result(
            f"Deployed to GitHub Pages!\n\nYour site: {pages_url}\n"
            f"It may take a minute or two for GitHub to publish the update.",
            pages_url,
            result.commit_sha,
            metadata,
        )

    def _pages_status(self, remote_url: str) -> Optional[str]:
        client = self.github
        if client is None:
            if not self.config.github.token:
                return None
            client = GitHubClient(self.config.github)
        parsed = parse_github_url(remote_url)
        if not parsed:
            return None
        return client.pages_status(*parsed).status

    def _result(self, message: str, url: str, commit_sha: str, metadata: Optional[dict] = None) -> HookResult:
        return HookResult(
            success=True,
            message=message,
            deployment=DeploymentInfo(
                method="github-pages",
                url=url,
                deployed_at=datetime.now(timezone.utc).isoformat(),
                metadata={"branch": self.config.deploy.branch, "commit_sha": commit_sha, **(metadata or {})},
            ),
        )


def on_deploy(
    context: DeployContext,
    config: Optional[AppConfig] = None,
    reporter: Optional[Reporter] = None,
) -> HookResult:
    """Host entry point."""
    return DeployHook(config=config, reporter=reporter).run(context)
