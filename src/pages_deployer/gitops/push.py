"""Pushing with backoff on transient network failures."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional, Tuple, TypeVar

from .port import GitPort

logger = logging.getLogger(__name__)

T = TypeVar("T")

TRANSIENT_NETWORK_ERRORS: Tuple[str, ...] = (
    "Could not resolve host",
    "Connection refused",
    "Connection timed out",
    "Failed to connect",
    "unable to access",
    "Could not read from remote",
)


def is_transient_network_error(message: str) -> bool:
    return any(marker in message for marker in TRANSIENT_NETWORK_ERRORS)


def with_retry(
    operation: Callable[[], T],
    *,
    max_attempts: int = 3,
    base_delay: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Run `operation`, retrying only transient network failures.

    Delays grow as ``base_delay * 2 ** (attempt - 1)``. Any other error, or
    the last network error once attempts run out, is raised as is.
    """
    attempt = 1
    while True:
        try:
            return operation()
        except Exception as exc:
            if not is_transient_network_error(str(exc)) or attempt >= max_attempts:
                raise
            delay = base_delay * (2 ** (attempt - 1))
            logger.warning(
                "Network error, retrying in %.1fs (attempt %d/%d)...", delay, attempt, max_attempts
            )
            sleep(delay)
            attempt += 1


def push_with_retry(
    git: GitPort,
    branch: str,
    has_upstream: bool,
    *,
    remote: str = "origin",
    max_attempts: int = 3,
    base_delay: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
    cwd: Optional[str] = None,
) -> None:
    """Push `branch`, setting upstream tracking with ``-u`` when none exists."""

    def _push() -> None:
        if not has_upstream:
            logger.info("Setting upstream to %s/%s...", remote, branch)
            git.push(remote, branch, set_upstream=True, cwd=cwd)
        else:
            git.push(cwd=cwd)

    with_retry(_push, max_attempts=max_attempts, base_delay=base_delay, sleep=sleep)


def force_push_with_retry(
    git: GitPort,
    branch: str,
    *,
    remote: str = "origin",
    max_attempts: int = 3,
    base_delay: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
    cwd: Optional[str] = None,
) -> None:
    """Force-push `branch`; the deploy branch history is regenerable."""
    with_retry(
        lambda: git.push(remote, branch, force=True, cwd=cwd),
        max_attempts=max_attempts,
        base_delay=base_delay,
        sleep=sleep,
    )
