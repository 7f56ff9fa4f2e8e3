"""External program execution."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Union

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60.0


class CommandError(RuntimeError):
    """Raised when a command that was required to succeed fails."""

    def __init__(self, command: Sequence[str], exit_code: int, stderr: str) -> None:
        self.command = list(command)
        self.exit_code = exit_code
        self.stderr = stderr
        super().__init__(stderr or f"exit code {exit_code}")


@dataclass
class CommandResult:
    """Result of running an external program."""

    command: list[str]
    exit_code: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        return self.exit_code == 0


class CommandRunner:
    """Runs programs to completion and captures their output.

    A nonzero exit never raises here; callers inspect ``success``.
    Timeouts and missing binaries are reported as failed results.
    """

    def __init__(self, cwd: Optional[Union[str, Path]] = None) -> None:
        self.cwd = str(cwd) if cwd else None

    def execute(
        self,
        path: str,
        args: Sequence[str],
        *,
        stdin: Optional[str] = None,
        timeout: Optional[float] = DEFAULT_TIMEOUT,
    ) -> CommandResult:
        command = [path, *args]
        try:
            process = subprocess.run(
                command,
                cwd=self.cwd,
                input=stdin,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="surrogateescape",
                timeout=timeout,
                check=False,
            )
        except subprocess.TimeoutExpired:
            logger.warning("%s timed out after %ss", " ".join(command), timeout)
            return CommandResult(
                command=command,
                exit_code=-1,
                stdout="",
                stderr=f"Command timed out after {timeout} seconds",
            )
        except OSError as exc:
            return CommandResult(command=command, exit_code=-1, stdout="", stderr=str(exc))

        return CommandResult(
            command=command,
            exit_code=process.returncode,
            stdout=process.stdout or "",
            stderr=(process.stderr or "").strip(),
        )

    def run_checked(
        self,
        path: str,
        args: Sequence[str],
        *,
        stdin: Optional[str] = None,
        timeout: Optional[float] = DEFAULT_TIMEOUT,
    ) -> str:
        """Run a program and return its stripped stdout, raising on failure."""
        result = self.execute(path, args, stdin=stdin, timeout=timeout)
        if not result.success:
            raise CommandError(result.command, result.exit_code, result.stderr)
        return result.stdout.strip()
