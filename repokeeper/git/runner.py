"""Subprocess runner for git commands.

Every git call in repokeeper goes through run_git(). Failures come back as
a GitResult instead of an exception so workflow steps can decide whether a
failure is a warning or fatal.
"""

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

# Local commands; network commands pass their own (possibly None) timeout
DEFAULT_TIMEOUT = 30

GIT_NOT_FOUND = 127


@dataclass
class GitResult:
    """Outcome of one git invocation."""
    returncode: int
    stdout: str
    stderr: str
    timed_out: bool = False

    @property
    def success(self) -> bool:
        return self.returncode == 0 and not self.timed_out

    @property
    def error(self) -> str:
        """Last line git printed, for one-line warnings."""
        text = self.stderr.strip() or self.stdout.strip()
        if not text:
            return f"exit code {self.returncode}"
        return text.splitlines()[-1]


def run_git(args: list[str], cwd: Path, *, timeout: float | None = DEFAULT_TIMEOUT) -> GitResult:
    """
    Run `git -C <cwd> <args>` and capture its output.

    Args:
        args: Git arguments (e.g., ["push", "--force", "origin", "main"])
        cwd: Repository the command runs against
        timeout: Seconds before the command is abandoned; None waits for git

    Returns:
        GitResult. A timeout or a missing git executable is a failed result,
        never an exception.
    """
    cmd = ["git", "-C", str(cwd), *args]
    logger.debug(f"$ {' '.join(cmd)}")

    try:
        proc = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout)
    except subprocess.TimeoutExpired:
        logger.warning(f"git {args[0]} timed out after {timeout}s")
        return GitResult(-1, "", f"Command timed out after {timeout}s", timed_out=True)
    except FileNotFoundError:
        return GitResult(GIT_NOT_FOUND, "", "git executable not found on PATH")

    if proc.returncode != 0:
        logger.debug(f"git {args[0]} exited {proc.returncode}: {proc.stderr.strip()}")
    return GitResult(proc.returncode, proc.stdout, proc.stderr)
