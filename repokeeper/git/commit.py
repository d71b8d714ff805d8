"""Git commit operations."""

from pathlib import Path

from repokeeper.git.runner import run_git, GitResult


def stage_all(worktree: Path) -> GitResult:
    """Stage all changes (new, modified, deleted)."""
    return run_git(["add", "--all"], worktree)


def commit(worktree: Path, message: str) -> GitResult:
    """Create a commit from the index with the given message.

    Fails (non-zero exit) when nothing is staged.
    """
    return run_git(["commit", "--quiet", "-m", message], worktree)
