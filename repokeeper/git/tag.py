"""Git tag operations."""

from pathlib import Path

from repokeeper.git.runner import run_git, GitResult


def tag_exists(repo: Path, tag: str) -> bool:
    """Check if a tag exists."""
    result = run_git(["show-ref", "--verify", "--quiet", f"refs/tags/{tag}"], repo)
    return result.success


def create_tag(repo: Path, tag: str, ref: str = "HEAD") -> GitResult:
    """Create a lightweight tag. Fails if the tag already exists."""
    return run_git(["tag", tag, ref], repo)
