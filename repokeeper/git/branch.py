"""Git branch operations."""

from pathlib import Path

from repokeeper.git.runner import run_git, GitResult


def get_current_branch(worktree: Path) -> str | None:
    """Get the current branch name, or None if detached HEAD."""
    result = run_git(["symbolic-ref", "--quiet", "--short", "HEAD"], worktree)
    if result.success:
        return result.stdout.strip() or None
    return None


def get_current_ref(worktree: Path) -> str | None:
    """Get the current branch name, falling back to the commit SHA when detached."""
    branch = get_current_branch(worktree)
    if branch:
        return branch
    return get_commit_sha(worktree)


def branch_exists(repo: Path, branch: str) -> bool:
    """Check if a local branch exists."""
    result = run_git(["show-ref", "--verify", "--quiet", f"refs/heads/{branch}"], repo)
    return result.success


def get_commit_sha(worktree: Path, ref: str = "HEAD") -> str | None:
    """Get the SHA of a ref."""
    result = run_git(["rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}"], worktree)
    if result.success:
        return result.stdout.strip()
    return None


def has_commits(worktree: Path) -> bool:
    """Check whether HEAD points at a commit (False on an unborn branch)."""
    return get_commit_sha(worktree) is not None


def get_commit_count(worktree: Path, ref: str = "HEAD") -> int:
    """
    Get number of commits reachable from a ref.

    Args:
        worktree: Path to worktree
        ref: Git ref or range (e.g., "HEAD" or "main..feature")

    Returns:
        Number of commits, or 0 on error
    """
    result = run_git(["rev-list", "--count", ref], worktree)
    if result.success:
        try:
            return int(result.stdout.strip())
        except ValueError:
            pass
    return 0


def list_local_branches(repo: Path) -> list[str]:
    """List local branch names in the order git reports them."""
    result = run_git(["for-each-ref", "--format=%(refname:short)", "refs/heads/"], repo)
    if not result.success:
        return []
    return [b.strip() for b in result.stdout.splitlines() if b.strip()]


def checkout_branch(repo: Path, ref: str) -> GitResult:
    """Checkout a branch or commit."""
    return run_git(["checkout", "--quiet", ref], repo)


def checkout_orphan(repo: Path, branch: str, start_point: str | None = None) -> GitResult:
    """Start a new branch with no history.

    Without start_point the working tree is kept; with it, the index and
    working tree are switched to start_point's tree.
    """
    args = ["checkout", "--quiet", "--orphan", branch]
    if start_point:
        args.append(start_point)
    return run_git(args, repo)


def create_branch(repo: Path, branch: str, start_point: str | None = None) -> GitResult:
    """Create a branch without checking it out."""
    args = ["branch", "--quiet", branch]
    if start_point:
        args.append(start_point)
    return run_git(args, repo)


def delete_branch(repo: Path, branch: str, force: bool = False) -> GitResult:
    """Delete a local branch. force=True ignores merge status (-D)."""
    return run_git(["branch", "--quiet", "-D" if force else "-d", branch], repo)


def rename_branch(repo: Path, old: str, new: str, force: bool = False) -> GitResult:
    """Rename a local branch. force=True overwrites an existing target (-M)."""
    return run_git(["branch", "-M" if force else "-m", old, new], repo)
