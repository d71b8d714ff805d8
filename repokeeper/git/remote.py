"""Git remote operations.

Network operations take an optional timeout; None waits for git to finish.
"""

from pathlib import Path

from repokeeper.git.runner import run_git, GitResult


def get_remote_url(repo: Path, remote: str) -> str | None:
    """Get the URL of a remote, or None if it is not configured."""
    result = run_git(["remote", "get-url", remote], repo)
    if result.success:
        return result.stdout.strip() or None
    return None


def has_remote(repo: Path, remote: str) -> bool:
    """Check if the named remote is configured."""
    return get_remote_url(repo, remote) is not None


def add_remote(repo: Path, remote: str, url: str) -> GitResult:
    """Configure a new remote."""
    return run_git(["remote", "add", remote, url], repo)


def set_remote_url(repo: Path, remote: str, url: str) -> GitResult:
    """Point an existing remote at a new URL."""
    return run_git(["remote", "set-url", remote, url], repo)


def remote_branch_exists(repo: Path, remote: str, branch: str) -> bool:
    """Check if a remote-tracking branch exists (as of the last fetch)."""
    result = run_git(
        ["show-ref", "--verify", "--quiet", f"refs/remotes/{remote}/{branch}"], repo
    )
    return result.success


def list_remote_branches(repo: Path, remote: str) -> list[str]:
    """List branch names tracked from a remote, without the remote prefix.

    The symbolic HEAD pointer is reported as "HEAD"; callers filter it.
    """
    prefix = f"refs/remotes/{remote}/"
    result = run_git(["for-each-ref", "--format=%(refname)", prefix], repo)
    if not result.success:
        return []
    return [
        line.strip()[len(prefix):]
        for line in result.stdout.splitlines()
        if line.strip().startswith(prefix)
    ]


def fetch(repo: Path, remote: str = "origin", prune: bool = True,
          timeout: float | None = None) -> GitResult:
    """Fetch from remote."""
    args = ["fetch", "--quiet", remote]
    if prune:
        args.append("--prune")
    return run_git(args, repo, timeout=timeout)


def pull_rebase(repo: Path, remote: str, branch: str,
                timeout: float | None = None) -> GitResult:
    """Pull a branch from remote, rebasing local commits on top."""
    return run_git(["pull", "--rebase", remote, branch], repo, timeout=timeout)


def push(repo: Path, remote: str, ref: str, force: bool = False,
         set_upstream: bool = False, timeout: float | None = None) -> GitResult:
    """Push a ref to remote."""
    args = ["push"]
    if force:
        args.append("--force")
    if set_upstream:
        args.append("--set-upstream")
    args += [remote, ref]
    return run_git(args, repo, timeout=timeout)


def push_delete(repo: Path, remote: str, ref: str,
                timeout: float | None = None) -> GitResult:
    """Delete a branch on the remote."""
    return run_git(["push", remote, "--delete", ref], repo, timeout=timeout)


def push_tag(repo: Path, remote: str, tag: str,
             timeout: float | None = None) -> GitResult:
    """Push a single tag to remote."""
    return run_git(["push", remote, f"refs/tags/{tag}"], repo, timeout=timeout)


def push_tags(repo: Path, remote: str, timeout: float | None = None) -> GitResult:
    """Push all local tags to remote."""
    return run_git(["push", remote, "--tags"], repo, timeout=timeout)
