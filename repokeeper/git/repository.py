"""Repository handle bound to one working directory.

Workflows receive a Repository instead of calling the module-level git
functions with a path, so tests can pass an in-memory stand-in with the
same methods.
"""

from pathlib import Path

from repokeeper.git import branch, commit as commit_ops, remote, status, tag as tag_ops
from repokeeper.git.runner import GitResult


def is_repository(path: Path) -> bool:
    """True if path is a git working directory (.git directory or gitfile)."""
    git_path = Path(path) / ".git"
    return git_path.is_dir() or git_path.is_file()


class Repository:
    """Git operations against a single working directory."""

    def __init__(self, path: Path, network_timeout: float | None = None):
        self.path = Path(path).resolve()
        self.network_timeout = network_timeout

    def __repr__(self) -> str:
        return f"Repository({str(self.path)!r})"

    # --- queries ---

    def current_ref(self) -> str | None:
        return branch.get_current_ref(self.path)

    def current_branch(self) -> str | None:
        return branch.get_current_branch(self.path)

    def is_dirty(self) -> bool:
        return status.is_dirty(self.path)

    def changed_files(self) -> list[str]:
        return status.get_changed_files(self.path)

    def has_commits(self) -> bool:
        return branch.has_commits(self.path)

    def head_sha(self) -> str | None:
        return branch.get_commit_sha(self.path)

    def commit_count(self, ref: str = "HEAD") -> int:
        return branch.get_commit_count(self.path, ref)

    def tracked_files(self, ref: str = "HEAD") -> list[str]:
        return status.get_tracked_files(self.path, ref)

    def list_local_branches(self) -> list[str]:
        return branch.list_local_branches(self.path)

    def list_remote_branches(self, remote_name: str) -> list[str]:
        return remote.list_remote_branches(self.path, remote_name)

    def branch_exists(self, name: str) -> bool:
        return branch.branch_exists(self.path, name)

    def remote_branch_exists(self, remote_name: str, name: str) -> bool:
        return remote.remote_branch_exists(self.path, remote_name, name)

    def tag_exists(self, name: str) -> bool:
        return tag_ops.tag_exists(self.path, name)

    def remote_exists(self, name: str) -> bool:
        return remote.has_remote(self.path, name)

    def remote_get_url(self, name: str) -> str | None:
        return remote.get_remote_url(self.path, name)

    # --- local mutations ---

    def stage_all(self) -> GitResult:
        return commit_ops.stage_all(self.path)

    def commit(self, message: str) -> GitResult:
        return commit_ops.commit(self.path, message)

    def checkout(self, ref: str) -> GitResult:
        return branch.checkout_branch(self.path, ref)

    def checkout_orphan(self, name: str, start_point: str | None = None) -> GitResult:
        return branch.checkout_orphan(self.path, name, start_point)

    def branch_create(self, name: str, start_point: str | None = None) -> GitResult:
        return branch.create_branch(self.path, name, start_point)

    def branch_delete(self, name: str, force: bool = False) -> GitResult:
        return branch.delete_branch(self.path, name, force=force)

    def branch_rename(self, old: str, new: str, force: bool = False) -> GitResult:
        return branch.rename_branch(self.path, old, new, force=force)

    def tag(self, name: str, ref: str = "HEAD") -> GitResult:
        return tag_ops.create_tag(self.path, name, ref)

    def remote_add(self, name: str, url: str) -> GitResult:
        return remote.add_remote(self.path, name, url)

    def remote_set_url(self, name: str, url: str) -> GitResult:
        return remote.set_remote_url(self.path, name, url)

    # --- network ---

    def fetch(self, remote_name: str, prune: bool = True) -> GitResult:
        return remote.fetch(self.path, remote_name, prune=prune, timeout=self.network_timeout)

    def pull_rebase(self, remote_name: str, name: str) -> GitResult:
        return remote.pull_rebase(self.path, remote_name, name, timeout=self.network_timeout)

    def push(self, remote_name: str, ref: str, force: bool = False,
             set_upstream: bool = False) -> GitResult:
        return remote.push(
            self.path, remote_name, ref,
            force=force, set_upstream=set_upstream, timeout=self.network_timeout,
        )

    def push_delete(self, remote_name: str, ref: str) -> GitResult:
        return remote.push_delete(self.path, remote_name, ref, timeout=self.network_timeout)

    def push_tag(self, remote_name: str, name: str) -> GitResult:
        return remote.push_tag(self.path, remote_name, name, timeout=self.network_timeout)

    def push_tags(self, remote_name: str) -> GitResult:
        return remote.push_tags(self.path, remote_name, timeout=self.network_timeout)
