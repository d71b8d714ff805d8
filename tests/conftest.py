"""Shared fixtures: an in-memory stand-in for repokeeper.git.Repository."""

import itertools
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

import pytest

from repokeeper.git.runner import GitResult
from repokeeper.lib.config import KeeperConfig
from repokeeper.workflow.context import WorkflowContext

FIXED_NOW = datetime(2025, 3, 14, 9, 26, 53)
FIXED_TIMESTAMP = "20250314-092653"


def ok(stdout: str = "") -> GitResult:
    return GitResult(returncode=0, stdout=stdout, stderr="")


def fail(stderr: str) -> GitResult:
    return GitResult(returncode=1, stdout="", stderr=stderr)


@dataclass
class Commit:
    sha: str
    message: str
    files: dict
    parent: str | None = None


@dataclass
class FakeRemote:
    url: str
    branches: dict = field(default_factory=dict)   # name -> list[Commit]
    tags: dict = field(default_factory=dict)       # name -> sha
    has_head: bool = True


class FakeRepository:
    """Models branches, a working tree, tags and remotes in memory.

    Commits are recorded per branch as a list (oldest first). The working
    tree is a dict of path -> content; it is dirty when it differs from
    the tree of the checked-out commit, and checkouts carry local changes
    across the way git does. Failures are injected through the fail_*
    attributes.
    """

    def __init__(self, path: Path = Path("/fake/repo")):
        self.path = path
        self.branches: dict[str, list[Commit]] = {}
        self.head: str | None = "main"     # branch name, or a sha when detached
        self.detached = False
        self.worktree: dict[str, str] = {}
        self.staged: dict[str, str] | None = None
        self.tags: dict[str, str] = {}
        self.remotes: dict[str, FakeRemote] = {}
        self.tracking: dict[str, dict[str, list[Commit]]] = {}
        self.upstreams: dict[str, str] = {}
        self.loose: list[Commit] = []       # commits made on a detached HEAD
        self.objects: dict[str, Commit] = {}  # every commit ever made, by sha
        self.calls: list[tuple] = []
        self._shas = (f"{n:040x}" for n in itertools.count(1))

        self.fail_fetch = False
        self.fail_all_pushes = False
        self.fail_push: set[str] = set()
        self.fail_force_push = False
        self.fail_push_delete: set[str] = set()
        self.fail_push_tag = False
        self.fail_push_tags = False
        self.fail_rebase = False
        self.fail_checkout: set[str] = set()
        self.fail_branch_delete: set[str] = set()
        self.fail_commit = False

    # --- test setup helpers ---

    def add_commit(self, branch: str, message: str, files: dict) -> Commit:
        history = self.branches.setdefault(branch, [])
        parent = history[-1].sha if history else None
        commit = Commit(next(self._shas), message, dict(files), parent)
        self.objects[commit.sha] = commit
        history.append(commit)
        if self.head == branch and not self.detached:
            self.worktree = dict(files)
        return commit

    def add_remote_branch_from(self, remote: str, branch: str):
        self.remotes[remote].branches[branch] = list(self.branches[branch])

    def ops(self, name: str) -> list[tuple]:
        return [c for c in self.calls if c[0] == name]

    # --- internals ---

    def _head_commit(self) -> Commit | None:
        if self.detached:
            return self._find(self.head)
        history = self.branches.get(self.head)
        return history[-1] if history else None

    def _find(self, sha: str) -> Commit | None:
        if sha in self.objects:
            return self.objects[sha]
        for history in list(self.branches.values()) + [self.loose]:
            for commit in history:
                if commit.sha == sha:
                    return commit
        return None

    def _history_of(self, ref: str) -> list[Commit] | None:
        if ref in ("HEAD", None):
            if self.detached:
                return self._lineage(self.head)
            return self.branches.get(self.head)
        if ref in self.branches:
            return self.branches[ref]
        if "/" in ref:
            remote, _, name = ref.partition("/")
            if name in self.tracking.get(remote, {}):
                return self.tracking[remote][name]
        if ref in self.tags:
            return self._lineage(self.tags[ref])
        if self._find(ref):
            return self._lineage(ref)
        return None

    def _switch(self, target: Commit) -> bool:
        """Move the working tree to target's tree, carrying local changes.

        Like git, refuses (returns False) when a locally changed path also
        differs between the current commit and target.
        """
        current = self._head_commit()
        base = current.files if current else {}
        local = {p: self.worktree.get(p) for p in self.changed_files()}
        if any(base.get(p) != target.files.get(p) for p in local):
            return False
        tree = dict(target.files)
        for path, content in local.items():
            if content is None:
                tree.pop(path, None)
            else:
                tree[path] = content
        self.worktree = tree
        return True

    def _lineage(self, sha: str) -> list[Commit]:
        chain = []
        commit = self._find(sha)
        while commit:
            chain.append(commit)
            commit = self._find(commit.parent) if commit.parent else None
        return list(reversed(chain))

    # --- Repository interface ---

    def current_branch(self):
        return None if self.detached else self.head

    def current_ref(self):
        return self.head

    def is_dirty(self) -> bool:
        commit = self._head_commit()
        return self.worktree != (commit.files if commit else {})

    def changed_files(self) -> list[str]:
        commit = self._head_commit()
        base = commit.files if commit else {}
        paths = set(self.worktree) | set(base)
        return sorted(p for p in paths if self.worktree.get(p) != base.get(p))

    def has_commits(self) -> bool:
        return self._head_commit() is not None

    def head_sha(self):
        commit = self._head_commit()
        return commit.sha if commit else None

    def commit_count(self, ref="HEAD") -> int:
        history = self._history_of(ref)
        return len(history) if history else 0

    def tracked_files(self, ref="HEAD") -> list[str]:
        history = self._history_of(ref)
        return sorted(history[-1].files) if history else []

    def list_local_branches(self):
        return list(self.branches)

    def list_remote_branches(self, remote):
        names = list(self.tracking.get(remote, {}))
        if remote in self.remotes and self.remotes[remote].has_head and names:
            names = ["HEAD"] + names
        return names

    def branch_exists(self, name) -> bool:
        return name in self.branches

    def remote_branch_exists(self, remote, name) -> bool:
        return name in self.tracking.get(remote, {})

    def tag_exists(self, name) -> bool:
        return name in self.tags

    def remote_exists(self, name) -> bool:
        return name in self.remotes

    def remote_get_url(self, name):
        return self.remotes[name].url if name in self.remotes else None

    def stage_all(self):
        self.calls.append(("stage_all",))
        self.staged = dict(self.worktree)
        return ok()

    def commit(self, message):
        self.calls.append(("commit", message))
        commit = self._head_commit()
        current = commit.files if commit else {}
        if self.fail_commit:
            return fail("commit hook rejected")
        if self.staged is None or self.staged == current:
            return fail("nothing to commit, working tree clean")
        new = Commit(next(self._shas), message, dict(self.staged), commit.sha if commit else None)
        self.objects[new.sha] = new
        self.staged = None
        if self.detached:
            self.loose.append(new)
            self.head = new.sha
        else:
            self.branches.setdefault(self.head, []).append(new)
        return ok()

    def checkout(self, ref):
        self.calls.append(("checkout", ref))
        if ref in self.fail_checkout:
            return fail(f"error: pathspec '{ref}' did not match")
        overwritten = fail("error: Your local changes to the following files would be overwritten by checkout")
        if ref in self.branches:
            if not self._switch(self.branches[ref][-1]):
                return overwritten
            self.head, self.detached = ref, False
            return ok()
        commit = self._find(ref)
        if commit:
            if not self._switch(commit):
                return overwritten
            self.head, self.detached = commit.sha, True
            return ok()
        return fail(f"error: pathspec '{ref}' did not match any file(s) known to git")

    def checkout_orphan(self, name, start_point=None):
        self.calls.append(("checkout_orphan", name, start_point))
        if name in self.branches:
            return fail(f"fatal: a branch named '{name}' already exists")
        if start_point:
            target = self._find(start_point)
            if target is None:
                return fail(f"fatal: invalid reference: {start_point}")
            if not self._switch(target):
                return fail("error: Your local changes would be overwritten by checkout")
        self.head, self.detached = name, False
        return ok()

    def branch_create(self, name, start_point=None):
        self.calls.append(("branch_create", name, start_point))
        if name in self.branches:
            return fail(f"fatal: a branch named '{name}' already exists")
        history = self._history_of(start_point or "HEAD")
        if not history:
            return fail(f"fatal: not a valid object name: '{start_point}'")
        self.branches[name] = list(history)
        return ok()

    def branch_delete(self, name, force=False):
        self.calls.append(("branch_delete", name, force))
        if name in self.fail_branch_delete:
            return fail(f"error: cannot delete branch '{name}'")
        if name not in self.branches:
            return fail(f"error: branch '{name}' not found")
        if name == self.head and not self.detached:
            return fail(f"error: cannot delete branch '{name}' used by worktree")
        del self.branches[name]
        return ok()

    def branch_rename(self, old, new, force=False):
        self.calls.append(("branch_rename", old, new))
        if new in self.branches and not force:
            return fail(f"fatal: a branch named '{new}' already exists")
        self.branches[new] = self.branches.pop(old)
        if self.head == old:
            self.head = new
        return ok()

    def tag(self, name, ref="HEAD"):
        self.calls.append(("tag", name, ref))
        if name in self.tags:
            return fail(f"fatal: tag '{name}' already exists")
        history = self._history_of(ref)
        sha = history[-1].sha if history else None
        if sha is None:
            return fail("fatal: Failed to resolve 'HEAD' as a valid ref.")
        self.tags[name] = sha
        return ok()

    def remote_add(self, name, url):
        self.calls.append(("remote_add", name, url))
        if name in self.remotes:
            return fail(f"error: remote {name} already exists.")
        self.remotes[name] = FakeRemote(url)
        return ok()

    def remote_set_url(self, name, url):
        self.calls.append(("remote_set_url", name, url))
        if name not in self.remotes:
            return fail(f"error: No such remote '{name}'")
        self.remotes[name].url = url
        return ok()

    def fetch(self, remote, prune=True):
        self.calls.append(("fetch", remote, prune))
        if self.fail_fetch or remote not in self.remotes:
            return fail("fatal: unable to access remote")
        fetched = {n: list(h) for n, h in self.remotes[remote].branches.items()}
        if prune:
            self.tracking[remote] = fetched
        else:
            self.tracking.setdefault(remote, {}).update(fetched)
        return ok()

    def pull_rebase(self, remote, name):
        self.calls.append(("pull_rebase", remote, name))
        if self.fail_rebase:
            return fail("CONFLICT (content): Merge conflict in README.md")
        upstream = self.remotes[remote].branches.get(name, [])
        local = self.branches[name]
        known = {c.sha for c in upstream}
        self.branches[name] = list(upstream) + [c for c in local if c.sha not in known]
        self.worktree = dict(self.branches[name][-1].files)
        return ok()

    def push(self, remote, ref, force=False, set_upstream=False):
        self.calls.append(("push", remote, ref, force, set_upstream))
        if remote not in self.remotes:
            return fail(f"fatal: '{remote}' does not appear to be a git repository")
        if self.fail_all_pushes or ref in self.fail_push or (force and self.fail_force_push):
            return fail("remote: error: GH006: Protected branch update failed")
        local = self.branches[ref]
        existing = self.remotes[remote].branches.get(ref, [])
        if not force and [c.sha for c in local[:len(existing)]] != [c.sha for c in existing]:
            return fail("! [rejected] (non-fast-forward)")
        self.remotes[remote].branches[ref] = list(local)
        self.tracking.setdefault(remote, {})[ref] = list(local)
        if set_upstream:
            self.upstreams[ref] = f"{remote}/{ref}"
        return ok()

    def push_delete(self, remote, ref):
        self.calls.append(("push_delete", remote, ref))
        if ref in self.fail_push_delete or ref not in self.remotes[remote].branches:
            return fail(f"error: unable to delete '{ref}': remote ref does not exist")
        del self.remotes[remote].branches[ref]
        self.tracking.get(remote, {}).pop(ref, None)
        return ok()

    def push_tag(self, remote, name):
        self.calls.append(("push_tag", remote, name))
        if self.fail_push_tag:
            return fail("remote: tag creation not allowed")
        self.remotes[remote].tags[name] = self.tags[name]
        return ok()

    def push_tags(self, remote):
        self.calls.append(("push_tags", remote))
        if self.fail_push_tags:
            return fail("remote: tag creation not allowed")
        self.remotes[remote].tags.update(self.tags)
        return ok()


@pytest.fixture
def fake_repo():
    """Repo on main with one commit and an 'origin' remote holding main."""
    repo = FakeRepository()
    repo.add_commit("main", "initial", {"README.md": "hello"})
    repo.remotes["origin"] = FakeRemote("git@example.com:team/project.git")
    repo.add_remote_branch_from("origin", "main")
    repo.fetch("origin")
    repo.calls.clear()
    return repo


@pytest.fixture
def make_ctx():
    """Build a WorkflowContext around a fake repo with a fixed timestamp."""
    def _make(repo, **overrides):
        config = KeeperConfig(repo_dir=repo.path, **overrides)
        return WorkflowContext.create(repo, config, now=FIXED_NOW)
    return _make
