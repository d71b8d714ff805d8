"""Git operations for repokeeper.

Workflows talk to git through a Repository handle; the modules below are
the thin subprocess wrappers it delegates to.

Return type conventions:
- Functions returning GitResult: Caller must check .success before using output.
  Examples: stage_all(), commit(), fetch(), push()
- Functions returning bool: True on success/condition met, False otherwise.
  Examples: is_dirty(), branch_exists(), has_remote()
- Functions returning parsed values (str, int, list): Return empty/zero/None on failure.
  Examples: list_local_branches() -> [], get_commit_count() -> 0
"""

from repokeeper.git.runner import GitResult, run_git
from repokeeper.git.repository import Repository, is_repository

__all__ = [
    "GitResult",
    "run_git",
    "Repository",
    "is_repository",
]
