"""
repokeeper sync - Commit WIP on all local branches and push them to the remote.
"""

import logging

from repokeeper.git.repository import is_repository
from repokeeper.lib.config import KeeperConfig
from repokeeper.lib.constants import EXIT_ERROR
from repokeeper.workflow.context import WorkflowContext
from repokeeper.workflow.engine import branch_sync_flow

logger = logging.getLogger(__name__)


def print_summary(ctx: WorkflowContext) -> None:
    print()
    print(f"Branches processed: {len(ctx.work_plan)}")
    print(f"WIP commits: {len(ctx.commits)}")
    for branch, message in ctx.commits:
        print(f"  {branch}: {message}")
    pushed = sum(1 for _, ok in ctx.pushes if ok)
    print(f"Pushes: {pushed}/{len(ctx.pushes)} succeeded")

    if ctx.warnings:
        print(f"Completed with {len(ctx.warnings)} warning(s):")
        for outcome in ctx.warnings:
            print(f"  {outcome}")
    if ctx.fatal:
        print(f"Failed: {ctx.fatal}")


def cmd_sync(args, config: KeeperConfig) -> int:
    """Run the branch sync workflow."""
    if not is_repository(config.repo_dir):
        print(f"ERROR: Directory '{config.repo_dir}' is not a Git repository.")
        return EXIT_ERROR

    ctx = branch_sync_flow(config)
    print_summary(ctx)
    return ctx.exit_code
