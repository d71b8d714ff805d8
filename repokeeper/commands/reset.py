"""
repokeeper reset - Rewrite history to a single commit on main.

DESTRUCTIVE. Rewrites all history, force pushes main, and deletes every
other branch locally and on the remote. A pre-reset-backup-<timestamp>
tag keeps the old history reachable.
"""

import logging

from repokeeper.git.repository import is_repository
from repokeeper.lib.config import KeeperConfig
from repokeeper.lib.constants import CONFIRM_TOKEN, EXIT_ERROR
from repokeeper.workflow.context import WorkflowContext
from repokeeper.workflow.engine import hard_reset_flow
from repokeeper.workflow.reset import rollback_instructions

logger = logging.getLogger(__name__)


def confirm_reset(config: KeeperConfig, token: str | None = None) -> bool:
    """Ask the operator for the literal confirmation token.

    A token passed on the command line skips the prompt. EOF on stdin
    counts as a refusal.
    """
    print(">>> DESTRUCTIVE OPERATION WARNING")
    print("    This will REWRITE all git history to a single commit.")
    print(f"    This will FORCE PUSH to '{config.remote}/{config.main_branch}'.")
    print("    This will DELETE all other branches (local and remote).")

    if token is None:
        try:
            token = input(f'\n    Type "{CONFIRM_TOKEN}" to confirm: ')
        except EOFError:
            token = ""

    return token.strip() == CONFIRM_TOKEN


def print_summary(ctx: WorkflowContext) -> None:
    print()
    if ctx.fatal:
        print(f"Reset stopped: {ctx.fatal}")
    else:
        print(f"Current branch: {ctx.repo.current_branch()}")
        print(f"Commit count: {ctx.repo.commit_count(ctx.main)}")
        print(f"Files in the new initial commit: {len(ctx.repo.tracked_files(ctx.main))}")

    if ctx.warnings:
        print(f"Completed with {len(ctx.warnings)} warning(s):")
        for outcome in ctx.warnings:
            print(f"  {outcome}")

    print()
    print("Rollback:")
    for line in rollback_instructions(ctx):
        print(f"  {line}")


def cmd_reset(args, config: KeeperConfig) -> int:
    """Run the hard reset workflow after confirmation."""
    if not is_repository(config.repo_dir):
        print(f"ERROR: Directory '{config.repo_dir}' is not a Git repository.")
        return EXIT_ERROR

    if not confirm_reset(config, getattr(args, "confirm", None)):
        print("ERROR: Aborted by user.")
        return EXIT_ERROR

    ctx = hard_reset_flow(config)
    print_summary(ctx)
    return ctx.exit_code
