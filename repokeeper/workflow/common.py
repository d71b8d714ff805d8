"""Steps shared by the sync and reset workflows."""

import logging

from repokeeper.workflow.context import WorkflowContext
from repokeeper.workflow.steps import StepOutcome

logger = logging.getLogger(__name__)


def fetch_remote(ctx: WorkflowContext) -> StepOutcome:
    """Fetch and prune the configured remote. Never fatal."""
    ctx.log(f"Fetching from remote '{ctx.remote}'...")
    ctx.has_remote = ctx.repo.remote_exists(ctx.remote)
    if not ctx.has_remote:
        ctx.warn(f"Remote '{ctx.remote}' not found. Skipping fetch.")
        return StepOutcome.warned(f"remote '{ctx.remote}' not configured")

    result = ctx.repo.fetch(ctx.remote, prune=True)
    if not result.success:
        ctx.warn(f"Fetch failed ({result.error}). Continuing with local data.")
        return StepOutcome.warned(f"fetch failed: {result.error}")

    ctx.info(f"Fetched '{ctx.remote}'.")
    return StepOutcome.ok()


def commit_if_dirty(ctx: WorkflowContext, message: str, label: str) -> StepOutcome:
    """Stage everything and commit when the working tree is dirty.

    label names what is being committed in operator messages.
    """
    if not ctx.repo.is_dirty():
        ctx.info(f"Working tree clean on {label}; nothing to commit.")
        return StepOutcome.ok("clean")

    changed = ctx.repo.changed_files()
    ctx.info(f"{len(changed)} changed file(s) on {label}.")
    for path in changed:
        logger.debug(f"  changed: {path}")

    staged = ctx.repo.stage_all()
    if not staged.success:
        ctx.warn(f"Could not stage changes on {label}: {staged.error}")
        return StepOutcome.warned(f"stage failed on {label}: {staged.error}")

    committed = ctx.repo.commit(message)
    if not committed.success:
        ctx.warn(f"Commit failed on {label}: {committed.error}")
        return StepOutcome.warned(f"commit failed on {label}: {committed.error}")

    ctx.commits.append((label, message))
    ctx.info(f"Committed: {message}")
    return StepOutcome.ok("committed")
