"""Hard reset: collapse history into one fresh commit on main.

Flow:
1. Reconcile the remote URL (when one is expected), fetch and prune
2. Tag HEAD as pre-reset-backup-<timestamp> and push the tag
3. Commit outstanding WIP where it is, check out main, delete every other
   local branch
4. Rebuild main as a single orphan commit of the WIP commit's tree, so the
   result matches the working tree the run started from
5. Force-push main, delete every other remote branch, optionally push tags

The confirmation gate lives in the command layer; by the time this driver
runs the operator has agreed. A rejected force-push is fatal: remote
branches are never deleted against history that did not land.
"""

import logging

from repokeeper.lib.constants import (
    FINAL_WIP_COMMIT_MSG,
    FRESH_START_COMMIT_MSG,
    TEMP_ORPHAN_BRANCH,
)
from repokeeper.workflow.common import commit_if_dirty, fetch_remote
from repokeeper.workflow.context import WorkflowContext
from repokeeper.workflow.steps import StepOutcome, run_step

logger = logging.getLogger(__name__)


def backup_tag_name(prefix: str, timestamp: str) -> str:
    return f"{prefix}-{timestamp}"


def rollback_instructions(ctx: WorkflowContext) -> list[str]:
    """Commands that bring the pre-reset history back, if a backup exists."""
    if not ctx.backup_tag:
        return ["No backup tag was created by this run."]
    return [
        f"Backup tag: {ctx.backup_tag} ({ctx.backup_sha})",
        f"  Inspect:  git log {ctx.backup_tag}",
        f"  Restore locally:  git checkout -B {ctx.main} {ctx.backup_tag}",
        f"  Restore remote:   git push --force {ctx.remote} {ctx.backup_tag}:refs/heads/{ctx.main}",
    ]


def reconcile_remote(ctx: WorkflowContext) -> StepOutcome:
    """Add or correct the remote URL when an expected URL is configured."""
    expected = ctx.config.expected_remote_url
    if not expected:
        return StepOutcome.ok("no expected remote URL configured")

    ctx.log(f"Checking remote '{ctx.remote}' URL...")
    current = ctx.repo.remote_get_url(ctx.remote)
    if current is None:
        result = ctx.repo.remote_add(ctx.remote, expected)
        if not result.success:
            return StepOutcome.fatal(f"could not add remote '{ctx.remote}': {result.error}")
        ctx.info(f"Added remote '{ctx.remote}' -> {expected}")
    elif current != expected:
        result = ctx.repo.remote_set_url(ctx.remote, expected)
        if not result.success:
            return StepOutcome.fatal(f"could not set URL of '{ctx.remote}': {result.error}")
        ctx.info(f"Updated remote '{ctx.remote}': {current} -> {expected}")
    else:
        ctx.info(f"Remote '{ctx.remote}' already points at {expected}")
    return StepOutcome.ok()


def create_backup_tag(ctx: WorkflowContext) -> StepOutcome:
    """Tag the current HEAD so the old history stays reachable."""
    ctx.log("Creating backup tag...")
    if not ctx.repo.has_commits():
        ctx.info("No commits yet; nothing to back up.")
        return StepOutcome.ok("no commits")

    name = backup_tag_name(ctx.config.backup_tag_prefix, ctx.timestamp)
    if ctx.repo.tag_exists(name):
        # Never move an existing tag
        ctx.warn(f"Tag '{name}' already exists; leaving it untouched.")
        return StepOutcome.warned(f"backup tag '{name}' already exists")

    sha = ctx.repo.head_sha()
    result = ctx.repo.tag(name, sha)
    if not result.success:
        return StepOutcome.fatal(f"could not create backup tag '{name}': {result.error}")

    ctx.backup_tag = name
    ctx.backup_sha = sha
    ctx.info(f"Tagged {sha} as '{name}'.")

    if not ctx.has_remote:
        ctx.warn(f"Remote '{ctx.remote}' not configured; backup tag exists locally only.")
        return StepOutcome.warned("backup tag not pushed: no remote")

    pushed = ctx.repo.push_tag(ctx.remote, name)
    if not pushed.success:
        ctx.warn(f"Could not push backup tag '{name}': {pushed.error}. Continuing.")
        return StepOutcome.warned(f"backup tag push failed: {pushed.error}")

    ctx.info(f"Pushed '{name}' to '{ctx.remote}'.")
    return StepOutcome.ok()


def commit_outstanding(ctx: WorkflowContext) -> StepOutcome:
    """Commit WIP on whatever is checked out (a detached HEAD included)."""
    ctx.log("Committing all uncommitted and untracked files...")
    label = ctx.repo.current_branch() or "detached HEAD"
    return commit_if_dirty(
        ctx, FINAL_WIP_COMMIT_MSG.format(timestamp=ctx.timestamp), label
    )


def ensure_main_checked_out(ctx: WorkflowContext) -> StepOutcome:
    """Remember the commit holding the working tree, then switch to main."""
    ctx.log(f"Checking out '{ctx.main}'...")
    ctx.source_sha = ctx.repo.head_sha()
    current = ctx.repo.current_branch()
    if ctx.source_sha and current != ctx.main:
        ctx.info(f"Tree of {current or 'detached HEAD'} ({ctx.source_sha}) becomes the new root.")
    if not ctx.repo.branch_exists(ctx.main):
        if not ctx.repo.has_commits():
            return StepOutcome.fatal("repository has no commits and nothing to commit")
        created = ctx.repo.branch_create(ctx.main, "HEAD")
        if not created.success:
            return StepOutcome.fatal(f"could not create '{ctx.main}': {created.error}")
        ctx.info(f"Created '{ctx.main}' at current HEAD.")

    checkout = ctx.repo.checkout(ctx.main)
    if not checkout.success:
        return StepOutcome.fatal(f"could not checkout '{ctx.main}': {checkout.error}")

    ctx.main_fsm.checkout_main()
    return StepOutcome.ok()


def purge_local_branches(ctx: WorkflowContext) -> StepOutcome:
    ctx.log(f"Deleting all local branches except '{ctx.main}'...")
    failed = []
    for branch in ctx.repo.list_local_branches():
        if branch == ctx.main:
            continue
        result = ctx.repo.branch_delete(branch, force=True)
        if result.success:
            ctx.info(f"Deleted local branch: {branch}")
        else:
            ctx.warn(f"Failed to delete local branch '{branch}': {result.error}")
            failed.append(branch)

    ctx.main_fsm.purge_branches()
    if failed:
        return StepOutcome.warned(f"could not delete local branches: {', '.join(failed)}")
    return StepOutcome.ok()


def rewrite_main(ctx: WorkflowContext) -> StepOutcome:
    """Replace main with a single root commit holding the source commit's tree."""
    ctx.log(f"Recreating '{ctx.main}' with a fresh initial commit...")

    orphan = ctx.repo.checkout_orphan(TEMP_ORPHAN_BRANCH, ctx.source_sha)
    if not orphan.success:
        return StepOutcome.fatal(f"could not create orphan branch: {orphan.error}")

    staged = ctx.repo.stage_all()
    if not staged.success:
        return StepOutcome.fatal(f"could not stage working tree: {staged.error}")
    ctx.main_fsm.stage_orphan()

    message = FRESH_START_COMMIT_MSG.format(timestamp=ctx.timestamp)
    committed = ctx.repo.commit(message)
    if not committed.success:
        return StepOutcome.fatal(
            f"could not create root commit: {committed.error} "
            f"('{ctx.main}' is untouched; 'git checkout {ctx.main}' to return)"
        )
    ctx.info(f"Created fresh initial commit: {message}")

    if ctx.repo.branch_exists(ctx.main):
        deleted = ctx.repo.branch_delete(ctx.main, force=True)
        if not deleted.success:
            return StepOutcome.fatal(f"could not delete old '{ctx.main}': {deleted.error}")

    renamed = ctx.repo.branch_rename(TEMP_ORPHAN_BRANCH, ctx.main)
    if not renamed.success:
        return StepOutcome.fatal(
            f"could not rename '{TEMP_ORPHAN_BRANCH}' to '{ctx.main}': {renamed.error}"
        )

    ctx.main_fsm.replace_main()
    ctx.info(f"'{ctx.main}' now holds a single root commit.")
    return StepOutcome.ok()


def force_push_main(ctx: WorkflowContext) -> StepOutcome:
    ctx.log(f"Force pushing '{ctx.main}' to '{ctx.remote}'...")
    result = ctx.repo.push(ctx.remote, ctx.main, force=True, set_upstream=True)
    if not result.success:
        ctx.error("Force push rejected. Remote branches were NOT deleted.")
        ctx.info("Check whether the branch is protected (disable force-push protection")
        ctx.info("or allow it for your account), then re-run the push manually:")
        ctx.info(f"  git push --force --set-upstream {ctx.remote} {ctx.main}")
        return StepOutcome.fatal(f"force push of '{ctx.main}' failed: {result.error}")

    ctx.main_fsm.push_main()
    ctx.info(f"Force pushed '{ctx.main}' to '{ctx.remote}'.")
    return StepOutcome.ok()


def purge_remote_branches(ctx: WorkflowContext) -> StepOutcome:
    ctx.log(f"Deleting all remote branches except '{ctx.main}'...")

    fetched = ctx.repo.fetch(ctx.remote, prune=True)
    if not fetched.success:
        ctx.warn(f"Fetch failed ({fetched.error}); using last known remote branches.")

    failed = []
    for branch in ctx.repo.list_remote_branches(ctx.remote):
        if branch in ("HEAD", ctx.main):
            continue
        result = ctx.repo.push_delete(ctx.remote, branch)
        if result.success:
            ctx.info(f"Deleted remote branch: {ctx.remote}/{branch}")
        else:
            ctx.warn(f"Failed to delete remote branch {ctx.remote}/{branch}: {result.error}")
            failed.append(branch)

    if failed:
        return StepOutcome.warned(f"could not delete remote branches: {', '.join(failed)}")
    return StepOutcome.ok()


def skip_remote_steps(ctx: WorkflowContext) -> StepOutcome:
    ctx.warn(f"Remote '{ctx.remote}' not configured; skipping push and remote cleanup.")
    return StepOutcome.warned(f"remote '{ctx.remote}' not configured")


def push_all_tags(ctx: WorkflowContext) -> StepOutcome:
    ctx.log(f"Pushing all tags to '{ctx.remote}'...")
    result = ctx.repo.push_tags(ctx.remote)
    if not result.success:
        ctx.warn(f"Pushing tags failed: {result.error}")
        return StepOutcome.warned(f"push --tags failed: {result.error}")
    ctx.info("Pushed all tags.")
    return StepOutcome.ok()


def run_hard_reset(ctx: WorkflowContext) -> WorkflowContext:
    """Drive the hard reset steps. Stops at the first fatal outcome."""
    local_steps = [
        ("reconcile_remote", reconcile_remote),
        ("fetch_remote", fetch_remote),
        ("create_backup_tag", create_backup_tag),
        ("commit_outstanding", commit_outstanding),
        ("ensure_main_checked_out", ensure_main_checked_out),
        ("purge_local_branches", purge_local_branches),
        ("rewrite_main", rewrite_main),
    ]
    for step_name, step_fn in local_steps:
        if run_step(ctx, step_name, step_fn).is_fatal:
            return ctx

    if not ctx.has_remote:
        run_step(ctx, "remote_cleanup", skip_remote_steps)
        ctx.log("Repository reset complete (local only).")
        return ctx

    remote_steps = [
        ("force_push_main", force_push_main),
        ("purge_remote_branches", purge_remote_branches),
    ]
    if ctx.config.push_tags:
        remote_steps.append(("push_all_tags", push_all_tags))

    for step_name, step_fn in remote_steps:
        if run_step(ctx, step_name, step_fn).is_fatal:
            return ctx

    ctx.log("Repository reset complete!")
    return ctx
