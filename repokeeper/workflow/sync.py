"""Branch sync: commit WIP on every local branch and push each to the remote.

Flow:
1. Remember the checked-out ref (restored in a finally block)
2. Fetch the remote, make sure main exists locally
3. Snapshot the local branch list once (the work plan)
4. Per branch: checkout, commit WIP if dirty, push with upstream
5. Rebase main onto the remote and push it

Fatal: HEAD cannot be resolved, or the checked-out WIP cannot be committed
before the first branch switch. Everything else is downgraded to a warning
so one bad branch does not stop the batch.
"""

import logging

from repokeeper.lib.constants import WIP_COMMIT_MSG
from repokeeper.workflow.common import commit_if_dirty, fetch_remote
from repokeeper.workflow.context import WorkflowContext
from repokeeper.workflow.steps import StepOutcome, run_step

logger = logging.getLogger(__name__)


def wip_message(branch: str, timestamp: str) -> str:
    return WIP_COMMIT_MSG.format(branch=branch, timestamp=timestamp)


def resolve_original_ref(ctx: WorkflowContext) -> StepOutcome:
    ctx.original_branch = ctx.repo.current_branch()
    ctx.original_ref = ctx.original_branch or ctx.repo.current_ref()
    if not ctx.original_ref:
        return StepOutcome.fatal("could not resolve HEAD")
    ctx.log(f"Working in repository: {ctx.repo.path} (on {ctx.original_ref})")
    return StepOutcome.ok(ctx.original_ref)


def ensure_main(ctx: WorkflowContext) -> StepOutcome:
    """Create main locally when missing.

    Prefers <remote>/<main>. Without it, main is created as a plain branch
    at the current commit; an unborn repository gets no main at all.
    """
    ctx.log(f"Ensuring local '{ctx.main}' branch exists...")
    if ctx.repo.branch_exists(ctx.main):
        ctx.info(f"Local '{ctx.main}' already exists.")
        return StepOutcome.ok()

    if ctx.repo.remote_branch_exists(ctx.remote, ctx.main):
        upstream = f"{ctx.remote}/{ctx.main}"
        result = ctx.repo.branch_create(ctx.main, upstream)
        if result.success:
            ctx.info(f"Created local '{ctx.main}' from '{upstream}'.")
            return StepOutcome.ok()
        ctx.warn(f"Could not create '{ctx.main}' from '{upstream}': {result.error}")
        return StepOutcome.warned(f"create {ctx.main} from {upstream} failed: {result.error}")

    if not ctx.repo.has_commits():
        ctx.warn(f"No '{ctx.remote}/{ctx.main}' and no commits yet; '{ctx.main}' not created.")
        return StepOutcome.warned(f"no commits to create '{ctx.main}' from")

    ctx.warn(
        f"No '{ctx.remote}/{ctx.main}' found. Creating local '{ctx.main}' at current HEAD "
        f"({ctx.repo.head_sha()}); it will be pushed to '{ctx.remote}/{ctx.main}' from that commit."
    )
    result = ctx.repo.branch_create(ctx.main)
    if not result.success:
        ctx.warn(f"Could not create '{ctx.main}': {result.error}")
        return StepOutcome.warned(f"create {ctx.main} failed: {result.error}")
    return StepOutcome.warned(f"'{ctx.main}' created locally without a remote counterpart")


def collect_work_plan(ctx: WorkflowContext) -> StepOutcome:
    ctx.work_plan = ctx.repo.list_local_branches()
    if not ctx.work_plan:
        ctx.warn("No local branches found.")
        return StepOutcome.ok("empty")
    ctx.log(f"Found {len(ctx.work_plan)} local branch(es): {' '.join(ctx.work_plan)}")
    return StepOutcome.ok()


def save_current_wip(ctx: WorkflowContext) -> StepOutcome:
    """Commit dirty state where it is before any branch switch.

    Fatal when the changes cannot be committed: git would carry them onto
    the first branch of the work plan.
    """
    if not ctx.repo.is_dirty():
        return StepOutcome.ok("clean")
    if not ctx.original_branch:
        outcome = save_detached_wip(ctx)
    else:
        outcome = commit_if_dirty(
            ctx, wip_message(ctx.original_branch, ctx.timestamp), ctx.original_branch
        )
    if ctx.repo.is_dirty():
        return StepOutcome.fatal(f"uncommitted changes on {ctx.original_ref} could not be saved")
    return outcome


def save_detached_wip(ctx: WorkflowContext) -> StepOutcome:
    """Commit on the detached HEAD itself and restore to that commit later."""
    committed = commit_if_dirty(ctx, wip_message("detached HEAD", ctx.timestamp), "detached HEAD")
    if committed.is_warned:
        return committed

    ctx.original_ref = ctx.repo.head_sha()
    ctx.warn(f"WIP committed on a detached HEAD as {ctx.original_ref}; it is on no branch.")
    return StepOutcome.warned(f"WIP saved on detached HEAD at {ctx.original_ref}")


def push_branch(ctx: WorkflowContext, branch: str) -> StepOutcome:
    if not ctx.has_remote:
        ctx.warn(f"Remote '{ctx.remote}' not configured; skipping push of '{branch}'.")
        return StepOutcome.warned(f"push of '{branch}' skipped: no remote")

    result = ctx.repo.push(ctx.remote, branch, set_upstream=True)
    ctx.pushes.append((branch, result.success))
    if not result.success:
        ctx.warn(f"Push failed for '{branch}': {result.error}")
        return StepOutcome.warned(f"push of '{branch}' failed: {result.error}")

    ctx.info(f"Pushed '{branch}' to '{ctx.remote}'.")
    return StepOutcome.ok()


def sync_branch(ctx: WorkflowContext, branch: str) -> StepOutcome:
    """Checkout one branch, commit its WIP, push it."""
    ctx.log(f"Processing branch: {branch}")

    checkout = ctx.repo.checkout(branch)
    if not checkout.success:
        ctx.warn(f"Could not checkout '{branch}': {checkout.error}")
        return StepOutcome.warned(f"checkout of '{branch}' failed: {checkout.error}")

    committed = commit_if_dirty(ctx, wip_message(branch, ctx.timestamp), branch)
    pushed = push_branch(ctx, branch)

    reasons = [o.reason for o in (committed, pushed) if o.is_warned]
    if reasons:
        return StepOutcome.warned("; ".join(reasons))
    return StepOutcome.ok()


def reconcile_main(ctx: WorkflowContext) -> StepOutcome:
    """Rebase main onto the remote copy (when there is one) and push it."""
    ctx.log(f"Pulling '{ctx.main}' with --rebase and pushing...")

    checkout = ctx.repo.checkout(ctx.main)
    if not checkout.success:
        ctx.warn(f"Could not checkout '{ctx.main}': {checkout.error}")
        return StepOutcome.warned(f"checkout of '{ctx.main}' failed: {checkout.error}")

    reasons = []
    if ctx.repo.remote_branch_exists(ctx.remote, ctx.main):
        pulled = ctx.repo.pull_rebase(ctx.remote, ctx.main)
        if pulled.success:
            ctx.info(f"Rebased '{ctx.main}' onto '{ctx.remote}/{ctx.main}'.")
        else:
            ctx.warn(f"Rebase failed ({pulled.error}). Manual intervention may be needed.")
            reasons.append(f"rebase of '{ctx.main}' failed: {pulled.error}")

    if ctx.has_remote:
        pushed = push_branch(ctx, ctx.main)
        if pushed.is_warned:
            reasons.append(pushed.reason)

    if reasons:
        return StepOutcome.warned("; ".join(reasons))
    return StepOutcome.ok()


def restore_original_ref(ctx: WorkflowContext) -> StepOutcome:
    """Return to the ref checked out before the run. Failure is only a warning."""
    target = ctx.original_branch or ctx.original_ref
    ctx.log(f"Restoring original branch: {target}")
    if ctx.repo.current_ref() == target:
        return StepOutcome.ok("already checked out")

    result = ctx.repo.checkout(target)
    if not result.success and ctx.original_ref and ctx.original_ref != target:
        result = ctx.repo.checkout(ctx.original_ref)
    if not result.success:
        ctx.warn(f"Could not restore '{target}': {result.error}")
        return StepOutcome.warned(f"restore of '{target}' failed: {result.error}")
    return StepOutcome.ok()


def run_branch_sync(ctx: WorkflowContext) -> WorkflowContext:
    """Drive the branch sync steps. Returns the context with recorded outcomes."""
    if run_step(ctx, "resolve_original_ref", resolve_original_ref).is_fatal:
        return ctx

    try:
        for step_name, step_fn in [
            ("fetch_remote", fetch_remote),
            ("ensure_main", ensure_main),
            ("collect_work_plan", collect_work_plan),
        ]:
            if run_step(ctx, step_name, step_fn).is_fatal:
                return ctx

        if not ctx.work_plan:
            return ctx

        if run_step(ctx, "save_current_wip", save_current_wip).is_fatal:
            return ctx

        for branch in ctx.work_plan:
            outcome = run_step(ctx, f"sync_branch:{branch}", lambda c, b=branch: sync_branch(c, b))
            if outcome.is_fatal:
                return ctx

        if ctx.repo.branch_exists(ctx.main):
            run_step(ctx, "reconcile_main", reconcile_main)
    finally:
        run_step(ctx, "restore_original_ref", restore_original_ref)

    ctx.log("All done!")
    return ctx
