"""Prefect flows for the repokeeper workflows.

The drivers in sync.py and reset.py stay plain functions; the flows only
build the repository handle and context and hand them over, giving each
run a Prefect flow record. Tests call the drivers directly.
"""

import logging
from datetime import datetime

from prefect import flow

from repokeeper.git.repository import Repository
from repokeeper.lib.config import KeeperConfig
from repokeeper.workflow.context import WorkflowContext
from repokeeper.workflow.reset import run_hard_reset
from repokeeper.workflow.sync import run_branch_sync

logger = logging.getLogger(__name__)


def create_context(config: KeeperConfig, now: datetime | None = None) -> WorkflowContext:
    repo = Repository(config.repo_dir, network_timeout=config.network_timeout)
    return WorkflowContext.create(repo, config, now=now)


@flow(name="branch_sync", validate_parameters=False)
def branch_sync_flow(config: KeeperConfig) -> WorkflowContext:
    """Commit WIP on every local branch and push them all."""
    ctx = create_context(config)
    logger.info(f"branch_sync run {ctx.timestamp} on {ctx.repo.path}")
    return run_branch_sync(ctx)


@flow(name="hard_reset", validate_parameters=False)
def hard_reset_flow(config: KeeperConfig) -> WorkflowContext:
    """Collapse history to one commit on main and clean up every other branch."""
    ctx = create_context(config)
    logger.info(f"hard_reset run {ctx.timestamp} on {ctx.repo.path}")
    return run_hard_reset(ctx)
