"""
Workflow context for repokeeper runs.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from repokeeper.git.repository import Repository
from repokeeper.lib.config import KeeperConfig
from repokeeper.lib.constants import EXIT_ERROR, EXIT_SUCCESS, TIMESTAMP_FORMAT
from repokeeper.workflow.fsm import MainBranchFSM
from repokeeper.workflow.steps import StepOutcome

logger = logging.getLogger(__name__)


@dataclass
class WorkflowContext:
    """State of a single sync or reset run.

    Holds the repository handle, the settings, and the timestamp shared by
    every commit message and tag of the run, plus what the steps learned
    along the way.
    """
    repo: Repository
    config: KeeperConfig
    timestamp: str
    start_time: datetime = field(default_factory=datetime.now)
    steps: list = field(default_factory=list)
    has_remote: bool = False

    # sync
    original_ref: Optional[str] = None
    original_branch: Optional[str] = None
    work_plan: list = field(default_factory=list)
    commits: list = field(default_factory=list)   # (branch, message)
    pushes: list = field(default_factory=list)    # (branch, succeeded)

    # reset
    backup_tag: Optional[str] = None
    backup_sha: Optional[str] = None
    source_sha: Optional[str] = None   # commit whose tree becomes the new root
    main_fsm: MainBranchFSM = field(default_factory=MainBranchFSM)

    @classmethod
    def create(cls, repo: Repository, config: KeeperConfig,
               now: Optional[datetime] = None) -> 'WorkflowContext':
        """Create a context, capturing the run timestamp once."""
        now = now or datetime.now()
        return cls(
            repo=repo,
            config=config,
            timestamp=now.strftime(TIMESTAMP_FORMAT),
            start_time=now,
        )

    @property
    def remote(self) -> str:
        return self.config.remote

    @property
    def main(self) -> str:
        return self.config.main_branch

    # --- operator output ---

    def log(self, message: str):
        """Announce a workflow phase."""
        print(f"\n>>> {message}")
        logger.info(message)

    def info(self, message: str):
        print(f"    {message}")
        logger.debug(message)

    def warn(self, message: str):
        print(f"    WARNING: {message}")
        logger.warning(message)

    def error(self, message: str):
        print(f"    ERROR: {message}")
        logger.error(message)

    # --- step bookkeeping ---

    def record_step(self, outcome: StepOutcome):
        self.steps.append(outcome)

    @property
    def warnings(self) -> list[StepOutcome]:
        return [s for s in self.steps if s.is_warned]

    @property
    def fatal(self) -> Optional[StepOutcome]:
        for s in self.steps:
            if s.is_fatal:
                return s
        return None

    @property
    def exit_code(self) -> int:
        """Warnings never change the exit code; only a fatal step does."""
        return EXIT_ERROR if self.fatal else EXIT_SUCCESS
