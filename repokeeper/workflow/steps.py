"""
Step execution framework for repokeeper workflows.

A step is a function taking the WorkflowContext and returning a
StepOutcome. OK and WARNED outcomes let the workflow continue; a FATAL
outcome stops the driver from issuing further steps.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from repokeeper.workflow.context import WorkflowContext

logger = logging.getLogger(__name__)


class StepStatus(Enum):
    OK = "ok"
    WARNED = "warned"
    FATAL = "fatal"


@dataclass
class StepOutcome:
    """Tagged result of one workflow step."""
    status: StepStatus
    reason: str = ""
    step: str = ""
    duration: float = 0.0

    @classmethod
    def ok(cls, reason: str = "") -> "StepOutcome":
        return cls(StepStatus.OK, reason)

    @classmethod
    def warned(cls, reason: str) -> "StepOutcome":
        return cls(StepStatus.WARNED, reason)

    @classmethod
    def fatal(cls, reason: str) -> "StepOutcome":
        return cls(StepStatus.FATAL, reason)

    @property
    def is_fatal(self) -> bool:
        return self.status == StepStatus.FATAL

    @property
    def is_warned(self) -> bool:
        return self.status == StepStatus.WARNED

    def __str__(self):
        text = f"[{self.step}] {self.status.value}"
        return f"{text}: {self.reason}" if self.reason else text


StepFn = Callable[["WorkflowContext"], StepOutcome]


def run_step(ctx: "WorkflowContext", step_name: str, step_fn: StepFn) -> StepOutcome:
    """
    Run a single step with timing and error handling.

    Unexpected exceptions become FATAL outcomes. The outcome is recorded
    on the context and returned.
    """
    logger.debug(f"Starting step: {step_name}")
    start = time.time()

    try:
        outcome = step_fn(ctx)
    except Exception as e:
        logger.exception(f"Step {step_name} raised")
        outcome = StepOutcome.fatal(f"unexpected error: {e}")

    outcome.step = step_name
    outcome.duration = time.time() - start
    ctx.record_step(outcome)

    if outcome.is_fatal:
        ctx.error(f"{step_name} failed: {outcome.reason}")
    elif outcome.is_warned:
        logger.debug(f"Step {step_name} completed with warnings ({outcome.duration:.2f}s)")
    else:
        logger.debug(f"Step {step_name} passed ({outcome.duration:.2f}s)")

    return outcome
