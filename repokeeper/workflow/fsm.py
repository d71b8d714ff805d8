"""Lifetime of the main branch during a hard reset, using the transitions library.

    existing -> checked_out -> purged -> orphan_staged -> replaces_main -> pushed

Every trigger moves strictly forward. Nothing leads back to "existing":
once the orphan commit has replaced main, the only way back to the old
history is the backup tag.

Usage:
    from repokeeper.workflow.fsm import MainBranchFSM

    fsm = MainBranchFSM()
    fsm.checkout_main()
    fsm.purge_branches()
"""

import logging
from typing import Callable

from transitions import Machine, MachineError

logger = logging.getLogger(__name__)


STATES = [
    "existing",
    "checked_out",
    "purged",
    "orphan_staged",
    "replaces_main",
    "pushed",
]

TRANSITIONS = [
    {"trigger": "checkout_main", "source": "existing", "dest": "checked_out"},
    {"trigger": "purge_branches", "source": "checked_out", "dest": "purged"},
    {"trigger": "stage_orphan", "source": "purged", "dest": "orphan_staged"},
    {"trigger": "replace_main", "source": "orphan_staged", "dest": "replaces_main"},
    {"trigger": "push_main", "source": "replaces_main", "dest": "pushed"},
]

# States after which the previous main history is gone locally
POINT_OF_NO_RETURN = {"replaces_main", "pushed"}


class InvalidTransition(Exception):
    """Raised when a trigger is fired out of order."""

    def __init__(self, from_state: str, trigger: str):
        self.from_state = from_state
        self.trigger = trigger
        super().__init__(f"Invalid transition: '{trigger}' from state '{from_state}'")


class MainBranchFSM:
    """State machine tracking main through the reset pipeline.

    Triggers are exposed as methods (checkout_main(), purge_branches(), ...).
    Out-of-order triggers raise InvalidTransition.
    """

    def __init__(self, on_transition: Callable[[str, str, str], None] | None = None):
        """
        Args:
            on_transition: Optional callback(from_state, to_state, trigger) called after transitions
        """
        self.on_transition = on_transition
        self.history: list[tuple[str, str, str]] = []

        self.machine = Machine(
            model=self,
            states=STATES,
            transitions=TRANSITIONS,
            initial="existing",
            auto_transitions=False,
            send_event=True,
            after_state_change="on_state_change",
        )

        # Wrap each trigger so MachineError surfaces as InvalidTransition
        for name in {t["trigger"] for t in TRANSITIONS}:
            setattr(self, name, self._guarded(name, getattr(self, name)))

    def _guarded(self, trigger: str, method: Callable[[], bool]) -> Callable[[], bool]:
        def fire() -> bool:
            try:
                return method()
            except MachineError as e:
                raise InvalidTransition(self.state, trigger) from e
        return fire

    def on_state_change(self, event) -> None:
        """Callback after any state transition."""
        from_state = event.transition.source
        to_state = event.transition.dest
        trigger = event.event.name

        logger.debug(f"[MAIN] {from_state} -> {to_state} ({trigger})")
        self.history.append((from_state, to_state, trigger))

        if self.on_transition:
            self.on_transition(from_state, to_state, trigger)

    @property
    def history_rewritten(self) -> bool:
        """True once the old main history no longer exists locally."""
        return self.state in POINT_OF_NO_RETURN

    def can(self, trigger: str) -> bool:
        """Check if a trigger can be executed in current state."""
        return trigger in self.machine.get_triggers(self.state)
