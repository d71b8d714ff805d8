"""Tests for repokeeper.workflow.fsm module."""

import pytest

from repokeeper.workflow.fsm import (
    MainBranchFSM,
    InvalidTransition,
    POINT_OF_NO_RETURN,
    STATES,
    TRANSITIONS,
)

FORWARD = ["checkout_main", "purge_branches", "stage_orphan", "replace_main", "push_main"]


class TestFSMStates:
    """Tests for FSM state definitions."""

    def test_all_states_defined(self):
        assert STATES == [
            "existing", "checked_out", "purged", "orphan_staged", "replaces_main", "pushed",
        ]

    def test_no_transition_returns_to_existing(self):
        assert all(t["dest"] != "existing" for t in TRANSITIONS)

    def test_point_of_no_return_states_exist(self):
        assert POINT_OF_NO_RETURN <= set(STATES)


class TestFSMBasic:

    def test_initial_state(self):
        assert MainBranchFSM().state == "existing"

    def test_full_forward_path(self):
        fsm = MainBranchFSM()
        for trigger in FORWARD:
            getattr(fsm, trigger)()
        assert fsm.state == "pushed"
        assert [h[2] for h in fsm.history] == FORWARD

    def test_history_records_from_and_to(self):
        fsm = MainBranchFSM()
        fsm.checkout_main()
        assert fsm.history == [("existing", "checked_out", "checkout_main")]

    def test_callback_invoked(self):
        seen = []
        fsm = MainBranchFSM(on_transition=lambda *args: seen.append(args))
        fsm.checkout_main()
        fsm.purge_branches()
        assert seen == [
            ("existing", "checked_out", "checkout_main"),
            ("checked_out", "purged", "purge_branches"),
        ]


class TestFSMInvalidTransitions:

    def test_skipping_a_state_raises(self):
        fsm = MainBranchFSM()
        with pytest.raises(InvalidTransition) as exc_info:
            fsm.replace_main()
        assert exc_info.value.from_state == "existing"
        assert exc_info.value.trigger == "replace_main"
        assert fsm.state == "existing"

    def test_repeating_a_trigger_raises(self):
        fsm = MainBranchFSM()
        fsm.checkout_main()
        with pytest.raises(InvalidTransition):
            fsm.checkout_main()

    def test_nothing_fires_after_push(self):
        fsm = MainBranchFSM()
        for trigger in FORWARD:
            getattr(fsm, trigger)()
        for trigger in FORWARD:
            assert not fsm.can(trigger)


class TestFSMQueries:

    def test_can(self):
        fsm = MainBranchFSM()
        assert fsm.can("checkout_main")
        assert not fsm.can("push_main")

    @pytest.mark.parametrize("steps, rewritten", [
        (0, False),
        (3, False),
        (4, True),
        (5, True),
    ])
    def test_history_rewritten(self, steps, rewritten):
        fsm = MainBranchFSM()
        for trigger in FORWARD[:steps]:
            getattr(fsm, trigger)()
        assert fsm.history_rewritten is rewritten
