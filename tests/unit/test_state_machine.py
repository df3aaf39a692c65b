"""
Unit tests for MatchStateMachine class.
Tests cancel/restore transitions and which roster actions each state allows.
"""
import pytest
from shared.state_machine import MatchStateMachine, MatchState, TransitionError


class TestMatchStateEnum:

    def test_state_is_string_enum(self):
        assert MatchState.ACTIVE == "active"
        assert MatchState.CANCELLED == "cancelled"


class TestStateMachineInit:

    def test_default_initial_state(self):
        """New matches start active."""
        assert MatchStateMachine().state == MatchState.ACTIVE

    def test_from_active_flag(self):
        assert MatchStateMachine.from_active_flag(True).state == MatchState.ACTIVE
        assert MatchStateMachine.from_active_flag(False).state == MatchState.CANCELLED


class TestStateTransitions:

    def test_cancel_active(self):
        sm = MatchStateMachine(MatchState.ACTIVE)
        assert sm.transition("cancel") == MatchState.CANCELLED
        assert sm.state == MatchState.CANCELLED

    def test_restore_cancelled(self):
        sm = MatchStateMachine(MatchState.CANCELLED)
        assert sm.transition("restore") == MatchState.ACTIVE

    def test_cancel_restore_round_trip(self):
        sm = MatchStateMachine()
        sm.transition("cancel")
        sm.transition("restore")
        assert sm.state == MatchState.ACTIVE


class TestInvalidTransitions:
    """Self transitions and unknown actions are rejected."""

    def test_cannot_cancel_twice(self):
        sm = MatchStateMachine(MatchState.CANCELLED)
        with pytest.raises(TransitionError) as exc_info:
            sm.transition("cancel")
        assert exc_info.value.state == MatchState.CANCELLED
        assert sm.state == MatchState.CANCELLED

    def test_cannot_restore_active(self):
        sm = MatchStateMachine(MatchState.ACTIVE)
        with pytest.raises(TransitionError) as exc_info:
            sm.transition("restore")
        assert exc_info.value.action == "restore"
        assert "active" in str(exc_info.value)
        assert sm.state == MatchState.ACTIVE

    def test_unknown_action(self):
        with pytest.raises(TransitionError):
            MatchStateMachine().transition("postpone")


class TestRosterActions:

    def test_active_allows_join_and_leave(self):
        sm = MatchStateMachine(MatchState.ACTIVE)
        assert sm.allows("join")
        assert sm.allows("leave")

    def test_cancelled_allows_leave_only(self):
        sm = MatchStateMachine(MatchState.CANCELLED)
        assert not sm.allows("join")
        assert sm.allows("leave")

    def test_transitions_are_not_roster_actions(self):
        assert not MatchStateMachine(MatchState.CANCELLED).allows("restore")
