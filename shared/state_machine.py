from enum import Enum
from typing import Dict, FrozenSet, Tuple


class MatchState(str, Enum):
    ACTIVE = "active"
    CANCELLED = "cancelled"


class TransitionError(Exception):
    def __init__(self, state: MatchState, action: str):
        self.state = state
        self.action = action
        super().__init__(f"Cannot {action} a match that is {state.value}")


class MatchStateMachine:
    """
    Lifecycle of a single match.

    Only cancel and restore change the state. Roster actions never do, but
    which of them are open depends on it: a cancelled match lets players
    leave and nobody join.
    """

    TRANSITIONS: Dict[str, Tuple[MatchState, MatchState]] = {
        "cancel": (MatchState.ACTIVE, MatchState.CANCELLED),
        "restore": (MatchState.CANCELLED, MatchState.ACTIVE),
    }

    ROSTER_ACTIONS: Dict[MatchState, FrozenSet[str]] = {
        MatchState.ACTIVE: frozenset({"join", "leave"}),
        MatchState.CANCELLED: frozenset({"leave"}),
    }

    def __init__(self, state: MatchState = MatchState.ACTIVE):
        self._state = state

    @property
    def state(self) -> MatchState:
        return self._state

    @classmethod
    def from_active_flag(cls, active: bool) -> "MatchStateMachine":
        return cls(MatchState.ACTIVE if active else MatchState.CANCELLED)

    def allows(self, action: str) -> bool:
        return action in self.ROSTER_ACTIONS[self._state]

    def transition(self, action: str) -> MatchState:
        from_state, to_state = self.TRANSITIONS.get(action, (None, None))
        if from_state != self._state:
            raise TransitionError(self._state, action)
        self._state = to_state
        return self._state
