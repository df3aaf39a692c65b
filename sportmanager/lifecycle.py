import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Dict, Optional, Union

from shared.state_machine import MatchStateMachine, MatchState, TransitionError

from .errors import ValidationError, InvalidTransition, MatchCancelled
from .models import Match

logger = logging.getLogger(__name__)

# Capacity columns are 32-bit integers
MAX_CAPACITY = 2 ** 31 - 1


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def parse_instant(value: Union[str, datetime, None]) -> datetime:
    """
    Parse an ISO-8601 instant into an aware UTC datetime.

    Values without an explicit offset are rejected: a wall-clock time with no
    zone is ambiguous.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith(('Z', 'z')):
            text = text[:-1] + '+00:00'
        parsed = datetime.fromisoformat(text)
    else:
        raise ValueError("a date and time is required")

    if parsed.tzinfo is None or parsed.utcoffset() is None:
        raise ValueError("must include a UTC offset")
    try:
        return parsed.astimezone(timezone.utc)
    except OverflowError:
        # e.g. 0001-01-01T00:00:00+01:00 has no UTC equivalent
        raise ValueError("out of range")


class LifecycleController:
    """
    Validates new matches and moves existing ones between the active and
    cancelled states. Every check here runs inside a store mutation, against
    the state the store holds at that moment.
    """

    def validate_creation(
        self,
        scheduled_at: Union[str, datetime, None],
        venue_name: Optional[str],
        min_players,
        max_players,
        location: Optional[str] = '',
        location_link: Optional[str] = ''
    ) -> Match:
        errors: Dict[str, str] = {}

        try:
            when = parse_instant(scheduled_at)
        except ValueError as e:
            errors['scheduled_at'] = f"invalid instant: {e}"
            when = None

        if not isinstance(venue_name, str) or not venue_name.strip():
            errors['venue_name'] = "must not be empty"

        if not _is_int(min_players):
            errors['min_players'] = "must be an integer"
        elif min_players < 1:
            errors['min_players'] = "must be at least 1"
        elif min_players > MAX_CAPACITY:
            errors['min_players'] = f"must be at most {MAX_CAPACITY}"

        if not _is_int(max_players):
            errors['max_players'] = "must be an integer"
        elif max_players > MAX_CAPACITY:
            errors['max_players'] = f"must be at most {MAX_CAPACITY}"
        elif _is_int(min_players) and max_players < min_players:
            errors['max_players'] = "must be greater than or equal to min_players"
        elif max_players < 1:
            errors['max_players'] = "must be at least 1"

        for name, value in (('location', location), ('location_link', location_link)):
            if value is not None and not isinstance(value, str):
                errors[name] = "must be a string"

        if errors:
            logger.debug(f"Rejected match creation: {errors}")
            raise ValidationError(errors)

        return Match(
            scheduled_at=when,
            venue_name=venue_name,
            location=location or '',
            location_link=location_link or '',
            min_players=min_players,
            max_players=max_players,
            active=True,
        )

    def require(self, action: str, match: Match):
        """Raise if `action` is not allowed in the match's current state."""
        sm = MatchStateMachine.from_active_flag(match.active)
        if sm.allows(action):
            return
        if sm.state == MatchState.CANCELLED:
            raise MatchCancelled(f"Match {match.id} is cancelled")
        raise InvalidTransition(f"Cannot {action} match {match.id} while {sm.state.value}")

    def cancel(self, match: Match) -> Match:
        return self._transition(match, 'cancel')

    def restore(self, match: Match) -> Match:
        return self._transition(match, 'restore')

    def _transition(self, match: Match, action: str) -> Match:
        sm = MatchStateMachine.from_active_flag(match.active)
        try:
            new_state = sm.transition(action)
        except TransitionError as e:
            raise InvalidTransition(
                f"Cannot {action} match {match.id}: already {e.state.value}"
            ) from e
        return replace(match, active=new_state == MatchState.ACTIVE)
