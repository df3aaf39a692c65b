import logging
from datetime import datetime
from typing import Dict, List, Optional, Union

import redis

from shared.events import (
    Event,
    EventType,
    match_created_event,
    match_deleted_event,
    roster_changed_event,
    state_changed_event,
)

from .errors import AlreadyJoined, MatchFull, NotJoined
from .identity import resolve
from .lifecycle import LifecycleController
from .models import Match, Participant, isoformat
from .roster_store import RosterStore, MemoryRosterStore

logger = logging.getLogger(__name__)

DEFAULT_VENUE_NAME = "Nova Sports Soccer Field"
DEFAULT_MIN_PLAYERS = 10
DEFAULT_MAX_PLAYERS = 12


class RosterManager:
    """
    Entry point for every match operation:
    - Create matches (with the venue/capacity defaults players are used to)
    - Join/leave with capacity and identity checks
    - Cancel/restore and hard delete
    - List matches and known players

    Each operation that changes a match is one `RosterStore.mutate` call, so
    the checks and the write happen in the same critical section. Failures
    are raised as `RosterError` subclasses and leave the store untouched.
    """

    def __init__(
        self,
        store: RosterStore = None,
        lifecycle: LifecycleController = None,
        redis_client: redis.Redis = None,
        events_channel: str = 'matches:announcements',
        default_venue: str = DEFAULT_VENUE_NAME,
        default_min_players: int = DEFAULT_MIN_PLAYERS,
        default_max_players: int = DEFAULT_MAX_PLAYERS
    ):
        self.store = store or MemoryRosterStore()
        self.lifecycle = lifecycle or LifecycleController()
        self.redis = redis_client
        self.events_channel = events_channel
        self.default_venue = default_venue
        self.default_min_players = default_min_players
        self.default_max_players = default_max_players

    # ==================== Queries ====================

    def get_match(self, match_id: str) -> Match:
        return self.store.get(match_id)

    def list_matches(self, active: Optional[bool] = None) -> List[Match]:
        """List matches by scheduled time, optionally only active or only cancelled ones."""
        matches = self.store.list()
        if active is None:
            return matches
        return [m for m in matches if m.active == active]

    def list_players(self) -> List[Participant]:
        """Every distinct participant across all matches, in first-seen order."""
        seen: Dict[str, Participant] = {}
        for match in self.store.list():
            for p in match.participants:
                seen.setdefault(p.identity, p)
        return list(seen.values())

    # ==================== Match lifecycle ====================

    def _last_venue(self) -> Optional[str]:
        matches = self.store.list()
        if not matches:
            return None
        return max(matches, key=lambda m: m.created_at).venue_name

    def create_match(
        self,
        scheduled_at: Union[str, datetime],
        venue_name: str = None,
        min_players: int = None,
        max_players: int = None,
        location: str = '',
        location_link: str = ''
    ) -> Match:
        """Create an active match with an empty roster.

        Omitted capacity falls back to the configured defaults and an omitted
        venue to the venue of the most recently created match.
        """
        if venue_name is None:
            venue_name = self._last_venue() or self.default_venue
        if min_players is None:
            min_players = self.default_min_players
        if max_players is None:
            max_players = self.default_max_players

        draft = self.lifecycle.validate_creation(
            scheduled_at=scheduled_at,
            venue_name=venue_name,
            min_players=min_players,
            max_players=max_players,
            location=location,
            location_link=location_link
        )
        match = self.store.create(draft)

        logger.info(f"Created match {match.id} at {match.venue_name} "
                    f"({match.min_players}-{match.max_players} players)")
        self._publish(match_created_event(match.id, isoformat(match.scheduled_at), match.venue_name))
        return match

    def cancel_match(self, match_id: str) -> Match:
        match = self.store.mutate(match_id, self.lifecycle.cancel)
        logger.info(f"Cancelled match {match_id}")
        self._publish(state_changed_event(EventType.MATCH_CANCELLED, match_id, 'active', 'cancelled'))
        return match

    def restore_match(self, match_id: str) -> Match:
        match = self.store.mutate(match_id, self.lifecycle.restore)
        logger.info(f"Restored match {match_id}")
        self._publish(state_changed_event(EventType.MATCH_RESTORED, match_id, 'cancelled', 'active'))
        return match

    def delete_match(self, match_id: str) -> None:
        """Remove a match for good. Unlike cancel, this cannot be undone."""
        self.store.delete(match_id)
        logger.info(f"Deleted match {match_id}")
        self._publish(match_deleted_event(match_id))

    # ==================== Roster ====================

    def join_match(self, match_id: str, claimed_name: str, external_id: Union[int, str] = None) -> Match:
        identity = resolve(claimed_name, external_id)

        def admit(match: Match) -> Match:
            self.lifecycle.require('join', match)
            if match.find_participant(identity.identity):
                raise AlreadyJoined(f"{identity.display_name or identity.identity} already joined match {match.id}")
            if len(match.participants) >= match.max_players:
                raise MatchFull(f"Match {match.id} is full ({match.max_players} players)")
            return match.with_participant(Participant(
                identity=identity.identity,
                display_name=identity.display_name,
                external_id=identity.external_id
            ))

        match = self.store.mutate(match_id, admit)
        logger.info(f"{identity.identity} joined match {match_id} "
                    f"({match.player_count}/{match.max_players})")
        self._publish(roster_changed_event(
            EventType.PLAYER_JOINED, match_id, identity.identity,
            identity.display_name, match.player_count
        ))
        return match

    def leave_match(self, match_id: str, claimed_name: str, external_id: Union[int, str] = None) -> Match:
        identity = resolve(claimed_name, external_id)

        def remove(match: Match) -> Match:
            self.lifecycle.require('leave', match)
            if match.find_participant(identity.identity) is None:
                raise NotJoined(f"{identity.display_name or identity.identity} is not part of match {match.id}")
            return match.without_participant(identity.identity)

        match = self.store.mutate(match_id, remove)
        logger.info(f"{identity.identity} left match {match_id} "
                    f"({match.player_count}/{match.max_players})")
        self._publish(roster_changed_event(
            EventType.PLAYER_LEFT, match_id, identity.identity,
            identity.display_name, match.player_count
        ))
        return match

    # ==================== Events ====================

    def _publish(self, event: Event):
        if not self.redis:
            return
        try:
            self.redis.publish(self.events_channel, event.to_json())
        except redis.RedisError as e:
            # The mutation is already committed; listeners miss one event.
            logger.warning(f"Failed to publish {event.type.value} for {event.match_id}: {e}")
