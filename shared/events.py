from enum import Enum
from dataclasses import dataclass
from datetime import datetime, timezone
import json


class EventType(str, Enum):
    # Match lifecycle
    MATCH_CREATED = "match.created"
    MATCH_CANCELLED = "match.cancelled"
    MATCH_RESTORED = "match.restored"
    MATCH_DELETED = "match.deleted"

    # Roster changes
    PLAYER_JOINED = "player.joined"
    PLAYER_LEFT = "player.left"


@dataclass
class Event:
    type: EventType
    match_id: str
    timestamp: str = None
    data: dict = None

    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        if self.data is None:
            self.data = {}

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "match_id": self.match_id,
            "timestamp": self.timestamp,
            "data": self.data
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


def match_created_event(match_id: str, scheduled_at: str, venue_name: str) -> Event:
    return Event(
        type=EventType.MATCH_CREATED,
        match_id=match_id,
        data={
            "scheduled_at": scheduled_at,
            "venue_name": venue_name
        }
    )


def roster_changed_event(event_type: EventType, match_id: str, identity: str,
                         display_name: str, player_count: int) -> Event:
    return Event(
        type=event_type,
        match_id=match_id,
        data={
            "identity": identity,
            "display_name": display_name,
            "player_count": player_count
        }
    )


def state_changed_event(event_type: EventType, match_id: str, from_state: str, to_state: str) -> Event:
    return Event(
        type=event_type,
        match_id=match_id,
        data={
            "from_state": from_state,
            "to_state": to_state
        }
    )


def match_deleted_event(match_id: str) -> Event:
    return Event(type=EventType.MATCH_DELETED, match_id=match_id)
