"""
Unit tests for roster event records.
"""
import json

from shared.events import (
    Event,
    EventType,
    match_created_event,
    match_deleted_event,
    roster_changed_event,
    state_changed_event,
)


class TestEvent:

    def test_timestamp_defaults_to_utc(self):
        event = Event(type=EventType.MATCH_DELETED, match_id="m_1")
        assert event.timestamp.endswith("Z")
        assert event.data == {}

    def test_to_json(self):
        event = Event(type=EventType.MATCH_CANCELLED, match_id="m_1", timestamp="t",
                      data={"from_state": "active"})
        assert json.loads(event.to_json())["data"] == {"from_state": "active"}

    def test_to_dict_uses_enum_value(self):
        event = Event(type=EventType.PLAYER_JOINED, match_id="m_1", timestamp="t")
        assert event.to_dict() == {
            "type": "player.joined",
            "match_id": "m_1",
            "timestamp": "t",
            "data": {},
        }


class TestEventFactories:

    def test_match_created(self):
        event = match_created_event("m_1", "2026-11-07T18:30:00Z", "Riverside Park")
        assert event.type == EventType.MATCH_CREATED
        assert event.data["venue_name"] == "Riverside Park"

    def test_roster_changed(self):
        event = roster_changed_event(EventType.PLAYER_LEFT, "m_1", "Alice", "Alice", 3)
        assert event.data["player_count"] == 3

    def test_state_changed(self):
        event = state_changed_event(EventType.MATCH_RESTORED, "m_1", "cancelled", "active")
        assert event.data == {"from_state": "cancelled", "to_state": "active"}

    def test_match_deleted(self):
        assert match_deleted_event("m_1").type == EventType.MATCH_DELETED
