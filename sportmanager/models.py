from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Tuple

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive values read back from databases that drop tzinfo."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def isoformat(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return as_utc(value).isoformat().replace('+00:00', 'Z')


class CapacityState(str, Enum):
    FORMING = "forming"
    READY = "ready"
    FULL = "full"


@dataclass(frozen=True)
class Participant:
    identity: str
    display_name: str
    external_id: Optional[int] = None

    def to_dict(self):
        return {
            'identity': self.identity,
            'displayName': self.display_name,
            'externalId': self.external_id,
        }


@dataclass
class Match:
    scheduled_at: datetime
    venue_name: str
    min_players: int
    max_players: int
    location: str = ''
    location_link: str = ''
    id: Optional[str] = None
    participants: Tuple[Participant, ...] = ()
    active: bool = True
    created_at: datetime = field(default_factory=utcnow)

    def copy(self) -> "Match":
        return replace(self, participants=tuple(self.participants))

    def find_participant(self, identity: str) -> Optional[Participant]:
        for p in self.participants:
            if p.identity == identity:
                return p
        return None

    def with_participant(self, participant: Participant) -> "Match":
        return replace(self, participants=tuple(self.participants) + (participant,))

    def without_participant(self, identity: str) -> "Match":
        remaining = tuple(p for p in self.participants if p.identity != identity)
        return replace(self, participants=remaining)

    @property
    def player_count(self) -> int:
        return len(self.participants)

    def to_dict(self):
        return {
            'id': self.id,
            'scheduledAt': isoformat(self.scheduled_at),
            'venueName': self.venue_name,
            'location': self.location,
            'locationLink': self.location_link,
            'minPlayers': self.min_players,
            'maxPlayers': self.max_players,
            'participants': [p.to_dict() for p in self.participants],
            'playerCount': self.player_count,
            'capacityState': capacity_state(self).value,
            'active': self.active,
            'createdAt': isoformat(self.created_at),
        }


def capacity_state(match: Match) -> CapacityState:
    """Display status of a roster; only FULL is enforced, on join."""
    count = len(match.participants)
    if count >= match.max_players:
        return CapacityState.FULL
    if count >= match.min_players:
        return CapacityState.READY
    return CapacityState.FORMING


class MatchRecord(db.Model):
    __tablename__ = 'matches'

    id = db.Column(db.Integer, primary_key=True)
    match_id = db.Column(db.String(50), unique=True, nullable=False, index=True)
    scheduled_at = db.Column(db.DateTime(timezone=True), nullable=False, index=True)
    venue_name = db.Column(db.String(200), nullable=False)
    location = db.Column(db.String(500), nullable=False, default='')
    location_link = db.Column(db.String(1000), nullable=False, default='')
    min_players = db.Column(db.Integer, nullable=False, default=10)
    max_players = db.Column(db.Integer, nullable=False, default=12)
    active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow)

    participants = db.relationship(
        'ParticipantRecord',
        back_populates='match',
        cascade='all, delete-orphan',
        order_by='ParticipantRecord.position'
    )

    @classmethod
    def from_domain(cls, match: Match) -> "MatchRecord":
        record = cls(
            match_id=match.id,
            scheduled_at=as_utc(match.scheduled_at),
            venue_name=match.venue_name,
            location=match.location,
            location_link=match.location_link,
            min_players=match.min_players,
            max_players=match.max_players,
            active=match.active,
            created_at=as_utc(match.created_at),
        )
        record.apply(match)
        return record

    def apply(self, match: Match):
        """Write the mutable part of a match (active flag and roster) back to the row."""
        self.active = match.active

        existing = {p.identity: p for p in self.participants}
        rows: List[ParticipantRecord] = []
        for position, participant in enumerate(match.participants):
            row = existing.get(participant.identity)
            if row is None:
                row = ParticipantRecord(
                    identity=participant.identity,
                    display_name=participant.display_name,
                    external_id=participant.external_id,
                )
            row.position = position
            rows.append(row)
        self.participants = rows

    def to_domain(self) -> Match:
        return Match(
            id=self.match_id,
            scheduled_at=as_utc(self.scheduled_at),
            venue_name=self.venue_name,
            location=self.location or '',
            location_link=self.location_link or '',
            min_players=self.min_players,
            max_players=self.max_players,
            participants=tuple(p.to_domain() for p in self.participants),
            active=self.active,
            created_at=as_utc(self.created_at),
        )


class ParticipantRecord(db.Model):
    __tablename__ = 'match_participants'

    id = db.Column(db.Integer, primary_key=True)
    match_pk = db.Column(db.Integer, db.ForeignKey('matches.id'), nullable=False)
    identity = db.Column(db.String(200), nullable=False)
    display_name = db.Column(db.String(200), nullable=False, default='')
    external_id = db.Column(db.BigInteger, nullable=True)
    position = db.Column(db.Integer, nullable=False, default=0)
    joined_at = db.Column(db.DateTime(timezone=True), default=utcnow)

    match = db.relationship('MatchRecord', back_populates='participants')

    __table_args__ = (
        db.UniqueConstraint('match_pk', 'identity', name='unique_player_per_match'),
    )

    def to_domain(self) -> Participant:
        return Participant(
            identity=self.identity,
            display_name=self.display_name,
            external_id=self.external_id,
        )
