import logging
from dataclasses import replace
from typing import List

from .errors import MatchNotFound
from .models import db, Match, MatchRecord
from .roster_store import RosterStore, LockTable, Mutation, generate_match_id

logger = logging.getLogger(__name__)


class SqlRosterStore(RosterStore):
    """
    Roster store backed by the Flask-SQLAlchemy session; must be used inside
    an application context.

    `mutate` takes the in-process lock for the match and a row lock
    (SELECT ... FOR UPDATE) so several workers sharing one PostgreSQL
    database still serialize per match. SQLite has no row locks; there the
    in-process lock is the only guard.
    """

    def __init__(self):
        self._locks = LockTable()

    def _query(self, match_id: str):
        return MatchRecord.query.filter_by(match_id=match_id)

    def get(self, match_id: str) -> Match:
        record = self._query(match_id).first()
        if record is None:
            raise MatchNotFound(match_id)
        return record.to_domain()

    def create(self, match: Match) -> Match:
        match_id = generate_match_id()
        while self._query(match_id).first() is not None:
            match_id = generate_match_id()

        record = MatchRecord.from_domain(replace(match, id=match_id))
        db.session.add(record)
        db.session.commit()
        logger.debug(f"Stored match {match_id}")
        return record.to_domain()

    def mutate(self, match_id: str, fn: Mutation) -> Match:
        with self._locks.hold(match_id):
            try:
                record = self._query(match_id).with_for_update().first()
                if record is None:
                    raise MatchNotFound(match_id)

                updated = fn(record.to_domain())
                record.apply(updated)
                db.session.commit()
            except Exception:
                db.session.rollback()
                raise
            return record.to_domain()

    def delete(self, match_id: str) -> None:
        with self._locks.hold(match_id):
            try:
                record = self._query(match_id).with_for_update().first()
                if record is None:
                    raise MatchNotFound(match_id)
                db.session.delete(record)
                db.session.commit()
            except Exception:
                db.session.rollback()
                raise
        self._locks.discard(match_id)
        logger.debug(f"Removed match {match_id}")

    def list(self) -> List[Match]:
        records = MatchRecord.query.order_by(
            MatchRecord.scheduled_at.asc(),
            MatchRecord.match_id.asc()
        ).all()
        return [r.to_domain() for r in records]

    def ping(self) -> bool:
        db.session.execute(db.text('SELECT 1'))
        return True
