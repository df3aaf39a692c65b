import logging
import threading
import uuid
from contextlib import contextmanager
from dataclasses import replace
from typing import Callable, Dict, List

from .errors import MatchNotFound
from .models import Match

logger = logging.getLogger(__name__)

Mutation = Callable[[Match], Match]


def generate_match_id() -> str:
    """Short random public id, e.g. 'm_3f9c0a1b2d4e'."""
    return f"m_{uuid.uuid4().hex[:12]}"


class LockTable:
    """
    One lock per match id. The table's own lock only guards lookups in the
    table, never the work done while a match lock is held, so mutations of
    different matches never wait on each other.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.Lock] = {}

    def lock_for(self, key: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    @contextmanager
    def hold(self, key: str):
        """Hold the lock for `key`; drop the entry if `key` names no match."""
        with self.lock_for(key):
            try:
                yield
            except MatchNotFound:
                self.discard(key)
                raise

    def discard(self, key: str):
        with self._guard:
            self._locks.pop(key, None)

    def __len__(self):
        with self._guard:
            return len(self._locks)


class RosterStore:
    """
    Owns every match. Callers get copies; the only way to change a match is
    `mutate`, which runs read-validate-write for one id as a single critical
    section.
    """

    def get(self, match_id: str) -> Match:
        raise NotImplementedError

    def create(self, match: Match) -> Match:
        raise NotImplementedError

    def mutate(self, match_id: str, fn: Mutation) -> Match:
        raise NotImplementedError

    def delete(self, match_id: str) -> None:
        raise NotImplementedError

    def list(self) -> List[Match]:
        raise NotImplementedError

    def ping(self) -> bool:
        return True


def _schedule_key(match: Match):
    return (match.scheduled_at, match.id)


class MemoryRosterStore(RosterStore):
    """Process-local store; state is lost on restart."""

    def __init__(self):
        self._matches: Dict[str, Match] = {}
        self._index_lock = threading.Lock()
        self._locks = LockTable()

    def _lookup(self, match_id: str) -> Match:
        with self._index_lock:
            match = self._matches.get(match_id)
        if match is None:
            raise MatchNotFound(match_id)
        return match

    def get(self, match_id: str) -> Match:
        return self._lookup(match_id).copy()

    def create(self, match: Match) -> Match:
        with self._index_lock:
            match_id = generate_match_id()
            while match_id in self._matches:
                match_id = generate_match_id()
            stored = replace(match, id=match_id, participants=tuple(match.participants))
            self._matches[match_id] = stored
        logger.debug(f"Stored match {match_id}")
        return stored.copy()

    def mutate(self, match_id: str, fn: Mutation) -> Match:
        with self._locks.hold(match_id):
            current = self._lookup(match_id)
            updated = fn(current.copy())
            # id is immutable whatever the mutation returns
            updated = replace(updated, id=match_id, participants=tuple(updated.participants))
            with self._index_lock:
                if match_id not in self._matches:
                    raise MatchNotFound(match_id)
                self._matches[match_id] = updated
            return updated.copy()

    def delete(self, match_id: str) -> None:
        with self._locks.hold(match_id):
            with self._index_lock:
                if self._matches.pop(match_id, None) is None:
                    raise MatchNotFound(match_id)
        self._locks.discard(match_id)
        logger.debug(f"Removed match {match_id}")

    def list(self) -> List[Match]:
        with self._index_lock:
            matches = list(self._matches.values())
        return [m.copy() for m in sorted(matches, key=_schedule_key)]
