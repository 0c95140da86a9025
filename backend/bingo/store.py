"""In-memory game store.

The store is the only owner of session and player state. Callers get
copies back, so editing a returned object never changes the store. Every
update goes through ``update_session`` or ``update_player`` (or the
draw/mark helpers), which swap in a new instance under the store lock.
"""
from contextlib import contextmanager
from dataclasses import replace
from threading import Lock, RLock
from typing import Dict, Iterator, List, Mapping, Optional, Any
import logging
import secrets

from .models import (
    CARD_SIZE,
    MAX_NUMBER,
    MIN_NUMBER,
    Player,
    Session,
    SessionStatus,
    generate_id,
)

logger = logging.getLogger(__name__)

_IMMUTABLE_FIELDS = ('id',)
_IMMUTABLE_PLAYER_FIELDS = ('id', 'session_id', 'card')


class GameStore:
    """Thread-safe in-memory store for sessions and players."""

    def __init__(self):
        self._sessions: Dict[str, Session] = {}
        self._players: Dict[str, Player] = {}
        self._lock = RLock()
        self._session_locks: Dict[str, RLock] = {}
        self._session_locks_guard = Lock()
        self._random = secrets.SystemRandom()

    # ---- Sessions ----

    def create_session(self) -> Session:
        with self._lock:
            session = Session(id=self._new_id(self._sessions))
            self._sessions[session.id] = session
            with self._session_locks_guard:
                self._session_locks[session.id] = RLock()
        logger.info(f"[session-create] session={session.id}")
        return _copy_session(session)

    def get_session(self, session_id: str) -> Optional[Session]:
        with self._lock:
            return _copy_session(self._sessions.get(session_id))

    def update_session(self, session_id: str, updates: Mapping[str, Any]) -> Optional[Session]:
        """Merge ``updates`` into the session; fields not given are preserved.

        Returns None (and stores nothing) when the session does not exist.
        """
        fields = dict(updates)
        _reject_immutable(fields, _IMMUTABLE_FIELDS)
        if 'status' in fields:
            fields['status'] = SessionStatus(fields['status'])
        if 'drawn_numbers' in fields:
            fields['drawn_numbers'] = list(fields['drawn_numbers'])
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None
            updated = replace(session, **fields)
            self._sessions[session_id] = updated
            return _copy_session(updated)

    def draw_number(self, session_id: str) -> Optional[int]:
        """Draw a number not yet drawn in this session.

        Returns None when the session is unknown or all numbers are drawn.
        """
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None
            drawn = set(session.drawn_numbers)
            available = [n for n in range(MIN_NUMBER, MAX_NUMBER + 1) if n not in drawn]
            if not available:
                return None
            number = self._random.choice(available)
            self._sessions[session_id] = replace(
                session, drawn_numbers=session.drawn_numbers + [number]
            )
            return number

    # ---- Players ----

    def create_player(self, session_id: str, card) -> Player:
        with self._lock:
            player = Player(
                id=self._new_id(self._players),
                session_id=session_id,
                card=tuple(tuple(row) for row in card),
            )
            self._players[player.id] = player
            total = self.count_players(session_id)
        logger.info(f"[player-create] player={player.id} session={session_id} players_in_session={total}")
        return _copy_player(player)

    def get_player(self, player_id: str) -> Optional[Player]:
        with self._lock:
            return _copy_player(self._players.get(player_id))

    def get_players_by_session(self, session_id: str) -> List[Player]:
        with self._lock:
            return [_copy_player(p) for p in self._players.values() if p.session_id == session_id]

    def count_players(self, session_id: str) -> int:
        return len(self.get_players_by_session(session_id))

    def update_player(self, player_id: str, updates: Mapping[str, Any]) -> Optional[Player]:
        fields = dict(updates)
        _reject_immutable(fields, _IMMUTABLE_PLAYER_FIELDS)
        if 'marked' in fields:
            fields['marked'] = [list(row) for row in fields['marked']]
        with self._lock:
            player = self._players.get(player_id)
            if player is None:
                return None
            updated = replace(player, **fields)
            self._players[player_id] = updated
            return _copy_player(updated)

    def mark_number_on_player_cards(self, session_id: str, number: int) -> None:
        """Mark ``number`` on every card in the session. Idempotent."""
        with self._lock:
            for player in self.get_players_by_session(session_id):
                marked = [list(row) for row in player.marked]
                for r in range(CARD_SIZE):
                    for c in range(CARD_SIZE):
                        if player.card[r][c] == number:
                            marked[r][c] = True
                self._players[player.id] = replace(player, marked=marked)

    # ---- Locking ----

    @contextmanager
    def session_lock(self, session_id: str) -> Iterator[None]:
        """Serialise multi-step actions on one session.

        Hold this around a store mutation and the broadcast that reports it
        so events for a session go out in the order they were processed.
        """
        with self._session_locks_guard:
            lock = self._session_locks.get(session_id)
        if lock is None:
            # Unknown session: every action on it is a no-op
            yield
            return
        with lock:
            yield

    @staticmethod
    def _new_id(existing) -> str:
        while True:
            new_id = generate_id()
            if new_id not in existing:
                return new_id


def _reject_immutable(fields, names) -> None:
    for name in names:
        if name in fields:
            raise ValueError(f"'{name}' cannot be updated")


def _copy_session(session: Optional[Session]) -> Optional[Session]:
    if session is None:
        return None
    return replace(session, drawn_numbers=list(session.drawn_numbers))


def _copy_player(player: Optional[Player]) -> Optional[Player]:
    if player is None:
        return None
    return replace(player, marked=[list(row) for row in player.marked])
