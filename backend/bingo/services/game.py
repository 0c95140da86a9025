from typing import List, NamedTuple, Optional
import logging

from bingo.models import Session, SessionStatus, empty_marks
from bingo.store import GameStore

logger = logging.getLogger(__name__)


class DrawResult(NamedTuple):
    number: int
    drawn_numbers: List[int]


def start_game(store: GameStore, session_id: str) -> Optional[Session]:
    session = store.update_session(session_id, {'status': SessionStatus.ACTIVE})
    if session:
        logger.info(f"[start] session={session_id}")
    return session


def draw_number(store: GameStore, session_id: str, require_active: bool = False) -> Optional[DrawResult]:
    """Draw the next number and mark it on every card in the session.

    Returns None for an unknown or exhausted session, and for a session
    still waiting to start when ``require_active`` is set.
    """
    if require_active:
        session = store.get_session(session_id)
        if session is None or session.status != SessionStatus.ACTIVE:
            logger.debug(f"[draw-skip] session={session_id} not active")
            return None
    number = store.draw_number(session_id)
    if number is None:
        logger.debug(f"[draw-skip] session={session_id} unknown or exhausted")
        return None
    store.mark_number_on_player_cards(session_id, number)
    session = store.get_session(session_id)
    drawn = list(session.drawn_numbers) if session else []
    logger.info(f"[draw] session={session_id} number={number} drawn_count={len(drawn)}")
    return DrawResult(number, drawn)


def reset_game(store: GameStore, session_id: str) -> Optional[Session]:
    """Return the session to waiting: clear the draw history and every mark."""
    session = store.update_session(session_id, {
        'status': SessionStatus.WAITING,
        'drawn_numbers': [],
    })
    for player in store.get_players_by_session(session_id):
        store.update_player(player.id, {'marked': empty_marks()})
    if session:
        logger.info(f"[reset] session={session_id}")
    return session
