from flask import request
from flask_socketio import join_room, leave_room
from typing import Dict, Optional
import logging

from bingo import socketio
from bingo.services import game
from bingo.store import GameStore

logger = logging.getLogger(__name__)


def room_for(session_id: str) -> str:
    return f"session:{session_id}"


def _session_id_from(data) -> Optional[str]:
    session_id = data.get('sessionId') if isinstance(data, dict) else None
    if not isinstance(session_id, str) or not session_id:
        return None
    return session_id


class BingoGateway:
    """Bridges Socket.IO connections to the game store.

    Each connection joins at most one session room. Actions mutate the
    store through the game services and, when something changed, the
    resulting event is broadcast to every connection in that room. A
    missing or unknown session is ignored without replying.
    """

    def __init__(self, store: GameStore, namespace: str = '/', require_active_to_draw: bool = False):
        self.store = store
        self.namespace = namespace
        self.require_active_to_draw = require_active_to_draw
        # sid -> session id of the joined room
        self._sid_to_session: Dict[str, str] = {}

    def session_for(self, sid: str) -> Optional[str]:
        return self._sid_to_session.get(sid)

    # ---- Connection lifecycle ----

    def handle_connect(self, auth=None):
        logger.info(f"[connect] sid={request.sid}")

    def handle_disconnect(self, reason=None):
        session_id = self._sid_to_session.pop(request.sid, None)
        logger.info(f"[disconnect] sid={request.sid} session={session_id}")

    def handle_join_session(self, data=None):
        session_id = _session_id_from(data)
        if not session_id:
            logger.warning(f"[join-ignored] sid={request.sid} missing sessionId")
            return
        previous = self._sid_to_session.get(request.sid)
        if previous and previous != session_id:
            leave_room(room_for(previous))
        join_room(room_for(session_id))
        self._sid_to_session[request.sid] = session_id
        logger.info(f"[join] sid={request.sid} session={session_id}")

    # ---- Host actions ----

    def handle_start_game(self, data=None):
        session_id = self._action_session(data, 'start_game')
        if not session_id:
            return
        with self.store.session_lock(session_id):
            if game.start_game(self.store, session_id):
                self._broadcast(session_id, 'session_started', {'sessionId': session_id})

    def handle_draw_number(self, data=None):
        session_id = self._action_session(data, 'draw_number')
        if not session_id:
            return
        with self.store.session_lock(session_id):
            result = game.draw_number(
                self.store, session_id, require_active=self.require_active_to_draw
            )
            if result:
                self._broadcast(session_id, 'number_drawn', {
                    'number': result.number,
                    'drawnNumbers': result.drawn_numbers,
                })

    def handle_reset_game(self, data=None):
        session_id = self._action_session(data, 'reset_game')
        if not session_id:
            return
        with self.store.session_lock(session_id):
            if game.reset_game(self.store, session_id):
                self._broadcast(session_id, 'session_reset', {'sessionId': session_id})

    def _action_session(self, data, action: str) -> Optional[str]:
        session_id = _session_id_from(data)
        if not session_id:
            logger.warning(f"[{action}-ignored] sid={request.sid} missing sessionId")
        return session_id

    def _broadcast(self, session_id: str, event: str, payload: dict) -> None:
        socketio.emit(event, payload, to=room_for(session_id), namespace=self.namespace)


def register_socketio_handlers(store: GameStore, namespace: str = '/', require_active_to_draw: bool = False) -> BingoGateway:
    """Create the gateway for ``store`` and bind its handlers on ``namespace``.

    Handlers are bound on the module-level ``socketio``, whose server is
    replaced on every ``init_app``. Only the most recently created app
    receives events, and any earlier app's gateway broadcasts into the
    newest server, so run one app per process.
    """
    gateway = BingoGateway(store, namespace=namespace, require_active_to_draw=require_active_to_draw)
    socketio.on_event('connect', gateway.handle_connect, namespace=namespace)
    socketio.on_event('disconnect', gateway.handle_disconnect, namespace=namespace)
    socketio.on_event('join_session', gateway.handle_join_session, namespace=namespace)
    socketio.on_event('start_game', gateway.handle_start_game, namespace=namespace)
    socketio.on_event('draw_number', gateway.handle_draw_number, namespace=namespace)
    socketio.on_event('reset_game', gateway.handle_reset_game, namespace=namespace)
    return gateway
