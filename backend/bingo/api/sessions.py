from flask import Blueprint, jsonify, request, current_app

from bingo.models import SessionStatus
from bingo.services.cards import CardValidationError, INVALID_FORMAT, validate_card
from bingo.store import GameStore

sessions = Blueprint('sessions', __name__)
players = Blueprint('players', __name__)


def get_store() -> GameStore:
    return current_app.extensions['bingo_store']


def _session_not_found():
    return jsonify({'error': 'Session not found'}), 404


@sessions.route('/create', methods=['POST'])
def create_session():
    session = get_store().create_session()
    return jsonify(session.to_dict())


@sessions.route('/<string:session_id>', methods=['GET'])
def get_session(session_id):
    store = get_store()
    session = store.get_session(session_id)
    if not session:
        return _session_not_found()
    payload = session.to_dict()
    payload['playerCount'] = store.count_players(session_id)
    return jsonify(payload)


@sessions.route('/<string:session_id>/players', methods=['GET'])
def list_players(session_id):
    store = get_store()
    if not store.get_session(session_id):
        return _session_not_found()
    session_players = store.get_players_by_session(session_id)
    return jsonify({
        'count': len(session_players),
        'players': [{'id': p.id} for p in session_players],
    })


@sessions.route('/<string:session_id>/card', methods=['POST'])
def submit_card(session_id):
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': INVALID_FORMAT}), 400
    try:
        card = validate_card(data.get('card'))
    except CardValidationError as exc:
        current_app.logger.info(f"[card-rejected] session={session_id} reason={exc.message}")
        return jsonify({'error': exc.message}), 400

    store = get_store()
    # Held until the player exists so a concurrent start_game cannot slip in
    with store.session_lock(session_id):
        session = store.get_session(session_id)
        if not session:
            return _session_not_found()
        if session.status != SessionStatus.WAITING:
            return jsonify({'error': 'Session already started'}), 403
        player = store.create_player(session_id, card)
        player_count = store.count_players(session_id)

    payload = player.to_dict()
    payload['playerCount'] = player_count
    return jsonify(payload)


@players.route('/<string:player_id>', methods=['GET'])
def get_player(player_id):
    player = get_store().get_player(player_id)
    if not player:
        return jsonify({'error': 'Player not found'}), 404
    return jsonify(player.to_dict())
