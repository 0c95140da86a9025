import threading

from bingo.models import SessionStatus
from bingo.services import game
from bingo.store import GameStore

from conftest import SAMPLE_CARD


def test_draw_marks_cards_and_reports_history():
    store = GameStore()
    session = store.create_session()
    player = store.create_player(session.id, SAMPLE_CARD)
    results = [game.draw_number(store, session.id) for _ in range(5)]
    assert [r.number for r in results] == results[-1].drawn_numbers

    drawn = set(results[-1].drawn_numbers)
    marked = store.get_player(player.id).marked
    for r in range(5):
        for c in range(5):
            assert marked[r][c] == (SAMPLE_CARD[r][c] in drawn)


def test_draw_unknown_or_exhausted_is_none():
    store = GameStore()
    assert game.draw_number(store, 'missing') is None
    session = store.create_session()
    store.update_session(session.id, {'drawn_numbers': list(range(1, 91))})
    assert game.draw_number(store, session.id) is None


def test_draw_requires_active_when_asked():
    store = GameStore()
    session = store.create_session()
    assert game.draw_number(store, session.id, require_active=True) is None
    assert store.get_session(session.id).drawn_numbers == []
    game.start_game(store, session.id)
    assert game.draw_number(store, session.id, require_active=True) is not None


def test_reset_clears_draws_and_marks_from_any_state():
    store = GameStore()
    session = store.create_session()
    players = [store.create_player(session.id, SAMPLE_CARD) for _ in range(3)]
    game.start_game(store, session.id)
    for _ in range(40):
        game.draw_number(store, session.id)

    reset = game.reset_game(store, session.id)
    assert reset.status == SessionStatus.WAITING
    assert reset.drawn_numbers == []
    for p in players:
        assert store.get_player(p.id).marked == [[False] * 5 for _ in range(5)]
    # resetting again is harmless
    assert game.reset_game(store, session.id).drawn_numbers == []


def test_actions_on_unknown_session_return_none():
    store = GameStore()
    assert game.start_game(store, 'ghost') is None
    assert game.reset_game(store, 'ghost') is None
    assert store.get_session('ghost') is None


def test_concurrent_draws_keep_marks_in_step_with_history():
    store = GameStore()
    session = store.create_session()
    player = store.create_player(session.id, SAMPLE_CARD)

    def _worker():
        for _ in range(8):
            with store.session_lock(session.id):
                game.draw_number(store, session.id)

    workers = [threading.Thread(target=_worker) for _ in range(6)]
    for t in workers:
        t.start()
    for t in workers:
        t.join(timeout=10)

    drawn = store.get_session(session.id).drawn_numbers
    assert len(drawn) == 48
    assert len(set(drawn)) == 48
    marked = store.get_player(player.id).marked
    for r in range(5):
        for c in range(5):
            assert marked[r][c] == (SAMPLE_CARD[r][c] in drawn)
