import os
import sys
import pytest

# Ensure the backend root (containing the `bingo` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from bingo import create_app, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = 'test-secret'
    CORS_ALLOWED_ORIGINS = '*'
    LOG_LEVEL = 'DEBUG'
    BINGO_REQUIRE_ACTIVE_TO_DRAW = False
    HOST = '127.0.0.1'
    PORT = 3000


class StrictDrawConfig(TestConfig):
    BINGO_REQUIRE_ACTIVE_TO_DRAW = True


SAMPLE_CARD = [
    [1, 2, 3, 4, 5],
    [6, 7, 8, 9, 10],
    [11, 12, 13, 14, 15],
    [16, 17, 18, 19, 20],
    [21, 22, 23, 24, 25],
]


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def store(flask_app):
    return flask_app.extensions['bingo_store']


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_factory(flask_app):
    """Build Socket.IO test clients; all are disconnected after the test."""
    created = []

    def _make():
        test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        created.append(test_client)
        return test_client

    yield _make
    for test_client in created:
        if test_client.is_connected():
            test_client.disconnect()


@pytest.fixture()
def sio_client(sio_factory):
    return sio_factory()


def force_next_draw(store, monkeypatch, number):
    """Make the store's next draw pick ``number``."""
    monkeypatch.setattr(store._random, 'choice', lambda seq: number if number in seq else seq[0])
