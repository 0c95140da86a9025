from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

socketio = SocketIO(async_mode=None)


def _allowed_origins(raw):
    origins = [o.strip() for o in (raw or '').split(',') if o.strip()]
    if not origins or '*' in origins:
        return '*'
    return origins


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(str(flask_app.config.get('LOG_LEVEL', 'INFO')).upper())

    allowed_origins = _allowed_origins(flask_app.config.get('CORS_ALLOWED_ORIGINS'))
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Each application owns one in-memory store for its whole lifetime
    from bingo.store import GameStore
    store = GameStore()
    flask_app.extensions['bingo_store'] = store

    from bingo.main import main
    flask_app.register_blueprint(main)

    from bingo.api.sessions import sessions, players
    flask_app.register_blueprint(sessions, url_prefix='/api/session')
    flask_app.register_blueprint(players, url_prefix='/api/player')

    # Register Socket.IO event handlers bound to this app's store
    from bingo.socketio_events import register_socketio_handlers
    gateway = register_socketio_handlers(
        store,
        require_active_to_draw=bool(flask_app.config.get('BINGO_REQUIRE_ACTIVE_TO_DRAW')),
    )
    flask_app.extensions['bingo_gateway'] = gateway

    flask_app.logger.info(f"[startup] cors_origins={allowed_origins} require_active_to_draw={gateway.require_active_to_draw}")
    return flask_app
