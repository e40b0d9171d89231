from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

socketio = SocketIO(async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []

    CORS(flask_app, origins=allowed_origins)
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Room core: one store, registry and state machine per app
    from snapchaos.gateway import SocketIOGateway
    from snapchaos.services.rooms import RoomStateMachine
    from snapchaos.store import ConnectionRegistry, RoomStore

    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/')
    flask_app.extensions['snapchaos'] = RoomStateMachine(
        store=RoomStore(code_length=int(flask_app.config.get('ROOM_CODE_LENGTH', 4))),
        registry=ConnectionRegistry(),
        gateway=SocketIOGateway(socketio, namespace=namespace),
        default_duration=flask_app.config.get('DEFAULT_ROUND_DURATION_SEC', 30),
        default_name=flask_app.config.get('DEFAULT_PLAYER_NAME', 'Player'),
        default_mode=flask_app.config.get('DEFAULT_MODE'),
    )

    from snapchaos.main import main
    flask_app.register_blueprint(main)

    from snapchaos.api.rooms import rooms
    flask_app.register_blueprint(rooms, url_prefix='/api/rooms')

    from snapchaos.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=namespace)

    from snapchaos.services.rooms.scheduler import start_room_reaper
    start_room_reaper(flask_app)

    return flask_app
