import os
import sys
import pytest

# Ensure the backend root (containing the `snapchaos` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from snapchaos import create_app, socketio
from snapchaos.services.rooms import RoomStateMachine
from snapchaos.store import ConnectionRegistry, RoomStore


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ORIGINS = ['http://localhost:3000']
    SOCKETIO_NAMESPACE = '/'
    ROOM_CODE_LENGTH = 4
    DEFAULT_ROUND_DURATION_SEC = 30
    DEFAULT_PLAYER_NAME = 'Player'
    DEFAULT_MODE = 'classic'
    ROUND_AUTO_END = False
    ROOM_IDLE_TTL_SEC = 0


class RecordingGateway:
    """Stands in for Socket.IO delivery; records subscriptions and broadcasts."""

    def __init__(self):
        self.subscribers = {}
        self.events = []

    def subscribe(self, sid, code):
        self.subscribers.setdefault(code, set()).add(sid)

    def unsubscribe(self, sid, code):
        self.subscribers.get(code, set()).discard(sid)

    def broadcast(self, event, payload, code):
        self.events.append((event, payload, code))

    def named(self, event):
        return [payload for name, payload, _ in self.events if name == event]


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture()
def gateway():
    return RecordingGateway()


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def machine(gateway, clock):
    import random
    return RoomStateMachine(
        store=RoomStore(),
        registry=ConnectionRegistry(),
        gateway=gateway,
        default_mode='classic',
        clock=clock,
        rng=random.Random(7),
    )


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def make_sio_client(flask_app):
    clients = []

    def _make():
        test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        test_client.get_received()  # flush 'connected'
        clients.append(test_client)
        return test_client

    yield _make
    for test_client in clients:
        try:
            if test_client.is_connected():
                test_client.disconnect()
        except Exception:
            pass


@pytest.fixture()
def app_machine(flask_app, gateway):
    """The app's state machine with delivery recorded instead of sent."""
    machine = flask_app.extensions['snapchaos']
    machine.gateway = gateway
    return machine
