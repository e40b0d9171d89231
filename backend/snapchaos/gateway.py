import logging

logger = logging.getLogger(__name__)


class SocketIOGateway:
    """Delivers room events through Flask-SocketIO rooms named by room code."""

    def __init__(self, socketio, namespace: str = '/'):
        self.socketio = socketio
        self.namespace = namespace

    def subscribe(self, sid: str, code: str) -> None:
        self.socketio.server.enter_room(sid, code, namespace=self.namespace)

    def unsubscribe(self, sid: str, code: str) -> None:
        try:
            self.socketio.server.leave_room(sid, code, namespace=self.namespace)
        except Exception as exc:
            # Connection may already be gone
            logger.info(f"[unsubscribe-skip] sid={sid} code={code} err={exc}")

    def broadcast(self, event: str, payload, code: str) -> None:
        try:
            self.socketio.emit(event, payload, to=code, namespace=self.namespace)
        except Exception:
            logger.exception(f"[broadcast-failed] event={event} code={code}")
