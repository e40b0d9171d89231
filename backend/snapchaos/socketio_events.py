from flask import current_app, request
from flask_socketio import emit

from snapchaos import socketio
from snapchaos.errors import RoomError
from snapchaos.models import normalize_code
from snapchaos.services.rooms.scheduler import schedule_round_timer


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _machine():
    return current_app.extensions['snapchaos']


def _payload(data) -> dict:
    return data if isinstance(data, dict) else {}


def _failed(event: str, exc: RoomError):
    current_app.logger.info(f"[{event}-denied] sid={_get_sid()} reason={exc.message}")
    return exc.to_ack(), None


def handle_connect(auth=None):
    current_app.logger.info(f"[connect] sid={_get_sid()}")
    emit('connected', {'id': _get_sid()})


def handle_disconnect(*args):
    sid = _get_sid()
    current_app.logger.info(f"[disconnect] sid={sid}")
    _machine().disconnect(sid)


def handle_create_room(data=None):
    data = _payload(data)
    try:
        result = _machine().create_room(_get_sid(), data.get('name'))
    except RoomError as exc:
        return _failed('create_room', exc)
    return None, result


def handle_join_room(data=None):
    data = _payload(data)
    try:
        result = _machine().join_room(_get_sid(), data.get('code'), data.get('name'))
    except RoomError as exc:
        return _failed('join_room', exc)
    return None, result


def handle_start_round(data=None):
    data = _payload(data)
    machine = _machine()
    try:
        result = machine.start_round(_get_sid(), data.get('code'), data.get('mode'), data.get('durationSec'))
    except RoomError as exc:
        return _failed('start_round', exc)
    schedule_round_timer(current_app._get_current_object(), normalize_code(data.get('code')),
                         result['round'], result['deadline'])
    return None, {'ok': True}


def handle_submit_photo(data=None):
    data = _payload(data)
    result = _machine().submit_photo(_get_sid(), data.get('code'), data.get('payload'))
    if result is None:
        return None
    return None, result


def handle_vote_best(data=None):
    data = _payload(data)
    try:
        result = _machine().vote_best(_get_sid(), data.get('code'), data.get('targetId'))
    except RoomError as exc:
        return _failed('vote_best', exc)
    if result is None:
        return None
    return None, result


def handle_flag_lazy(data=None):
    data = _payload(data)
    try:
        result = _machine().flag_lazy(_get_sid(), data.get('code'), data.get('targetId'))
    except RoomError as exc:
        return _failed('flag_lazy', exc)
    if result is None:
        return None
    return None, result


def handle_end_round(data=None):
    data = _payload(data)
    try:
        result = _machine().end_round(_get_sid(), data.get('code'))
    except RoomError as exc:
        return _failed('end_round', exc)
    return None, result


def handle_leave_room(data=None):
    data = _payload(data)
    _machine().leave_room(_get_sid(), data.get('code'))


EVENTS = {
    'connect': handle_connect,
    'disconnect': handle_disconnect,
    'create_room': handle_create_room,
    'join_room': handle_join_room,
    'start_round': handle_start_round,
    'submit_photo': handle_submit_photo,
    'vote_best': handle_vote_best,
    'flag_lazy': handle_flag_lazy,
    'end_round': handle_end_round,
    'leave_room': handle_leave_room,
}


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register Socket.IO event handlers on ``namespace``."""
    for event, handler in EVENTS.items():
        socketio.on_event(event, handler, namespace=namespace)
