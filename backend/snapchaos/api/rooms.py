from flask import Blueprint, current_app, jsonify
from snapchaos.models import normalize_code

rooms = Blueprint('rooms', __name__)


@rooms.route('/<string:code>', methods=['GET'])
def get_room_state(code):
    """Read-only view of a room, its current round and past round results."""
    room = current_app.extensions['snapchaos'].store.get(normalize_code(code))
    if room is None:
        return jsonify({'error': 'Room not found'}), 404
    with room.lock:
        payload = room.to_state_dict()
    return jsonify(payload)
