import os

DEFAULT_ORIGINS = 'https://snap-chaos.vercel.app,http://localhost:3000'

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    CORS_ORIGINS = [o.strip() for o in os.environ.get('CORS_ORIGINS', DEFAULT_ORIGINS).split(',') if o.strip()]
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    PORT = int(os.environ.get('PORT', '8080'))
    # Rooms
    ROOM_CODE_LENGTH = int(os.environ.get('ROOM_CODE_LENGTH', '4'))
    DEFAULT_PLAYER_NAME = os.environ.get('DEFAULT_PLAYER_NAME', 'Player')
    DEFAULT_MODE = os.environ.get('DEFAULT_MODE', 'classic')
    # Round duration used when start_round omits durationSec or sends a non-positive value
    DEFAULT_ROUND_DURATION_SEC = int(os.environ.get('DEFAULT_ROUND_DURATION_SEC', '30'))
    # Optional: end rounds server-side when the deadline passes. Off by default.
    ROUND_AUTO_END = os.environ.get('ROUND_AUTO_END', '0') == '1'
    # Optional: drop empty rooms idle longer than this many seconds. 0 disables.
    ROOM_IDLE_TTL_SEC = int(os.environ.get('ROOM_IDLE_TTL_SEC', '0'))
    ROOM_REAPER_INTERVAL_SEC = int(os.environ.get('ROOM_REAPER_INTERVAL_SEC', '60'))
