"""Room domain services: lifecycle, scoring and timers.

This package holds the room and round rules, kept apart from the Socket.IO
and HTTP transport so they can be driven directly in tests.
"""

from .lifecycle import RoomStateMachine
from .scoring import RoundScore, RoundSnapshot, score_round

__all__ = ['RoomStateMachine', 'RoundScore', 'RoundSnapshot', 'score_round']
