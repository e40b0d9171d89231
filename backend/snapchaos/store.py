import logging
import threading
import time
from typing import Dict, List, Optional, Set

from snapchaos.models import Room, generate_room_code

logger = logging.getLogger(__name__)


class RoomStore:
    """In-memory table of active rooms keyed by code.

    The store lock only guards the map itself; transitions on a room hold
    that room's own lock.
    """

    def __init__(self, code_length: int = 4):
        self.code_length = code_length
        self._rooms: Dict[str, Room] = {}
        self._lock = threading.Lock()

    def get(self, code: str) -> Optional[Room]:
        return self._rooms.get(code)

    def get_or_create(self, code: str) -> Room:
        with self._lock:
            room = self._rooms.get(code)
            if room is None:
                room = Room(code=code)
                self._rooms[code] = room
                logger.info(f"[room-created] code={code}")
            return room

    def create(self) -> Room:
        with self._lock:
            code = generate_room_code(self.code_length, exists=lambda c: c in self._rooms)
            room = Room(code=code)
            self._rooms[code] = room
            logger.info(f"[room-created] code={code}")
            return room

    def remove(self, code: str) -> Optional[Room]:
        with self._lock:
            return self._rooms.pop(code, None)

    def __len__(self):
        return len(self._rooms)

    def __contains__(self, code):
        return code in self._rooms

    def reap_idle(self, ttl_sec: float, now: Optional[float] = None) -> List[str]:
        """Drop empty rooms whose last activity is older than ``ttl_sec``."""
        now = time.time() if now is None else now
        removed = []
        with self._lock:
            for code, room in list(self._rooms.items()):
                with room.lock:
                    if not room.players and now - room.last_active >= ttl_sec:
                        del self._rooms[code]
                        removed.append(code)
        if removed:
            logger.info(f"[room-reaped] codes={','.join(removed)}")
        return removed


class ConnectionRegistry:
    """Reverse index from connection id to the room codes it joined."""

    def __init__(self):
        self._by_sid: Dict[str, Set[str]] = {}
        self._lock = threading.Lock()

    def bind(self, sid: str, code: str) -> None:
        with self._lock:
            self._by_sid.setdefault(sid, set()).add(code)

    def unbind(self, sid: str, code: Optional[str] = None) -> None:
        """Forget one room for ``sid``, or every room when ``code`` is None."""
        with self._lock:
            if code is None:
                self._by_sid.pop(sid, None)
                return
            codes = self._by_sid.get(sid)
            if codes is None:
                return
            codes.discard(code)
            if not codes:
                del self._by_sid[sid]

    def rooms_for(self, sid: str) -> List[str]:
        with self._lock:
            return sorted(self._by_sid.get(sid, ()))
