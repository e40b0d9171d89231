import logging
import random
import time
from typing import Callable, Optional

from snapchaos.errors import ConnectionClosed, InvalidRequest, NotAuthorized, RoomNotFound
from snapchaos.models import Room, normalize_code
from snapchaos.store import ConnectionRegistry, RoomStore
from .prompts import PROMPTS, pick_prompt
from .scoring import RoundSnapshot, apply_round_score, score_round

logger = logging.getLogger(__name__)


def parse_duration(value, default: float) -> float:
    try:
        duration = float(value)
    except (TypeError, ValueError):
        return default
    if duration != duration or duration <= 0:
        return default
    return duration


def parse_target(value) -> str:
    if not isinstance(value, str) or not value:
        raise InvalidRequest('targetId is required')
    return value


def parse_name(value, default: str) -> str:
    if value is None:
        return default
    return str(value).strip() or default


class RoomStateMachine:
    """Applies lifecycle events to rooms.

    Every transition runs under the room's lock. Host-only transitions raise
    ``RoomNotFound``/``NotAuthorized``; other transitions on a missing room
    return None and change nothing. Returned dicts are the ack results.
    """

    def __init__(self, store: RoomStore, registry: ConnectionRegistry, gateway,
                 default_duration: float = 30, default_name: str = 'Player',
                 default_mode: Optional[str] = None, prompts=PROMPTS,
                 clock: Callable[[], float] = time.time, rng: Optional[random.Random] = None):
        self.store = store
        self.registry = registry
        self.gateway = gateway
        self.default_duration = default_duration
        self.default_name = default_name
        self.default_mode = default_mode
        self.prompts = prompts
        self.clock = clock
        self.rng = rng or random.Random()

    # ---- membership ----

    def create_room(self, sid: str, name=None) -> dict:
        room = self.store.create()
        try:
            with room.lock:
                self._join(room, sid, name)
        except ConnectionClosed:
            self.store.remove(room.code)
            raise
        logger.info(f"[create_room] code={room.code} sid={sid}")
        return {'code': room.code}

    def join_room(self, sid: str, code, name=None) -> dict:
        code = normalize_code(code)
        if not code:
            raise InvalidRequest('Room code is required')
        while True:
            room = self.store.get_or_create(code)
            with room.lock:
                if self.store.get(code) is not room:
                    # Reaped between lookup and lock
                    continue
                self._join(room, sid, name)
                view = room.to_dict()
                self.gateway.broadcast('room_update', view, room.code)
                break
        logger.info(f"[join_room] code={code} sid={sid} host={room.host_id} players={len(room.players)}")
        return {'ok': True, 'room': view}

    def leave_room(self, sid: str, code) -> None:
        room = self.store.get(normalize_code(code))
        if room is None:
            return
        with room.lock:
            self.gateway.unsubscribe(sid, room.code)
            self.registry.unbind(sid, room.code)
            self._remove(room, sid)

    def disconnect(self, sid: str) -> None:
        for code in self.registry.rooms_for(sid):
            room = self.store.get(code)
            if room is None:
                continue
            with room.lock:
                self._remove(room, sid)
        self.registry.unbind(sid)

    def _join(self, room: Room, sid: str, name) -> None:
        rejoin = sid in room.players
        self.registry.bind(sid, room.code)
        try:
            self.gateway.subscribe(sid, room.code)
        except Exception as exc:
            if not rejoin:
                self.registry.unbind(sid, room.code)
            logger.info(f"[join-aborted] code={room.code} sid={sid} err={exc}")
            raise ConnectionClosed() from exc
        room.add_player(sid, parse_name(name, self.default_name))
        room.touch(self.clock())

    def _remove(self, room: Room, sid: str) -> None:
        was_host = room.host_id == sid
        if not room.remove_player(sid):
            return
        room.touch(self.clock())
        if was_host:
            logger.info(f"[host-migrated] code={room.code} from={sid} to={room.host_id}")
        self.gateway.broadcast('room_update', room.to_dict(), room.code)

    # ---- rounds ----

    def _host_room(self, sid: str, code) -> Room:
        room = self.store.get(normalize_code(code))
        if room is None:
            raise RoomNotFound()
        if room.host_id != sid:
            raise NotAuthorized()
        return room

    def start_round(self, sid: str, code, mode=None, duration_sec=None) -> dict:
        room = self._host_room(sid, code)
        with room.lock:
            if room.host_id != sid:
                raise NotAuthorized()
            now = self.clock()
            room.round += 1
            room.mode = mode or self.default_mode
            room.prompt = pick_prompt(self.rng, self.prompts)
            room.deadline = now + parse_duration(duration_sec, self.default_duration)
            room.reset_round()
            room.touch(now)
            self.gateway.broadcast('round_started', {
                'round': room.round,
                'mode': room.mode,
                'prompt': room.prompt,
                'deadline': room.deadline,
            }, room.code)
            self.gateway.broadcast('room_update', room.to_dict(), room.code)
            logger.info(f"[start_round] code={room.code} round={room.round} mode={room.mode} deadline={room.deadline}")
            return {'ok': True, 'round': room.round, 'deadline': room.deadline}

    def submit_photo(self, sid: str, code, payload) -> Optional[dict]:
        room = self.store.get(normalize_code(code))
        if room is None:
            return None
        with room.lock:
            room.upsert_submission(sid, payload)
            room.touch(self.clock())
            self.gateway.broadcast('submission_update', {'count': len(room.submissions)}, room.code)
        return {'ok': True}

    def vote_best(self, sid: str, code, target_id) -> Optional[dict]:
        room = self.store.get(normalize_code(code))
        if room is None:
            return None
        target_id = parse_target(target_id)
        with room.lock:
            room.votes[sid] = target_id
            room.touch(self.clock())
            self.gateway.broadcast('vote_update', {'count': len(room.votes)}, room.code)
        return {'ok': True}

    def flag_lazy(self, sid: str, code, target_id) -> Optional[dict]:
        room = self.store.get(normalize_code(code))
        if room is None:
            return None
        target_id = parse_target(target_id)
        with room.lock:
            flaggers = room.rejections.setdefault(target_id, set())
            flaggers.add(sid)
            room.touch(self.clock())
            self.gateway.broadcast('rejection_update', {'targetId': target_id, 'count': len(flaggers)}, room.code)
        return {'ok': True}

    def end_round(self, sid: str, code) -> dict:
        room = self._host_room(sid, code)
        with room.lock:
            if room.host_id != sid:
                raise NotAuthorized()
            self._finish_round(room)
        return {'ok': True}

    def expire_round(self, code: str, round_number: int) -> bool:
        """End ``round_number`` when its deadline passes, unless already ended.

        Used by the optional round timer; returns True when the round was ended.
        """
        room = self.store.get(code)
        if room is None:
            return False
        with room.lock:
            if room.round != round_number or room.ended_round == round_number:
                logger.info(f"[expire-skip] code={code} round={round_number} current={room.round} stage={room.stage}")
                return False
            self._finish_round(room)
            return True

    def _finish_round(self, room: Room) -> None:
        result = score_round(RoundSnapshot.from_room(room))
        apply_round_score(room, result)
        room.touch(self.clock())
        self.gateway.broadcast('round_results', {
            'round': room.round,
            'prompt': room.prompt,
            'submissions': [s.to_dict() for s in room.submissions],
            'tally': result.tally,
            'winners': result.winners,
            'rejected': result.rejected,
            'deltas': result.deltas,
            'scores': [{'id': p.id, 'name': p.name, 'score': p.score} for p in room.players.values()],
        }, room.code)
        self.gateway.broadcast('room_update', room.to_dict(), room.code)
        logger.info(f"[end_round] code={room.code} round={room.round} winners={result.winners} rejected={result.rejected}")
