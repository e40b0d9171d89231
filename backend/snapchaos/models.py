from __future__ import annotations

import random
import string
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Set

STAGE_LOBBY = 'lobby'
STAGE_ACTIVE = 'active'
STAGE_ENDED = 'ended'


def generate_room_code(length: int = 4, exists: Callable[[str], bool] = lambda code: False) -> str:
    """Generate a short room code not already taken according to ``exists``."""
    while True:
        code = ''.join(random.choices(string.ascii_uppercase + string.digits, k=length))
        if not exists(code):
            return code


def normalize_code(code) -> str:
    return str(code or '').strip().upper()


@dataclass
class Player:
    id: str
    name: str
    score: int = 0

    def to_dict(self, host_id: Optional[str] = None):
        return {
            'id': self.id,
            'name': self.name,
            'score': self.score,
            'isHost': self.id == host_id,
        }


@dataclass
class Submission:
    player_id: str
    payload: object

    def to_dict(self):
        return {'id': self.player_id, 'payload': self.payload}


@dataclass
class Room:
    code: str
    host_id: Optional[str] = None
    # Join order matters: host migration picks the first remaining player.
    players: Dict[str, Player] = field(default_factory=dict)
    round: int = 0
    mode: Optional[str] = None
    prompt: Optional[str] = None
    deadline: Optional[float] = None
    submissions: List[Submission] = field(default_factory=list)
    votes: Dict[str, str] = field(default_factory=dict)
    rejections: Dict[str, Set[str]] = field(default_factory=dict)
    ended_round: int = 0
    history: List[dict] = field(default_factory=list)
    last_active: float = field(default_factory=time.time)
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False, compare=False)

    @property
    def stage(self) -> str:
        if self.round == 0:
            return STAGE_LOBBY
        if self.ended_round == self.round:
            return STAGE_ENDED
        return STAGE_ACTIVE

    def add_player(self, player_id: str, name: str) -> Player:
        player = self.players.get(player_id)
        if player:
            # Same connection joining again keeps its score and position
            player.name = name
        else:
            player = Player(id=player_id, name=name)
            self.players[player_id] = player
        if self.host_id is None:
            self.host_id = player_id
        return player

    def remove_player(self, player_id: str) -> bool:
        """Remove a player; migrate host to the earliest remaining joiner.

        Returns False if the player was not in the room.
        """
        if self.players.pop(player_id, None) is None:
            return False
        if self.host_id == player_id:
            self.host_id = next(iter(self.players), None)
        return True

    def upsert_submission(self, player_id: str, payload) -> None:
        for sub in self.submissions:
            if sub.player_id == player_id:
                sub.payload = payload
                return
        self.submissions.append(Submission(player_id=player_id, payload=payload))

    def reset_round(self) -> None:
        self.submissions = []
        self.votes = {}
        self.rejections = {}

    def touch(self, now: Optional[float] = None) -> None:
        self.last_active = time.time() if now is None else now

    def to_dict(self):
        """Public room view broadcast as ``room_update``."""
        return {
            'code': self.code,
            'hostId': self.host_id,
            'players': [p.to_dict(self.host_id) for p in self.players.values()],
            'mode': self.mode,
            'round': self.round,
            'started': self.round > 0,
            'stage': self.stage,
        }

    def to_state_dict(self):
        payload = self.to_dict()
        payload.update({
            'prompt': self.prompt,
            'deadline': self.deadline,
            'submissionCount': len(self.submissions),
            'voteCount': len(self.votes),
            'rejections': {target: len(flaggers) for target, flaggers in self.rejections.items()},
            'history': list(self.history),
        })
        return payload
