from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Mapping, Tuple

from snapchaos.models import Room

PARTICIPATION_POINTS = 1
MISSING_SUBMISSION_PENALTY = -2
MAJORITY_FLAG_PENALTY = -2
BEST_VOTE_POINTS = 2


@dataclass(frozen=True)
class RoundSnapshot:
    player_ids: Tuple[str, ...]
    submitter_ids: FrozenSet[str]
    votes: Mapping[str, str]
    rejections: Mapping[str, FrozenSet[str]]

    @classmethod
    def from_room(cls, room: Room) -> 'RoundSnapshot':
        return cls(
            player_ids=tuple(room.players),
            submitter_ids=frozenset(s.player_id for s in room.submissions),
            votes=dict(room.votes),
            rejections={target: frozenset(flaggers) for target, flaggers in room.rejections.items()},
        )


@dataclass
class RoundScore:
    deltas: Dict[str, int] = field(default_factory=dict)
    tally: Dict[str, int] = field(default_factory=dict)
    winners: List[str] = field(default_factory=list)
    rejected: List[str] = field(default_factory=list)
    majority: int = 1


def score_round(snapshot: RoundSnapshot) -> RoundScore:
    """Compute score deltas for the round captured in ``snapshot``.

    Three independent, additive rules:

    - every current player gets +1 for submitting, -2 otherwise
    - a target flagged by at least floor(players / 2) + 1 distinct players
      gets -2
    - every target with the highest non-zero vote count gets +2 (ties share)

    Deltas are only produced for current players. Pure: no room mutation.
    """
    players = set(snapshot.player_ids)
    deltas = {
        pid: PARTICIPATION_POINTS if pid in snapshot.submitter_ids else MISSING_SUBMISSION_PENALTY
        for pid in snapshot.player_ids
    }

    majority = len(snapshot.player_ids) // 2 + 1
    rejected = [t for t, flaggers in snapshot.rejections.items() if len(flaggers) >= majority]
    for target in rejected:
        if target in players:
            deltas[target] += MAJORITY_FLAG_PENALTY

    tally = dict(Counter(snapshot.votes.values()))
    max_votes = max(tally.values(), default=0)
    winners = [t for t, count in tally.items() if count == max_votes and count > 0]
    for target in winners:
        if target in players:
            deltas[target] += BEST_VOTE_POINTS

    return RoundScore(deltas=deltas, tally=tally, winners=winners, rejected=rejected, majority=majority)


def apply_round_score(room: Room, result: RoundScore) -> None:
    """Apply deltas to the room's players and record the round in history."""
    for pid, delta in result.deltas.items():
        player = room.players.get(pid)
        if player:
            player.score += delta
    room.ended_round = room.round
    room.history.append({
        'round': room.round,
        'mode': room.mode,
        'prompt': room.prompt,
        'tally': dict(result.tally),
        'winners': list(result.winners),
        'rejected': list(result.rejected),
        'deltas': dict(result.deltas),
    })
