from snapchaos.models import Room
from snapchaos.services.rooms.scoring import RoundSnapshot, apply_round_score, score_round


def snapshot(players, submitters=(), votes=None, rejections=None):
    return RoundSnapshot(
        player_ids=tuple(players),
        submitter_ids=frozenset(submitters),
        votes=dict(votes or {}),
        rejections={t: frozenset(f) for t, f in (rejections or {}).items()},
    )


def test_participation_rewards_submitters_and_penalises_others():
    result = score_round(snapshot(['p1', 'p2', 'p3'], submitters=['p1', 'p2']))
    assert result.deltas == {'p1': 1, 'p2': 1, 'p3': -2}
    assert result.winners == []
    assert result.tally == {}


def test_zero_votes_has_no_winners():
    result = score_round(snapshot(['a', 'b'], submitters=['a', 'b']))
    assert result.winners == []
    assert result.deltas == {'a': 1, 'b': 1}


def test_vote_tie_at_maximum_rewards_every_tied_target():
    votes = {'a': 'b', 'b': 'a', 'c': 'a', 'd': 'b'}
    result = score_round(snapshot(['a', 'b', 'c', 'd'], submitters=['a', 'b', 'c', 'd'], votes=votes))
    assert result.tally == {'b': 2, 'a': 2}
    assert sorted(result.winners) == ['a', 'b']
    assert result.deltas == {'a': 3, 'b': 3, 'c': 1, 'd': 1}


def test_single_plurality_winner():
    votes = {'a': 'c', 'b': 'c', 'c': 'a'}
    result = score_round(snapshot(['a', 'b', 'c'], submitters=['a', 'b', 'c'], votes=votes))
    assert result.winners == ['c']
    assert result.deltas['c'] == 3
    assert result.deltas['a'] == 1


def test_majority_flag_threshold_with_four_players():
    players = ['a', 'b', 'c', 'd']
    three = score_round(snapshot(players, submitters=players, rejections={'d': ['a', 'b', 'c']}))
    assert three.majority == 3
    assert three.rejected == ['d']
    assert three.deltas['d'] == -1

    two = score_round(snapshot(players, submitters=players, rejections={'d': ['a', 'b']}))
    assert two.rejected == []
    assert two.deltas['d'] == 1


def test_majority_uses_player_count_not_submitters():
    # 5 players, only 1 submitted; majority is still 3
    players = ['a', 'b', 'c', 'd', 'e']
    result = score_round(snapshot(players, submitters=['a'], rejections={'a': ['b', 'c']}))
    assert result.majority == 3
    assert result.rejected == []


def test_flagged_winner_gets_both_deltas():
    players = ['a', 'b', 'c']
    result = score_round(snapshot(
        players,
        submitters=players,
        votes={'b': 'a', 'c': 'a'},
        rejections={'a': ['b', 'c']},
    ))
    assert result.rejected == ['a']
    assert result.winners == ['a']
    # +1 participation, -2 flag, +2 vote
    assert result.deltas['a'] == 1


def test_non_submitter_can_still_win_vote():
    result = score_round(snapshot(['a', 'b'], submitters=['a'], votes={'a': 'b'}))
    assert result.winners == ['b']
    assert result.deltas['b'] == 0


def test_votes_for_absent_players_count_but_award_nothing():
    result = score_round(snapshot(['a'], submitters=['a'], votes={'a': 'ghost'}))
    assert result.winners == ['ghost']
    assert 'ghost' not in result.deltas


def test_score_is_deterministic_for_same_snapshot():
    snap = snapshot(['a', 'b', 'c'], submitters=['a'], votes={'a': 'b', 'c': 'b'}, rejections={'c': ['a', 'b']})
    first = score_round(snap)
    second = score_round(snap)
    assert first.deltas == second.deltas
    assert first.tally == second.tally
    assert first.winners == second.winners


def test_apply_round_score_updates_players_and_history():
    room = Room(code='AB12')
    room.add_player('p1', 'Ann')
    room.add_player('p2', 'Ben')
    room.round = 1
    room.prompt = 'A sign with a typo'
    room.upsert_submission('p1', 'img-1')
    room.votes['p2'] = 'p1'

    result = score_round(RoundSnapshot.from_room(room))
    apply_round_score(room, result)

    assert room.players['p1'].score == 3
    assert room.players['p2'].score == -2
    assert room.stage == 'ended'
    assert room.history[-1]['round'] == 1
    assert room.history[-1]['winners'] == ['p1']
