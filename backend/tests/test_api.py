def test_liveness(client):
    res = client.get('/')
    assert res.status_code == 200
    assert res.get_data(as_text=True) == 'running'
    assert res.mimetype == 'text/plain'


def test_room_state_missing(client):
    res = client.get('/api/rooms/ZZZZ')
    assert res.status_code == 404
    assert res.get_json()['error'] == 'Room not found'


def test_room_state_after_round(app_machine, client):
    machine = app_machine
    machine.join_room('p1', 'AB12', 'Ann')
    machine.join_room('p2', 'AB12', 'Ben')
    machine.start_round('p1', 'AB12', 'classic', 20)
    machine.submit_photo('p1', 'AB12', 'img')
    machine.vote_best('p2', 'AB12', 'p1')

    state = client.get('/api/rooms/ab12').get_json()
    assert state['code'] == 'AB12'
    assert state['hostId'] == 'p1'
    assert state['stage'] == 'active'
    assert state['submissionCount'] == 1
    assert state['voteCount'] == 1
    assert state['history'] == []

    machine.end_round('p1', 'AB12')
    state = client.get('/api/rooms/AB12').get_json()
    assert state['stage'] == 'ended'
    assert state['history'][0]['winners'] == ['p1']
    assert {p['id']: p['score'] for p in state['players']} == {'p1': 3, 'p2': -2}


def test_room_state_does_not_create_rooms(flask_app, client):
    client.get('/api/rooms/NEW1')
    assert 'NEW1' not in flask_app.extensions['snapchaos'].store


def test_room_state_after_vote_without_target(make_sio_client, client):
    host = make_sio_client()
    guest = make_sio_client()
    third = make_sio_client()
    code = host.emit('create_room', {'name': 'Ann'}, callback=True)[1]['code']
    guest.emit('join_room', {'code': code, 'name': 'Ben'}, callback=True)
    third.emit('join_room', {'code': code, 'name': 'Cy'}, callback=True)
    host.emit('start_round', {'code': code}, callback=True)

    err, result = guest.emit('vote_best', {'code': code}, callback=True)
    assert err == {'message': 'targetId is required'}
    assert result is None
    assert host.emit('end_round', {'code': code}, callback=True) == [None, {'ok': True}]

    res = client.get(f'/api/rooms/{code}')
    assert res.status_code == 200
    assert res.get_json()['history'][0]['tally'] == {}
