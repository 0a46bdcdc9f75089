import uuid


def test_create_and_read_community(client, community):
    community_id, admin_id, headers = community
    r = client.get(f'/communities/{community_id}', headers=headers)
    assert r.status_code == 200
    assert r.json() == {'communities': [{'communityId': community_id, 'name': 'Green Hill', 'district': 'North'}]}
    listed = client.get('/communities', headers=headers).json()['communities']
    assert community_id in [c['communityId'] for c in listed]
    assert client.get(f'/communities/{uuid.uuid4()}', headers=headers).status_code == 404


def test_create_community_validates_payload(client, signup):
    _, headers = signup()
    r = client.post('/communities', json={'name': 'X', 'district': 'North'}, headers=headers)
    assert r.status_code == 422


def test_admin_routes_are_restricted_to_admins(client, community, signup):
    community_id, admin_id, headers = community
    r = client.get(f'/communities/{community_id}/admins', headers=headers)
    assert r.status_code == 200
    assert r.json() == {'admins': [{'adminId': admin_id}]}

    _, other_headers = signup(name="Outsider")
    assert client.get(f'/communities/{community_id}/admins', headers=other_headers).status_code == 401
    assert client.get(f'/communities/{community_id}/admins').status_code == 401
    r = client.post(f'/communities/{community_id}/admins', json={'admins': ['x']}, headers=other_headers)
    assert r.status_code == 401
    # the guard also answers 401 for unknown communities
    assert client.get(f'/communities/{uuid.uuid4()}/admins', headers=headers).status_code == 401


def test_add_and_remove_admins(client, community, signup):
    community_id, admin_id, headers = community
    new_admin_id, new_headers = signup(name="Second")
    r = client.post(f'/communities/{community_id}/admins', json={'admins': [new_admin_id, 'unknown-user']}, headers=headers)
    assert r.status_code == 201
    assert sorted(r.json()['admins']) == sorted([admin_id, new_admin_id])
    assert client.get(f'/communities/{community_id}/admins', headers=new_headers).status_code == 200

    r = client.delete(f'/communities/{community_id}/admins/{new_admin_id}', headers=headers)
    assert r.status_code == 204
    r = client.delete(f'/communities/{community_id}/admins/{new_admin_id}', headers=headers)
    assert r.status_code == 404
    assert client.get(f'/communities/{community_id}/admins', headers=new_headers).status_code == 401


def test_houses_of_community(client, community):
    community_id, _, headers = community
    r = client.post(f'/communities/{community_id}/houses', json={'houses': [{'name': 'A'}, {'name': 'B'}]}, headers=headers)
    assert r.status_code == 201
    house_ids = r.json()['houses']
    assert len(house_ids) == 2
    r = client.get(f'/communities/{community_id}/houses', headers=headers)
    assert sorted(h['name'] for h in r.json()['houses']) == ['A', 'B']
    assert client.get(f'/communities/{uuid.uuid4()}/houses', headers=headers).status_code == 404

    missing = client.post(f'/communities/{uuid.uuid4()}/houses', json={'houses': [{'name': 'C'}]}, headers=headers)
    assert missing.status_code == 400


def test_remove_house_detaches_members(client, house):
    house_id, community_id, _, headers = house
    r = client.post(f'/houses/{house_id}/members', json={'members': [{'name': 'Ann'}]}, headers=headers)
    member_id = r.json()['members'][0]['memberId']

    assert client.delete(f'/communities/{uuid.uuid4()}/houses/{house_id}', headers=headers).status_code == 404
    assert client.delete(f'/communities/{community_id}/houses/{house_id}', headers=headers).status_code == 204
    assert client.get(f'/houses/{house_id}', headers=headers).status_code == 404
    assert client.delete(f'/communities/{community_id}/houses/{house_id}', headers=headers).status_code == 404
    # the member row survives without a house
    assert client.get(f'/members/{member_id}/payments', headers=headers).status_code == 200


def test_delete_community(client, house):
    house_id, community_id, _, headers = house
    client.post(f'/communities/{community_id}/amenities',
                json={'amenities': [{'name': 'Pool', 'description': 'Outdoor', 'price': '5.00'}]}, headers=headers)
    assert client.delete(f'/communities/{community_id}', headers=headers).status_code == 204
    assert client.get(f'/communities/{community_id}', headers=headers).status_code == 404
    assert client.get(f'/houses/{house_id}', headers=headers).status_code == 404
    assert client.get(f'/communities/{community_id}/amenities', headers=headers).json() == []
    assert client.delete(f'/communities/{community_id}', headers=headers).status_code == 404


def test_admin_routes_allow_cors_preflight(client, community):
    community_id, _, _ = community
    r = client.options(f'/communities/{community_id}/admins', headers={
        'Origin': 'http://localhost:3000',
        'Access-Control-Request-Method': 'GET',
        'Access-Control-Request-Headers': 'Authorization',
    })
    assert r.status_code == 200
    assert 'access-control-allow-origin' in r.headers
    # rejected callers still get CORS headers so browsers can read the 401
    r = client.get(f'/communities/{community_id}/admins', headers={'Origin': 'http://localhost:3000'})
    assert r.status_code == 401
    assert 'access-control-allow-origin' in r.headers
