def test_list_and_get_houses(client, house):
    house_id, _, _, headers = house
    r = client.get(f'/houses/{house_id}', headers=headers)
    assert r.status_code == 200
    assert r.json() == {'houses': [{'houseId': house_id, 'name': 'House 1'}]}
    all_ids = [h['houseId'] for h in client.get('/houses', params={'size': 1000}, headers=headers).json()['houses']]
    assert house_id in all_ids
    assert client.get('/houses/missing', headers=headers).status_code == 404


def test_paging_parameters(client, community):
    community_id, _, headers = community
    client.post(f'/communities/{community_id}/houses',
                json={'houses': [{'name': f'H{i}'} for i in range(5)]}, headers=headers)
    first = client.get(f'/communities/{community_id}/houses', params={'page': 0, 'size': 2}, headers=headers)
    second = client.get(f'/communities/{community_id}/houses', params={'page': 2, 'size': 2}, headers=headers)
    assert [h['name'] for h in first.json()['houses']] == ['H0', 'H1']
    assert [h['name'] for h in second.json()['houses']] == ['H4']
    assert client.get('/houses', params={'page': -1}, headers=headers).status_code == 422


def test_members_lifecycle(client, house):
    house_id, _, _, headers = house
    assert client.get(f'/houses/{house_id}/members', headers=headers).json() == {'members': []}

    r = client.post(f'/houses/{house_id}/members', json={'members': [{'name': 'Ann'}, {'name': 'Ben'}]}, headers=headers)
    assert r.status_code == 201
    members = r.json()['members']
    assert [m['name'] for m in members] == ['Ann', 'Ben']

    listed = client.get(f'/houses/{house_id}/members', headers=headers).json()['members']
    assert {m['memberId'] for m in listed} == {m['memberId'] for m in members}

    ann = members[0]['memberId']
    assert client.delete(f'/houses/{house_id}/members/{ann}', headers=headers).status_code == 204
    assert client.delete(f'/houses/{house_id}/members/{ann}', headers=headers).status_code == 404
    listed = client.get(f'/houses/{house_id}/members', headers=headers).json()['members']
    assert [m['name'] for m in listed] == ['Ben']


def test_add_members_to_missing_house(client, signup):
    _, headers = signup()
    r = client.post('/houses/missing/members', json={'members': [{'name': 'Ann'}]}, headers=headers)
    assert r.status_code == 404
    assert client.delete('/houses/missing/members/x', headers=headers).status_code == 404
