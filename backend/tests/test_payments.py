from decimal import Decimal


def _payment_body(admin_id, member_id, **overrides):
    body = {
        'charge': '100.00',
        'type': 'maintenance',
        'description': 'Monthly fee',
        'recurring': True,
        'dueDate': '2026-12-01',
        'adminId': admin_id,
        'memberId': member_id,
    }
    body.update(overrides)
    return body


def _member(client, house):
    house_id, _, _, headers = house
    r = client.post(f'/houses/{house_id}/members', json={'members': [{'name': 'Payer'}]}, headers=headers)
    return r.json()['members'][0]['memberId']


def test_schedule_and_read_payment(client, house):
    _, _, admin_id, headers = house
    member_id = _member(client, house)
    r = client.post('/payments', json=_payment_body(admin_id, member_id), headers=headers)
    assert r.status_code == 201
    payment = r.json()
    assert payment['adminId'] == admin_id
    assert payment['memberId'] == member_id
    assert payment['dueDate'] == '2026-12-01'
    assert payment['recurring'] is True
    assert Decimal(payment['charge']) == Decimal('100')

    r = client.get(f"/payments/{payment['paymentId']}", headers=headers)
    assert r.status_code == 200
    assert r.json() == payment
    assert client.get('/payments/missing', headers=headers).status_code == 404

    r = client.get(f'/members/{member_id}/payments', headers=headers)
    assert [p['paymentId'] for p in r.json()['payments']] == [payment['paymentId']]
    assert client.get('/members/missing/payments', headers=headers).status_code == 404


def test_schedule_payment_requires_existing_admin_of_member_house(client, house, signup):
    _, _, admin_id, headers = house
    member_id = _member(client, house)
    assert client.post('/payments', json=_payment_body(admin_id, 'missing'), headers=headers).status_code == 404
    assert client.post('/payments', json=_payment_body('missing', member_id), headers=headers).status_code == 404
    outsider_id, _ = signup(name="Outsider")
    assert client.post('/payments', json=_payment_body(outsider_id, member_id), headers=headers).status_code == 404


def test_admin_payments_are_paged(client, house):
    _, community_id, admin_id, headers = house
    member_id = _member(client, house)
    for i in range(3):
        client.post('/payments', json=_payment_body(admin_id, member_id, description=f'fee {i}'), headers=headers)

    r = client.get(f'/communities/{community_id}/admins/{admin_id}/payments',
                   params={'page': 1, 'size': 2}, headers=headers)
    assert r.status_code == 200
    body = r.json()
    assert [p['description'] for p in body['payments']] == ['fee 2']
    assert body['pageInfo'] == {'currentPage': 1, 'pageLimit': 2, 'totalPages': 2, 'totalElements': 3}

    r = client.get(f'/communities/{community_id}/admins/not-an-admin/payments', headers=headers)
    assert r.status_code == 404
