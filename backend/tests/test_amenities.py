from datetime import datetime, timezone
from decimal import Decimal
import uuid

from sqlmodel import Session

from myhome import models
from myhome.database import engine


def _create_amenity(client, community_id, headers, name='Gym'):
    r = client.post(f'/communities/{community_id}/amenities',
                    json={'amenities': [{'name': name, 'description': 'Indoor', 'price': '12.50'}]},
                    headers=headers)
    assert r.status_code == 200
    return r.json()['amenities'][0]


def test_create_get_and_list_amenities(client, community):
    community_id, _, headers = community
    created = _create_amenity(client, community_id, headers)
    assert created['communityId'] == community_id
    assert Decimal(created['price']) == Decimal('12.50')

    r = client.get(f"/amenities/{created['amenityId']}", headers=headers)
    assert r.status_code == 200
    assert r.json()['name'] == 'Gym'
    listed = client.get(f'/communities/{community_id}/amenities', headers=headers).json()
    assert [a['amenityId'] for a in listed] == [created['amenityId']]

    assert client.get('/amenities/missing', headers=headers).status_code == 404
    assert client.get(f'/communities/{uuid.uuid4()}/amenities', headers=headers).json() == []
    r = client.post(f'/communities/{uuid.uuid4()}/amenities',
                    json={'amenities': [{'name': 'X', 'description': 'Y'}]}, headers=headers)
    assert r.status_code == 404


def test_update_amenity(client, community):
    community_id, _, headers = community
    amenity_id = _create_amenity(client, community_id, headers)['amenityId']
    body = {'name': 'Spa', 'description': 'Relax', 'price': '30', 'communityId': community_id}
    assert client.put(f'/amenities/{amenity_id}', json=body, headers=headers).status_code == 204
    r = client.get(f'/amenities/{amenity_id}', headers=headers).json()
    assert (r['name'], r['description'], Decimal(r['price'])) == ('Spa', 'Relax', Decimal('30'))

    assert client.put('/amenities/missing', json=body, headers=headers).status_code == 404
    body['communityId'] = str(uuid.uuid4())
    assert client.put(f'/amenities/{amenity_id}', json=body, headers=headers).status_code == 404


def test_delete_amenity(client, community):
    community_id, _, headers = community
    amenity_id = _create_amenity(client, community_id, headers)['amenityId']
    assert client.delete(f'/amenities/{amenity_id}', headers=headers).status_code == 204
    assert client.get(f'/amenities/{amenity_id}', headers=headers).status_code == 404
    assert client.delete(f'/amenities/{amenity_id}', headers=headers).status_code == 404


def test_delete_booking_checks_amenity(client, community):
    community_id, admin_id, headers = community
    gym = _create_amenity(client, community_id, headers, 'Gym')['amenityId']
    pool = _create_amenity(client, community_id, headers, 'Pool')['amenityId']
    booking_id = str(uuid.uuid4())
    with Session(engine) as s:
        s.add(models.AmenityBookingItem(
            amenity_booking_item_id=booking_id,
            amenity_id=gym,
            booking_start_date=datetime(2026, 5, 1, 10, 0, tzinfo=timezone.utc),
            booking_user_id=admin_id,
        ))
        s.commit()

    assert client.delete(f'/amenities/{pool}/bookings/{booking_id}', headers=headers).status_code == 404
    assert client.delete(f'/amenities/{gym}/bookings/{booking_id}', headers=headers).status_code == 204
    assert client.delete(f'/amenities/{gym}/bookings/{booking_id}', headers=headers).status_code == 404
