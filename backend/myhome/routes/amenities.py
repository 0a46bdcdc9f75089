"""Amenity and amenity booking endpoints."""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlmodel import Session

from .. import services
from ..auth import get_current_user_id
from ..database import get_session
from ..schemas import AddAmenityRequest, AmenitiesResponse, AmenityOut, UpdateAmenityRequest

router = APIRouter(tags=["amenities"], dependencies=[Depends(get_current_user_id)])
logger = logging.getLogger("myhome.api.amenities")


def _amenity_out(amenity) -> AmenityOut:
    return AmenityOut(
        amenity_id=amenity.amenity_id,
        name=amenity.name,
        description=amenity.description,
        price=amenity.price,
        community_id=amenity.community_id,
    )


@router.get('/amenities/{amenity_id}', response_model=AmenityOut)
def get_amenity_details(amenity_id: str, db: Session = Depends(get_session)):
    amenity = services.AmenityService(db).get_amenity_details(amenity_id)
    if not amenity:
        raise HTTPException(status_code=404, detail='amenity not found')
    return _amenity_out(amenity)


@router.get('/communities/{community_id}/amenities', response_model=List[AmenityOut])
def list_all_amenities(community_id: str, db: Session = Depends(get_session)):
    amenities = services.AmenityService(db).list_all_amenities(community_id)
    return [_amenity_out(a) for a in amenities]


@router.post('/communities/{community_id}/amenities', response_model=AmenitiesResponse)
def add_amenity_to_community(community_id: str, payload: AddAmenityRequest, db: Session = Depends(get_session)):
    created = services.AmenityService(db).create_amenities(
        [a.model_dump() for a in payload.amenities], community_id
    )
    if created is None:
        raise HTTPException(status_code=404, detail='community not found')
    return AmenitiesResponse(amenities=[_amenity_out(a) for a in created])


@router.put('/amenities/{amenity_id}', status_code=204)
def update_amenity(amenity_id: str, payload: UpdateAmenityRequest, db: Session = Depends(get_session)):
    updated = services.AmenityService(db).update_amenity(
        amenity_id, payload.name, payload.description, payload.price, payload.community_id
    )
    if not updated:
        raise HTTPException(status_code=404, detail='amenity or community not found')
    return Response(status_code=204)


@router.delete('/amenities/{amenity_id}', status_code=204)
def delete_amenity(amenity_id: str, db: Session = Depends(get_session)):
    if not services.AmenityService(db).delete_amenity(amenity_id):
        raise HTTPException(status_code=404, detail='amenity not found')
    return Response(status_code=204)


@router.delete('/amenities/{amenity_id}/bookings/{booking_id}', status_code=204)
def delete_booking(amenity_id: str, booking_id: str, db: Session = Depends(get_session)):
    if not services.BookingService(db).delete_booking(amenity_id, booking_id):
        raise HTTPException(status_code=404, detail='booking not found')
    return Response(status_code=204)
