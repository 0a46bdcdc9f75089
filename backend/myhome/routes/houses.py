"""House and house member endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlmodel import Session

from .. import services
from ..auth import get_current_user_id
from ..database import get_session
from ..repositories import PageRequest
from ..schemas import (
    AddHouseMemberRequest,
    GetHouseDetailsResponse,
    HouseMemberOut,
    HouseMembersResponse,
    HouseOut,
)
from . import get_page_request

router = APIRouter(tags=["houses"], dependencies=[Depends(get_current_user_id)])


def _members_response(members) -> HouseMembersResponse:
    return HouseMembersResponse(members=[HouseMemberOut(member_id=m.member_id, name=m.name) for m in members])


@router.get('/houses', response_model=GetHouseDetailsResponse)
def list_all_houses(pageable: PageRequest = Depends(get_page_request), db: Session = Depends(get_session)):
    houses = services.HouseService(db).list_all_houses(pageable)
    return GetHouseDetailsResponse(houses=[HouseOut(house_id=h.house_id, name=h.name) for h in houses])


@router.get('/houses/{house_id}', response_model=GetHouseDetailsResponse)
def get_house_details(house_id: str, db: Session = Depends(get_session)):
    house = services.HouseService(db).get_house_details(house_id)
    if not house:
        raise HTTPException(status_code=404, detail='house not found')
    return GetHouseDetailsResponse(houses=[HouseOut(house_id=house.house_id, name=house.name)])


@router.get('/houses/{house_id}/members', response_model=HouseMembersResponse)
def list_all_members_of_house(house_id: str, pageable: PageRequest = Depends(get_page_request), db: Session = Depends(get_session)):
    return _members_response(services.HouseService(db).get_house_members(house_id, pageable))


@router.post('/houses/{house_id}/members', status_code=201, response_model=HouseMembersResponse)
def add_house_members(house_id: str, payload: AddHouseMemberRequest, db: Session = Depends(get_session)):
    """Create members in the house; 404 when nothing could be added."""
    members = services.HouseService(db).add_house_members(house_id, [m.name for m in payload.members])
    if payload.members and not members:
        raise HTTPException(status_code=404, detail='house not found')
    return _members_response(members)


@router.delete('/houses/{house_id}/members/{member_id}', status_code=204)
def delete_house_member(house_id: str, member_id: str, db: Session = Depends(get_session)):
    if not services.HouseService(db).delete_member_from_house(house_id, member_id):
        raise HTTPException(status_code=404, detail='house or member not found')
    return Response(status_code=204)
