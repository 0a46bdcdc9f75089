"""Community endpoints: communities, their admins and houses.

Every route requires a bearer token. Paths under
`/communities/{id}/admins` are additionally restricted to admins of that
community by the middleware registered in `main`.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlmodel import Session

from .. import services
from ..auth import get_current_user_id
from ..database import get_session
from ..repositories import PageRequest
from ..schemas import (
    AddCommunityAdminRequest,
    AddCommunityAdminResponse,
    AddCommunityHouseRequest,
    AddCommunityHouseResponse,
    CommunityAdminOut,
    CommunityOut,
    CreateCommunityRequest,
    CreateCommunityResponse,
    GetCommunityDetailsResponse,
    GetHouseDetailsResponse,
    HouseOut,
    ListCommunityAdminsResponse,
)
from . import get_page_request

router = APIRouter(tags=["communities"], dependencies=[Depends(get_current_user_id)])
logger = logging.getLogger("myhome.api.communities")


def _community_out(community) -> CommunityOut:
    return CommunityOut(community_id=community.community_id, name=community.name, district=community.district)


@router.post('/communities', status_code=201, response_model=CreateCommunityResponse)
def create_community(
    payload: CreateCommunityRequest,
    db: Session = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    """Create a community; the caller becomes its first admin."""
    logger.debug("Received request to create community")
    community = services.CommunityService(db).create_community(payload.name, payload.district, user_id)
    return CreateCommunityResponse(community_id=community.community_id)


@router.get('/communities', response_model=GetCommunityDetailsResponse)
def list_all_communities(pageable: PageRequest = Depends(get_page_request), db: Session = Depends(get_session)):
    communities = services.CommunityService(db).list_all(pageable)
    return GetCommunityDetailsResponse(communities=[_community_out(c) for c in communities])


@router.get('/communities/{community_id}', response_model=GetCommunityDetailsResponse)
def list_community_details(community_id: str, db: Session = Depends(get_session)):
    community = services.CommunityService(db).get_community_details(community_id)
    if not community:
        raise HTTPException(status_code=404, detail='community not found')
    return GetCommunityDetailsResponse(communities=[_community_out(community)])


@router.get('/communities/{community_id}/admins', response_model=ListCommunityAdminsResponse)
def list_community_admins(community_id: str, pageable: PageRequest = Depends(get_page_request), db: Session = Depends(get_session)):
    admins = services.CommunityService(db).find_community_admins(community_id, pageable)
    if admins is None:
        raise HTTPException(status_code=404, detail='community not found')
    return ListCommunityAdminsResponse(admins=[CommunityAdminOut(admin_id=a.user_id) for a in admins])


@router.get('/communities/{community_id}/houses', response_model=GetHouseDetailsResponse)
def list_community_houses(community_id: str, pageable: PageRequest = Depends(get_page_request), db: Session = Depends(get_session)):
    houses = services.CommunityService(db).find_community_houses(community_id, pageable)
    if houses is None:
        raise HTTPException(status_code=404, detail='community not found')
    return GetHouseDetailsResponse(houses=[HouseOut(house_id=h.house_id, name=h.name) for h in houses])


@router.post('/communities/{community_id}/admins', status_code=201, response_model=AddCommunityAdminResponse)
def add_community_admins(community_id: str, payload: AddCommunityAdminRequest, db: Session = Depends(get_session)):
    """Add users as admins; responds with the complete admin id list."""
    community = services.CommunityService(db).add_admins_to_community(community_id, payload.admins)
    if not community:
        raise HTTPException(status_code=404, detail='community not found')
    return AddCommunityAdminResponse(admins=[a.user_id for a in community.admins])


@router.post('/communities/{community_id}/houses', status_code=201, response_model=AddCommunityHouseResponse)
def add_community_houses(community_id: str, payload: AddCommunityHouseRequest, db: Session = Depends(get_session)):
    house_ids = services.CommunityService(db).add_houses_to_community(community_id, [h.name for h in payload.houses])
    if not house_ids:
        raise HTTPException(status_code=400, detail='no houses added')
    return AddCommunityHouseResponse(houses=house_ids)


@router.delete('/communities/{community_id}/houses/{house_id}', status_code=204)
def remove_community_house(community_id: str, house_id: str, db: Session = Depends(get_session)):
    svc = services.CommunityService(db)
    community = svc.get_community_details(community_id)
    if not svc.remove_house_from_community(community, house_id):
        raise HTTPException(status_code=404, detail='community or house not found')
    return Response(status_code=204)


@router.delete('/communities/{community_id}/admins/{admin_id}', status_code=204)
def remove_admin_from_community(community_id: str, admin_id: str, db: Session = Depends(get_session)):
    if not services.CommunityService(db).remove_admin_from_community(community_id, admin_id):
        raise HTTPException(status_code=404, detail='community or admin not found')
    return Response(status_code=204)


@router.delete('/communities/{community_id}', status_code=204)
def delete_community(community_id: str, db: Session = Depends(get_session)):
    if not services.CommunityService(db).delete_community(community_id):
        raise HTTPException(status_code=404, detail='community not found')
    return Response(status_code=204)
