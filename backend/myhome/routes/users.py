"""User registration, lookup, password and email-confirmation endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlmodel import Session

from .. import services
from ..auth import get_current_user_id
from ..database import get_session
from ..repositories import PageRequest
from ..schemas import (
    CreateUserRequest,
    CreateUserResponse,
    ForgotPasswordRequest,
    GetUserDetailsResponse,
    HouseMemberOut,
    HouseMembersResponse,
    PasswordActionType,
    UserOut,
)
from . import get_page_request

router = APIRouter(tags=["users"])
logger = logging.getLogger("myhome.api.users")


def _user_out(user) -> UserOut:
    return UserOut(
        user_id=user.user_id,
        name=user.name,
        email=user.email,
        community_ids=[c.community_id for c in user.communities],
    )


@router.post('/users', status_code=201, response_model=CreateUserResponse)
def sign_up(payload: CreateUserRequest, db: Session = Depends(get_session)):
    """Register a new user; 409 when the email is already taken."""
    logger.debug("Received SignUp request")
    user = services.UserService(db).create_user(payload.name, payload.email, payload.password)
    if not user:
        raise HTTPException(status_code=409, detail='user already exists')
    return CreateUserResponse(user_id=user.user_id, name=user.name, email=user.email)


@router.get('/users', response_model=GetUserDetailsResponse, dependencies=[Depends(get_current_user_id)])
def list_all_users(pageable: PageRequest = Depends(get_page_request), db: Session = Depends(get_session)):
    users = services.UserService(db).list_all(pageable)
    return GetUserDetailsResponse(users=[_user_out(u) for u in users])


@router.get('/users/{user_id}', response_model=UserOut, dependencies=[Depends(get_current_user_id)])
def get_user_details(user_id: str, db: Session = Depends(get_session)):
    user = services.UserService(db).get_user_details(user_id)
    if not user:
        raise HTTPException(status_code=404, detail='user not found')
    return _user_out(user)


@router.post('/users/password')
def users_password(action: PasswordActionType, payload: ForgotPasswordRequest, db: Session = Depends(get_session)):
    """Request a reset code (`FORGOT`) or set a new password (`RESET`).

    FORGOT always answers 200 so callers cannot probe for registered
    emails; RESET answers 400 when the token is not valid.
    """
    svc = services.UserService(db)
    if action == PasswordActionType.FORGOT:
        svc.request_reset_password(payload.email)
        return Response(status_code=200)
    if svc.reset_password(payload.email, payload.token, payload.new_password):
        return Response(status_code=200)
    return Response(status_code=400)


@router.get('/users/{user_id}/housemates', response_model=HouseMembersResponse, dependencies=[Depends(get_current_user_id)])
def list_all_housemates(user_id: str, pageable: PageRequest = Depends(get_page_request), db: Session = Depends(get_session)):
    """Members of every house in the communities `user_id` administers."""
    members = services.HouseService(db).list_house_members_for_houses_of_user(user_id, pageable)
    return HouseMembersResponse(members=[HouseMemberOut(member_id=m.member_id, name=m.name) for m in members])


# declared before the token route so "resend" is not taken for a token
@router.get('/users/{user_id}/email-confirm/resend')
def resend_confirm_email_mail(user_id: str, db: Session = Depends(get_session)):
    if services.UserService(db).resend_email_confirm(user_id):
        return Response(status_code=200)
    return Response(status_code=400)


@router.get('/users/{user_id}/email-confirm/{email_confirm_token}')
def confirm_email(user_id: str, email_confirm_token: str, db: Session = Depends(get_session)):
    if services.UserService(db).confirm_email(user_id, email_confirm_token):
        return Response(status_code=200)
    return Response(status_code=400)
