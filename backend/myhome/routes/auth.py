"""Login endpoint."""

from fastapi import APIRouter, Depends, Response
from sqlmodel import Session

from .. import services
from ..database import get_session
from ..schemas import LoginRequest

router = APIRouter(tags=["auth"])


@router.post('/auth/login')
def login(payload: LoginRequest, db: Session = Depends(get_session)):
    """Authenticate a user and return the JWT in response headers.

    The body is empty; the `userId` and `token` headers carry the result.
    Unknown emails and wrong passwords both answer 401.
    """
    auth_data = services.AuthService(db).login(payload.email, payload.password)
    return Response(status_code=200, headers={"userId": auth_data.user_id, "token": auth_data.jwt_token})
