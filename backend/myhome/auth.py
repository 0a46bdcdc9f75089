"""Authentication helpers and FastAPI security dependencies.

This module holds the JWT encoder/decoders, the dependency
`get_current_user_id` that validates the bearer token of a request, and
the community admin check applied to `/communities/<id>/admins` paths.

Token verification raises HTTPExceptions on failure so it can be used
directly inside route dependencies.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

import jwt
from fastapi import HTTPException, Request
from sqlmodel import Session

from .config import settings
from . import repositories

logger = logging.getLogger("myhome.auth")

JWT_ALGORITHM = "HS512"
UUID_PATTERN = r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"
COMMUNITY_ADMINS_PATH = re.compile(r"/communities/" + UUID_PATTERN + r"/admins")


@dataclass(frozen=True)
class AppJwt:
    user_id: Optional[str]
    expiration: datetime


class SecretJwtEncoderDecoder:
    """HS512-signed tokens carrying the user id as `sub` and an `exp` claim."""

    def encode(self, app_jwt: AppJwt, secret: str) -> str:
        payload = {"sub": app_jwt.user_id, "exp": int(app_jwt.expiration.timestamp())}
        return jwt.encode(payload, secret, algorithm=JWT_ALGORITHM)

    def decode(self, token: str, secret: str) -> AppJwt:
        claims = jwt.decode(token, secret, algorithms=[JWT_ALGORITHM])
        return AppJwt(
            user_id=claims.get("sub"),
            expiration=datetime.fromtimestamp(claims["exp"], tz=timezone.utc),
        )


class PlainJwtEncoderDecoder:
    """Unsigned `<user_id>+<expiration>` tokens for local testing only."""

    SEPARATOR = "+"

    def encode(self, app_jwt: AppJwt, secret: str) -> str:
        return f"{app_jwt.user_id}{self.SEPARATOR}{app_jwt.expiration.isoformat()}"

    def decode(self, token: str, secret: str) -> AppJwt:
        user_id, sep, expiration = token.partition(self.SEPARATOR)
        if not sep:
            raise ValueError("malformed token")
        return AppJwt(user_id=user_id, expiration=datetime.fromisoformat(expiration))


def get_jwt_codec():
    """Return the encoder/decoder selected by the `JWT_CODEC` setting."""
    if settings.JWT_CODEC == "plain":
        return PlainJwtEncoderDecoder()
    return SecretJwtEncoderDecoder()


def decode_token(token: str) -> AppJwt:
    """Decode and verify a token.

    Returns the decoded `AppJwt` on success or raises an HTTPException
    with status 401 on failure.
    """
    try:
        return get_jwt_codec().decode(token, settings.JWT_SECRET)
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail='token expired')
    except (jwt.InvalidTokenError, ValueError):
        raise HTTPException(status_code=401, detail='invalid token')


def user_id_from_headers(headers) -> Optional[str]:
    """Return the user id carried by the auth header, or None when absent.

    A present but invalid token raises HTTPException(401).
    """
    auth_header = headers.get(settings.AUTH_HEADER_NAME)
    if not auth_header or not auth_header.startswith(settings.AUTH_HEADER_PREFIX):
        return None
    token = auth_header[len(settings.AUTH_HEADER_PREFIX):]
    return decode_token(token).user_id


def get_current_user_id(request: Request) -> str:
    """FastAPI dependency that returns the authenticated user's id.

    Raises HTTPException(401) when the header is missing, the token does
    not verify, or it carries no subject.
    """
    user_id = user_id_from_headers(request.headers)
    if not user_id:
        raise HTTPException(status_code=401, detail='not authenticated')
    request.state.user_id = user_id
    return user_id


def is_community_admin_path(path: str) -> bool:
    return COMMUNITY_ADMINS_PATH.search(path) is not None


def is_user_community_admin(session: Session, path: str, user_id: Optional[str]) -> bool:
    """Check that `user_id` administers the community named in `path`."""
    if not user_id:
        return False
    community_id = path.split("/")[2]
    if not repositories.CommunityRepository(session).exists(community_id):
        return False
    admins = repositories.UserRepository(session).list_admins_of_community(community_id)
    return any(admin.user_id == user_id for admin in admins)
