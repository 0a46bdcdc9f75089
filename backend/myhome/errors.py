"""Domain exceptions and their FastAPI exception handlers.

Services raise these exceptions for failures that are not simply "entity
missing" lookups; `setup_exception_handlers` maps them to HTTP responses.
Routes keep raising `HTTPException` directly for ordinary status mapping.
"""

import logging
import uuid

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger("myhome.errors")


class MyHomeError(Exception):
    """Base class for application errors."""


class AuthenticationError(MyHomeError):
    """Login failed; always reported as 401 without further detail."""


class UserNotFoundError(AuthenticationError):
    def __init__(self, email: str):
        super().__init__(f"user not found: {email}")
        logger.info("User not found - email: %s", email)


class CredentialsIncorrectError(AuthenticationError):
    def __init__(self, user_id: str):
        super().__init__(f"credentials incorrect for user: {user_id}")
        logger.info("Credentials are incorrect for userId: %s", user_id)


class EntityNotFoundError(MyHomeError):
    """A referenced entity (member, admin, community) does not exist."""


class FileTooLargeError(MyHomeError):
    """An uploaded file exceeds the configured size limit."""


class DocumentSaveError(MyHomeError):
    """An uploaded document could not be decoded or stored."""


async def authentication_error_handler(request: Request, exc: AuthenticationError) -> JSONResponse:
    return JSONResponse(status_code=401, content={"detail": "invalid credentials"})


async def entity_not_found_handler(request: Request, exc: EntityNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


async def file_too_large_handler(request: Request, exc: FileTooLargeError) -> JSONResponse:
    return JSONResponse(status_code=413, content={"message": "File size exceeds limit!"})


async def document_save_error_handler(request: Request, exc: DocumentSaveError) -> JSONResponse:
    return JSONResponse(status_code=409, content={"message": "Something go wrong with document saving!"})


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unexpected errors with an id the client can quote back."""
    error_id = uuid.uuid4().hex
    logger.error(
        "Unhandled exception [%s] in %s %s: %s",
        error_id,
        request.method,
        request.url.path,
        exc,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "error_id": error_id},
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register the application's exception handlers on `app`."""
    app.add_exception_handler(AuthenticationError, authentication_error_handler)
    app.add_exception_handler(EntityNotFoundError, entity_not_found_handler)
    app.add_exception_handler(FileTooLargeError, file_too_large_handler)
    app.add_exception_handler(DocumentSaveError, document_save_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
