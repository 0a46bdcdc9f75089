"""FastAPI application entrypoint.

This module wires the MyHome residential community backend together:
logging, CORS, database tables, request middlewares, exception handlers
and the per-resource routers under `myhome.routes`. Controllers are
intentionally thin: they accept requests, delegate to services, and
return JSON responses.

Route groups:
- /auth/login
- /users, /users/password, /users/{id}/email-confirm
- /communities (admins, houses, amenities, admin payments)
- /houses and house members
- /amenities and bookings
- /members/{id}/documents and /members/{id}/payments
- /payments
- /health
"""

import json
import logging
import time
import uuid

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.concurrency import run_in_threadpool
from sqlmodel import Session

from .auth import is_community_admin_path, is_user_community_admin, user_id_from_headers
from .config import settings
from .database import create_db_and_tables, engine
from .errors import setup_exception_handlers
from .routes import amenities, communities, documents, houses, payments, users
from .routes import auth as auth_routes

app = FastAPI(title="MyHome API")
logger = logging.getLogger("myhome.api")
if not logger.handlers:
    logging.basicConfig(level=settings.LOG_LEVEL)

create_db_and_tables()
setup_exception_handlers(app)


def _caller_administers(path: str, user_id) -> bool:
    with Session(engine) as session:
        return is_user_community_admin(session, path, user_id)


@app.middleware("http")
async def community_admin_middleware(request: Request, call_next):
    """Reject `/communities/<id>/admins...` requests from non-admins with 401.

    CORS preflights carry no credentials and are passed through.
    """
    path = request.url.path
    if request.method == "OPTIONS" or not is_community_admin_path(path):
        return await call_next(request)
    try:
        user_id = user_id_from_headers(request.headers)
    except HTTPException as e:
        return JSONResponse(status_code=e.status_code, content={"detail": e.detail})
    allowed = await run_in_threadpool(_caller_administers, path, user_id)
    if not allowed:
        logger.info("user %s is not an admin of the community in %s", user_id, path)
        return JSONResponse(status_code=401, content={"detail": "not a community admin"})
    return await call_next(request)


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)
    request.state.request_id = req_id
    started = time.perf_counter()
    response: Response
    try:
        response = await call_next(request)
    except Exception:
        elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
        logger.exception(
            "request_failed %s",
            json.dumps(
                {
                    "request_id": req_id,
                    "path": request.url.path,
                    "method": request.method,
                    "duration_ms": elapsed_ms,
                    "client": request.client.host if request.client else "unknown",
                },
                ensure_ascii=True,
            ),
        )
        raise
    response.headers["X-Request-ID"] = req_id
    elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
    logger.info(
        "request_done %s",
        json.dumps(
            {
                "request_id": req_id,
                "path": request.url.path,
                "method": request.method,
                "status_code": response.status_code,
                "duration_ms": elapsed_ms,
                "client": request.client.host if request.client else "unknown",
            },
            ensure_ascii=True,
        ),
    )
    return response


# registered last so CORS is the outermost middleware
if settings.ALLOW_DEV_CORS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["userId", "token"],
    )

app.include_router(auth_routes.router)
app.include_router(users.router)
app.include_router(communities.router)
app.include_router(houses.router)
app.include_router(amenities.router)
app.include_router(documents.router)
app.include_router(payments.router)


@app.get("/health")
def health():
    """Lightweight health check for uptime monitoring."""
    return {"status": "ok"}
