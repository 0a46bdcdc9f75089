"""HTTP controllers, one `APIRouter` per resource.

Routers are thin: they validate the request schema, delegate to a
service and translate `None`/`False` results into 404/400 responses.
"""

from fastapi import Query

from ..repositories import PageRequest


def get_page_request(page: int = Query(0, ge=0), size: int = Query(200, ge=1, le=1000)) -> PageRequest:
    """FastAPI dependency reading `page`/`size` query parameters."""
    return PageRequest(page=page, size=size)
