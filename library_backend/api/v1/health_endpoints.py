"""
Health check endpoint.
"""

from fastapi import APIRouter, Depends

from library_backend.domain.ports import LibraryStore
from library_backend.api.v1 import schemas as api
from library_backend.api.v1.dependencies import get_store

router = APIRouter()


@router.get("/health", response_model=api.HealthResponse)
def health_check(store: LibraryStore = Depends(get_store)) -> api.HealthResponse:
    """
    Check storage availability.

    Returns status "degraded" (still HTTP 200) when the database cannot be
    read, so that load balancers can tell a sick instance from a dead one.
    """
    ready = store.is_ready()
    return api.HealthResponse(status="ok" if ready else "degraded", storage=ready)
