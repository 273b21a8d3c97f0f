"""
Health check router.

Provides a simple health endpoint for liveness and readiness checks.
No business logic. Returns application status and version.
"""

from fastapi import APIRouter, Depends

from app.core.container import Container
from app.interfaces.ordering.dependencies import get_container
from app.interfaces.ordering.schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Returns application health status and version.",
)
def health_check(container: Container = Depends(get_container)) -> HealthResponse:
    """Return current application health status."""
    return HealthResponse(status="ok", version=container.settings.version)
