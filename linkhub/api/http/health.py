"""Health check endpoint for monitoring service status."""

from fastapi import APIRouter, status
from pydantic import BaseModel

from linkhub.dependencies import RegistryDep

router = APIRouter()


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: str
    active_clients: int


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check endpoint",
    tags=["health"],
)
async def health_check(registry: RegistryDep) -> HealthResponse:
    """
    Report liveness and the number of registered clients.

    The registry is in-process, so a response at all means it is healthy.
    """
    return HealthResponse(status="healthy", active_clients=len(registry))
