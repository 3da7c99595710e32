"""Control-plane endpoints: list clients, distribute payloads, status."""

import time
from datetime import UTC, datetime

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from linkhub.constants import APP_VERSION
from linkhub.dependencies import DistributorDep, RegistryDep
from linkhub.schemas.client import (
    BroadcastRequest,
    ClientsStatus,
    ClientSummary,
    DistributionResult,
    StatusResponse,
)

router = APIRouter(prefix="/api", tags=["clients"])


@router.get(
    "/clients",
    response_model=list[ClientSummary],
    summary="List connected clients",
)
async def list_clients(registry: RegistryDep) -> list[ClientSummary]:
    """
    Return a point-in-time snapshot of the registry, oldest connection first.
    """
    return registry.snapshot()


@router.post(
    "/broadcast",
    response_model=DistributionResult,
    response_model_exclude_none=True,
    summary="Send a payload to every connected client",
    responses={400: {"model": DistributionResult}},
)
async def broadcast(
    body: BroadcastRequest, distributor: DistributorDep
) -> DistributionResult | JSONResponse:
    """
    Validate the payload and broadcast it to all live clients.

    Returns:
        200 with success/failure counts, or 400 with an error when the
        payload is missing, blank or contains denied patterns.
    """
    result = await distributor.distribute(body.payload)

    if not result.success:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=result.model_dump(by_alias=True, exclude_none=True),
        )

    return result


@router.get("/status", response_model=StatusResponse, summary="Server status")
async def server_status(request: Request, registry: RegistryDep) -> StatusResponse:
    clients = registry.snapshot()
    return StatusResponse(
        version=APP_VERSION,
        uptime_seconds=round(time.monotonic() - request.app.state.started_at, 3),
        clients=ClientsStatus(connected=len(clients), list=clients),
        timestamp=datetime.now(UTC),
    )
