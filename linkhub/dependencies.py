"""
Access to the per-application service instances.

The application factory stores one instance of each service on app.state.
These helpers work for both HTTP requests and WebSocket links and can be used
as FastAPI dependencies (overridable via app.dependency_overrides in tests).

Example:
    ```python
    @router.get("/api/clients")
    async def list_clients(registry: RegistryDep) -> list[ClientSummary]:
        return registry.snapshot()
    ```
"""

from typing import Annotated

from fastapi import Depends
from starlette.requests import HTTPConnection

from linkhub.managers.admission_gate import AdmissionGate
from linkhub.managers.client_registry import ClientRegistry
from linkhub.managers.command_distributor import CommandDistributor


def get_registry(connection: HTTPConnection) -> ClientRegistry:
    return connection.app.state.registry


def get_admission_gate(connection: HTTPConnection) -> AdmissionGate:
    return connection.app.state.admission_gate


def get_distributor(connection: HTTPConnection) -> CommandDistributor:
    return connection.app.state.distributor


RegistryDep = Annotated[ClientRegistry, Depends(get_registry)]
DistributorDep = Annotated[CommandDistributor, Depends(get_distributor)]
