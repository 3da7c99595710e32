from datetime import datetime

from pydantic import BaseModel, Field


class ClientSummary(BaseModel):
    """
    Read-only view of a registered client.

    Attributes:
        identity: Server-assigned unique token.
        address: Originating address resolved at admission.
        user_agent: Client-supplied label.
        connected_at: When the entry was created.
        last_seen_at: When the last well-formed frame arrived.
        has_payload_snapshot: Whether a data frame has been retained.
    """

    identity: str
    address: str
    user_agent: str
    connected_at: datetime
    last_seen_at: datetime
    has_payload_snapshot: bool = False


class BroadcastRequest(BaseModel):
    payload: str | None = None


class DistributionResult(BaseModel):
    """
    Outcome of distributing one payload.

    A validation failure has success=False, an error and zero counts; the
    registry was not touched. Otherwise success=True and the counts tally
    per-recipient send outcomes.
    """

    success: bool
    success_count: int = Field(default=0, serialization_alias="successCount")
    failure_count: int = Field(default=0, serialization_alias="failureCount")
    message: str | None = None
    error: str | None = None

    @classmethod
    def rejected(cls, error: str) -> "DistributionResult":
        return cls(success=False, error=error)

    @classmethod
    def delivered(
        cls, success_count: int, failure_count: int
    ) -> "DistributionResult":
        return cls(
            success=True,
            success_count=success_count,
            failure_count=failure_count,
            message=f"Payload sent to {success_count} client(s)",
        )


class ClientsStatus(BaseModel):
    connected: int = Field(ge=0)
    list: list[ClientSummary]


class StatusResponse(BaseModel):
    server: str = "online"
    version: str
    uptime_seconds: float
    clients: ClientsStatus
    timestamp: datetime
