"""Wire models for frames exchanged over a client link."""

import json
from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from linkhub.api.ws.constants import FrameType


def utc_now() -> datetime:
    return datetime.now(UTC)


# Server -> client


class WelcomeFrame(BaseModel):
    type: Literal["welcome"] = "welcome"
    identity: str
    message: str


class AcknowledgedFrame(BaseModel):
    type: Literal["acknowledged"] = "acknowledged"
    message: str
    timestamp: datetime = Field(default_factory=utc_now)


class ExecuteFrame(BaseModel):
    type: Literal["execute"] = "execute"
    payload: str
    timestamp: datetime = Field(default_factory=utc_now)


OutboundFrame = WelcomeFrame | AcknowledgedFrame | ExecuteFrame


# Client -> server


class InboundFrame(BaseModel):
    """
    Any well-formed client frame.

    Unknown kinds are kept as-is (extra fields allowed) and answered with an
    acknowledged frame.
    """

    model_config = ConfigDict(extra="allow")

    type: str | None = None
    timestamp: Any = None

    @field_validator("type", mode="before")
    @classmethod
    def coerce_type(cls, value: Any) -> str | None:
        if value is None or isinstance(value, str):
            return value
        return json.dumps(value)


class ExecutionResultFrame(InboundFrame):
    """Outcome reported by a client after running an execute frame."""

    type: Literal["execution_result"] = "execution_result"
    success: bool
    result: str | None = None
    error: str | None = None


class DataFrame(InboundFrame):
    """Bulk data pushed by a client; only the latest one is retained."""

    type: Literal["data_frame"] = "data_frame"
    data: Any


class PingFrame(InboundFrame):
    type: Literal["ping"] = "ping"


INBOUND_FRAME_MODELS: dict[str, type[InboundFrame]] = {
    FrameType.EXECUTION_RESULT: ExecutionResultFrame,
    FrameType.DATA_FRAME: DataFrame,
    FrameType.PING: PingFrame,
}
