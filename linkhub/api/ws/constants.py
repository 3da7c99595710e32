from enum import StrEnum


class FrameType(StrEnum):
    """
    Kind tag carried in the "type" field of every frame.

    Server -> client:
        WELCOME (welcome): sent once after admission, carries the identity
        ACKNOWLEDGED (acknowledged): generic reply to unrecognized kinds
        EXECUTE (execute): operator command broadcast to every client

    Client -> server:
        EXECUTION_RESULT (execution_result): outcome of an execute frame
        DATA_FRAME (data_frame): bulk data, kept as the latest snapshot
        PING (ping): keepalive, never answered
    """

    WELCOME = "welcome"
    ACKNOWLEDGED = "acknowledged"
    EXECUTE = "execute"

    EXECUTION_RESULT = "execution_result"
    DATA_FRAME = "data_frame"
    PING = "ping"


class LinkState(StrEnum):
    """
    Lifecycle of a single client link.

    ADMITTED: link accepted, welcome not yet sent
    ACTIVE: welcome sent, entry registered
    CLOSED: terminal, entry removed
    """

    ADMITTED = "admitted"
    ACTIVE = "active"
    CLOSED = "closed"


class RejectReason(StrEnum):
    """Why an incoming link was refused at admission."""

    DENIED = "denied"
    RATE_LIMITED = "rate_limited"
    UNRECOGNIZED_CLIENT = "unrecognized_client"
