"""
Per-link message protocol.

LinkProtocol is driven by the WebSocket endpoint: it produces the welcome
frame, classifies each inbound frame and returns the single reply that frame
requires (or None), and releases the registry entry when the link ends.
It performs no I/O itself.
"""

import json
from typing import Any

from pydantic import ValidationError

from linkhub.api.ws.constants import FrameType, LinkState
from linkhub.constants import (
    ACKNOWLEDGED_MESSAGE,
    RESULT_LOG_PREVIEW_LENGTH,
    WELCOME_MESSAGE,
)
from linkhub.exceptions import ProtocolError
from linkhub.logging import logger, short_identity
from linkhub.managers.client_registry import ClientEntry, ClientRegistry
from linkhub.schemas.frames import (
    INBOUND_FRAME_MODELS,
    AcknowledgedFrame,
    DataFrame,
    ExecutionResultFrame,
    InboundFrame,
    OutboundFrame,
    WelcomeFrame,
)
from linkhub.utils.metrics import MetricsCollector


def parse_frame(raw: str | bytes) -> InboundFrame:
    """
    Parse raw message data into a typed inbound frame.

    Known kinds are validated against their model; anything else with a
    string or missing "type" becomes a generic InboundFrame.

    Args:
        raw: Text or binary message payload.

    Returns:
        Parsed frame.

    Raises:
        ProtocolError: If the data is not a JSON object or fails validation.
    """
    try:
        data: Any = json.loads(raw)
    except (ValueError, RecursionError) as ex:
        # ValueError covers JSONDecodeError and UnicodeDecodeError
        raise ProtocolError(f"Invalid JSON: {ex}") from ex

    if not isinstance(data, dict):
        raise ProtocolError("Frame must be a JSON object")

    kind = data.get("type")
    model = INBOUND_FRAME_MODELS.get(kind) if isinstance(kind, str) else None

    try:
        return (model or InboundFrame).model_validate(data)
    except ValidationError as ex:
        raise ProtocolError(
            f"Invalid {kind or 'untyped'} frame: {ex.error_count()} error(s)"
        ) from ex


class LinkProtocol:
    """
    State machine for one client link: ADMITTED -> ACTIVE -> CLOSED.

    Attributes:
        registry: Registry holding the link's entry.
        entry: The link's registry entry.
        state: Current LinkState.
    """

    def __init__(self, registry: ClientRegistry, entry: ClientEntry):
        self.registry = registry
        self.entry = entry
        self.state = LinkState.ADMITTED

    @property
    def identity(self) -> str:
        return self.entry.identity

    def welcome(self) -> WelcomeFrame:
        """
        Build the welcome frame and activate the link.

        Returns:
            Welcome frame carrying the assigned identity.
        """
        self.state = LinkState.ACTIVE
        return WelcomeFrame(identity=self.identity, message=WELCOME_MESSAGE)

    def handle_frame(self, raw: str | bytes) -> OutboundFrame | None:
        """
        Process one inbound message.

        Malformed input is logged and dropped without changing state.

        Args:
            raw: Text or binary message payload.

        Returns:
            The reply to send, or None.
        """
        if self.state != LinkState.ACTIVE:
            logger.debug(
                f"Ignoring frame on {self.state} link "
                f"{short_identity(self.identity)}"
            )
            return None

        try:
            frame = parse_frame(raw)
        except ProtocolError as ex:
            logger.error(
                f"Parse error from {short_identity(self.identity)}: {ex.message}"
            )
            MetricsCollector.record_parse_error()
            return None

        self.registry.touch(self.identity)
        MetricsCollector.record_frame_received(frame.type or "untyped")

        if isinstance(frame, ExecutionResultFrame):
            self._record_execution_result(frame)
            return None

        if isinstance(frame, DataFrame):
            logger.debug(
                f"[DATA] Frame received {short_identity(self.identity)} | "
                f"{frame.timestamp}"
            )
            self.registry.store_payload(
                self.identity, frame.data, frame.timestamp
            )
            return None

        if frame.type == FrameType.PING:
            return None

        logger.debug(
            f"Message {frame.type} from {short_identity(self.identity)}"
        )
        return AcknowledgedFrame(message=ACKNOWLEDGED_MESSAGE)

    def _record_execution_result(self, frame: ExecutionResultFrame) -> None:
        if frame.success:
            preview = (frame.result or "None")[:RESULT_LOG_PREVIEW_LENGTH]
            logger.info(
                f"[EXEC] Success {short_identity(self.identity)} | "
                f"Result: {preview}"
            )
        else:
            logger.error(
                f"[EXEC] Error {short_identity(self.identity)} | {frame.error}"
            )

    def close(self, error: BaseException | None = None) -> None:
        """
        Terminate the link and release its registry entry.

        Close and error notifications end in the same state; an error is
        logged first. Calling close() again is a no-op.

        Args:
            error: Transport error that ended the link, if any.
        """
        if self.state == LinkState.CLOSED:
            return

        if error is not None:
            logger.error(
                f"Client {short_identity(self.identity)}: {error}"
            )

        self.registry.remove(self.identity)
        self.state = LinkState.CLOSED
