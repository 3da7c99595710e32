from typing import Any, Type

from starlette import status
from starlette.endpoints import WebSocketEndpoint
from starlette.websockets import WebSocket, WebSocketDisconnect

from linkhub.api.ws.protocol import LinkProtocol
from linkhub.constants import (
    ADDRESS_ALREADY_CONNECTED_MESSAGE,
    WS_NORMAL_CLOSURE_CODE,
    WS_POLICY_VIOLATION_CODE,
)
from linkhub.dependencies import get_admission_gate, get_registry
from linkhub.exceptions import DuplicateAddressError
from linkhub.logging import (
    clear_log_context,
    logger,
    set_log_context,
    short_identity,
)
from linkhub.managers.client_registry import is_link_open, send_frame
from linkhub.schemas.frames import OutboundFrame
from linkhub.utils.ip_utils import resolve_client_address
from linkhub.utils.metrics import MetricsCollector


class AdmissionWebSocketEndpoint(WebSocketEndpoint):  # type: ignore[misc]
    """
    WebSocket endpoint with admission control and registry bookkeeping.

    Admission (deny-list, rate limit, user agent) runs before the handshake is
    accepted. Admitted links are registered, one per address, and serviced by
    a LinkProtocol until the transport reports close or error.
    """

    encoding = None  # Frames may arrive as text or binary
    websocket_class: Type[WebSocket] = WebSocket

    protocol: LinkProtocol | None = None
    link_error: BaseException | None = None

    async def dispatch(self) -> None:
        """
        Manage the link lifecycle.

        1. Run admission and registration in on_connect.
        2. Stop there if the link was refused.
        3. Send the welcome frame, then feed every received message to
           on_receive until the client disconnects.
        4. On any exit, call on_disconnect to release the registry entry.
           Unexpected errors are recorded as the link error and re-raised.
        """
        websocket = self.websocket_class(
            self.scope, receive=self.receive, send=self.send
        )
        await self.on_connect(websocket)

        if self.protocol is None:
            return

        close_code = status.WS_1000_NORMAL_CLOSURE

        try:
            await self.send_frame(websocket, self.protocol.welcome())

            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.receive":
                    data = await self.decode(websocket, message)
                    await self.on_receive(websocket, data)
                elif message["type"] == "websocket.disconnect":
                    close_code = int(
                        message.get("code") or status.WS_1000_NORMAL_CLOSURE
                    )
                    break
        except WebSocketDisconnect as exc:
            close_code = exc.code
        except Exception as exc:
            close_code = status.WS_1011_INTERNAL_ERROR
            self.link_error = exc
            raise exc
        finally:
            await self.on_disconnect(websocket, close_code)

    async def decode(
        self, websocket: WebSocket, message: dict[str, Any]
    ) -> str | bytes:
        """
        Return the raw message payload; parsing is left to LinkProtocol.

        Args:
            websocket: WebSocket connection instance
            message: Raw ASGI message dict

        Returns:
            Text payload if present, otherwise the binary payload.
        """
        if message.get("text") is not None:
            return message["text"]
        return message.get("bytes") or b""

    async def send_frame(
        self, websocket: WebSocket, frame: OutboundFrame
    ) -> None:
        """Send a frame if the link is still open."""
        if not is_link_open(websocket):
            return
        await send_frame(websocket, frame)
        MetricsCollector.record_frame_sent(frame.type)

    async def on_connect(self, websocket: WebSocket) -> None:
        """
        Admit and register an incoming link.

        The link is refused before the handshake (close code 1008, reason
        set to the reject reason) when admission fails. When admission
        passes but the address is already registered, the handshake completes
        and the link is closed immediately with code 1000. Otherwise a
        LinkProtocol is attached to the endpoint.
        """
        peer_host = websocket.client.host if websocket.client else None
        address = resolve_client_address(websocket.headers, peer_host)
        user_agent = websocket.headers.get("user-agent", "")

        decision = get_admission_gate(websocket).admit(address, user_agent)
        if not decision.admitted:
            MetricsCollector.record_connection_rejected(decision.reason)
            await websocket.close(
                code=WS_POLICY_VIOLATION_CODE, reason=decision.reason
            )
            return

        await websocket.accept()

        registry = get_registry(websocket)
        try:
            entry = registry.try_add(address, user_agent, websocket)
        except DuplicateAddressError:
            logger.info(f"[CLIENT] Address already connected: {address}")
            MetricsCollector.record_connection_rejected("duplicate")
            await websocket.close(
                code=WS_NORMAL_CLOSURE_CODE,
                reason=ADDRESS_ALREADY_CONNECTED_MESSAGE,
            )
            return

        set_log_context(client_id=short_identity(entry.identity), address=address)
        self.protocol = LinkProtocol(registry, entry)
        MetricsCollector.record_connection_accepted()

    async def on_disconnect(self, websocket: WebSocket, close_code: int) -> None:
        """
        Release the registry entry of an admitted link.

        Close and error notifications are handled identically; a recorded
        link error is surfaced in the log before removal.
        """
        if self.protocol is None:
            return

        identity = self.protocol.identity
        self.protocol.close(self.link_error)
        MetricsCollector.record_disconnection()

        logger.debug(
            f"Client {short_identity(identity)} disconnected with code {close_code}"
        )
        clear_log_context()
