from fastapi import APIRouter
from starlette.websockets import WebSocket

from linkhub.api.ws.websocket import AdmissionWebSocketEndpoint
from linkhub.settings import app_settings

router = APIRouter()


@router.websocket_route(app_settings.WS_PATH)
class ClientLink(AdmissionWebSocketEndpoint):
    """
    WebSocket endpoint serving admitted clients.

    Each received message goes through the link's protocol; the reply it
    yields, if any, is sent straight back on the same link.
    """

    async def on_receive(self, websocket: WebSocket, data: str | bytes) -> None:
        reply = self.protocol.handle_frame(data)
        if reply is not None:
            await self.send_frame(websocket, reply)
