"""
Mock factory functions for WebSocket testing.

Provides mocks for client links and a controllable clock.
"""

from unittest.mock import AsyncMock, MagicMock

from starlette.websockets import WebSocketState


def create_mock_websocket(
    open: bool = True, send_error: BaseException | None = None
):
    """
    Creates a mock WebSocket link.

    Args:
        open: Whether both sides report the link as connected.
        send_error: Exception raised by send_text, if any.

    Returns:
        MagicMock: Mocked WebSocket instance
    """
    from fastapi import WebSocket

    ws_mock = MagicMock(spec=WebSocket)

    ws_mock.send_text = AsyncMock(side_effect=send_error)
    ws_mock.send_json = AsyncMock()
    ws_mock.accept = AsyncMock()
    ws_mock.close = AsyncMock()

    state = WebSocketState.CONNECTED if open else WebSocketState.DISCONNECTED
    ws_mock.client_state = state
    ws_mock.application_state = state
    ws_mock.headers = {}
    ws_mock.client = MagicMock(host="127.0.0.1", port=50000)

    return ws_mock


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


BROWSER_UA = "Mozilla/5.0 (X11; Linux x86_64)"


def ws_headers(address: str, user_agent: str = BROWSER_UA) -> dict[str, str]:
    """Headers for a WebSocket attempt from the given address."""
    return {"x-forwarded-for": address, "user-agent": user_agent}
