"""
End-to-end tests for the client WebSocket endpoint.

Links are opened through the TestClient with forwarded-for headers so every
test controls its client address. Lifespan is not started.
"""

import pytest
from starlette.websockets import WebSocketDisconnect

from linkhub.api.ws.constants import RejectReason
from linkhub.constants import (
    ACKNOWLEDGED_MESSAGE,
    ADDRESS_ALREADY_CONNECTED_MESSAGE,
    WELCOME_MESSAGE,
    WS_NORMAL_CLOSURE_CODE,
    WS_POLICY_VIOLATION_CODE,
)
from tests.mocks.websocket_mocks import ws_headers

WS_PATH = "/ws"
ADDRESS = "203.0.113.5"


class TestAdmission:
    """Tests for link admission and refusal."""

    def test_admitted_client_gets_welcome(self, client, app):
        with client.websocket_connect(WS_PATH, headers=ws_headers(ADDRESS)) as ws:
            welcome = ws.receive_json()

            assert welcome["type"] == "welcome"
            assert welcome["message"] == WELCOME_MESSAGE
            (entry,) = app.state.registry.snapshot()
            assert welcome["identity"] == entry.identity
            assert entry.address == ADDRESS

        assert len(app.state.registry) == 0

    def test_real_ip_header_used(self, client, app):
        headers = {"x-real-ip": ADDRESS, "user-agent": "Mozilla/5.0"}

        with client.websocket_connect(WS_PATH, headers=headers) as ws:
            ws.receive_json()
            assert app.state.registry.snapshot()[0].address == ADDRESS

    def test_denied_address(self, client, deny_list_path):
        deny_list_path.write_text(f"{ADDRESS}\n")

        with pytest.raises(WebSocketDisconnect) as exc_info:
            with client.websocket_connect(WS_PATH, headers=ws_headers(ADDRESS)):
                pass

        assert exc_info.value.code == WS_POLICY_VIOLATION_CODE
        assert exc_info.value.reason == RejectReason.DENIED

    def test_unrecognized_user_agent(self, client, app):
        with pytest.raises(WebSocketDisconnect) as exc_info:
            with client.websocket_connect(
                WS_PATH, headers=ws_headers(ADDRESS, user_agent="curl/8.0")
            ):
                pass

        assert exc_info.value.code == WS_POLICY_VIOLATION_CODE
        assert exc_info.value.reason == "unrecognized_client"
        assert len(app.state.registry) == 0

    def test_unresolvable_address_refused(self, client):
        """The test transport's peer host is not an IP address."""
        with pytest.raises(WebSocketDisconnect) as exc_info:
            with client.websocket_connect(
                WS_PATH, headers={"user-agent": "Mozilla/5.0"}
            ):
                pass

        assert exc_info.value.reason == RejectReason.RATE_LIMITED

    def test_rate_limited_after_quota(self, client):
        for _ in range(10):
            with client.websocket_connect(
                WS_PATH, headers=ws_headers(ADDRESS)
            ) as ws:
                ws.receive_json()

        with pytest.raises(WebSocketDisconnect) as exc_info:
            with client.websocket_connect(WS_PATH, headers=ws_headers(ADDRESS)):
                pass

        assert exc_info.value.code == WS_POLICY_VIOLATION_CODE
        assert exc_info.value.reason == RejectReason.RATE_LIMITED

    def test_duplicate_address_closed(self, client, app):
        with client.websocket_connect(WS_PATH, headers=ws_headers(ADDRESS)) as ws:
            first_identity = ws.receive_json()["identity"]

            with client.websocket_connect(
                WS_PATH, headers=ws_headers(ADDRESS)
            ) as duplicate:
                with pytest.raises(WebSocketDisconnect) as exc_info:
                    duplicate.receive_json()

            assert exc_info.value.code == WS_NORMAL_CLOSURE_CODE
            assert exc_info.value.reason == ADDRESS_ALREADY_CONNECTED_MESSAGE
            (entry,) = app.state.registry.snapshot()
            assert entry.identity == first_identity

    def test_address_free_after_disconnect(self, client, app):
        with client.websocket_connect(WS_PATH, headers=ws_headers(ADDRESS)) as ws:
            first = ws.receive_json()["identity"]

        with client.websocket_connect(WS_PATH, headers=ws_headers(ADDRESS)) as ws:
            second = ws.receive_json()["identity"]

        assert first != second


class TestLinkMessages:
    """Tests for frame handling on an admitted link."""

    def test_ping_silent_then_acknowledged(self, client):
        with client.websocket_connect(WS_PATH, headers=ws_headers(ADDRESS)) as ws:
            ws.receive_json()

            ws.send_json({"type": "ping"})
            ws.send_json({"type": "hello"})
            reply = ws.receive_json()

            assert reply["type"] == "acknowledged"
            assert reply["message"] == ACKNOWLEDGED_MESSAGE
            assert "timestamp" in reply

    def test_malformed_frame_keeps_link_open(self, client):
        with client.websocket_connect(WS_PATH, headers=ws_headers(ADDRESS)) as ws:
            ws.receive_json()

            ws.send_text("not json")
            ws.send_bytes(b'{"type": "status"}')

            assert ws.receive_json()["type"] == "acknowledged"

    def test_data_frame_retained(self, client, app):
        with client.websocket_connect(WS_PATH, headers=ws_headers(ADDRESS)) as ws:
            identity = ws.receive_json()["identity"]

            ws.send_json({"type": "data_frame", "data": {"players": 12}})
            ws.send_json({"type": "sync"})
            ws.receive_json()

            entry = app.state.registry.get(identity)
            assert entry.last_payload.data == {"players": 12}
