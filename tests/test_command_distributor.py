"""Tests for payload validation and broadcast through CommandDistributor."""

from unittest.mock import AsyncMock

import pytest

from linkhub.exceptions import PayloadValidationError
from linkhub.managers.command_distributor import CommandDistributor
from linkhub.utils.payload import compile_deny_patterns, validate_payload
from tests.mocks.websocket_mocks import BROWSER_UA, create_mock_websocket


class TestValidatePayload:
    """Tests for validate_payload."""

    def test_strips_whitespace(self):
        assert validate_payload("  refresh()\n", []) == "refresh()"

    @pytest.mark.parametrize("payload", [None, "", "   ", "\n\t"])
    def test_missing_or_blank(self, payload):
        with pytest.raises(PayloadValidationError):
            validate_payload(payload, [])

    def test_non_text(self):
        with pytest.raises(PayloadValidationError) as exc_info:
            validate_payload(42, [])

        assert exc_info.value.message == "Payload is missing or not text"

    @pytest.mark.parametrize(
        "payload",
        [
            "require('fs')",
            "PROCESS.exit(1)",
            "fs.readFileSync('x')",
            "console.log(__dirname)",
        ],
    )
    def test_denied_patterns(self, payload, distributor):
        with pytest.raises(PayloadValidationError) as exc_info:
            validate_payload(payload, distributor.deny_patterns)

        assert "dangerous" in exc_info.value.message

    def test_custom_patterns(self):
        patterns = compile_deny_patterns([r"drop\s+table"])

        with pytest.raises(PayloadValidationError):
            validate_payload("DROP   TABLE users", patterns)
        assert validate_payload("select 1", patterns) == "select 1"


class TestCommandDistributor:
    """Tests for CommandDistributor.distribute."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", ["", "   ", None])
    async def test_rejects_blank_without_broadcast(self, registry, payload):
        registry.broadcast = AsyncMock(return_value=(0, 0))
        distributor = CommandDistributor(registry)

        result = await distributor.distribute(payload)

        assert result.success is False
        assert result.error
        assert (result.success_count, result.failure_count) == (0, 0)
        registry.broadcast.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rejects_denied_payload_without_broadcast(self, registry):
        registry.broadcast = AsyncMock(return_value=(0, 0))
        distributor = CommandDistributor(registry)

        result = await distributor.distribute("require('child_process')")

        assert result.success is False
        assert result.error == "Payload contains potentially dangerous operations"
        registry.broadcast.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_broadcasts_trimmed_payload(self, registry):
        registry.broadcast = AsyncMock(return_value=(2, 1))
        distributor = CommandDistributor(registry)

        result = await distributor.distribute("  refresh()  ")

        registry.broadcast.assert_awaited_once_with("refresh()")
        assert result.success is True
        assert result.success_count == 2
        assert result.failure_count == 1
        assert result.message == "Payload sent to 2 client(s)"
        assert result.error is None

    @pytest.mark.asyncio
    async def test_no_clients(self, distributor):
        result = await distributor.distribute("refresh()")

        assert result.success is True
        assert (result.success_count, result.failure_count) == (0, 0)

    @pytest.mark.asyncio
    async def test_tallies_real_sends(self, registry, distributor):
        registry.try_add("203.0.113.1", BROWSER_UA, create_mock_websocket())
        registry.try_add(
            "203.0.113.2", BROWSER_UA, create_mock_websocket(open=False)
        )

        result = await distributor.distribute("refresh()")

        assert (result.success_count, result.failure_count) == (1, 1)
        assert len(registry) == 2
