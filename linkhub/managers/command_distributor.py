from linkhub.constants import PAYLOAD_LOG_PREVIEW_LENGTH
from linkhub.exceptions import PayloadValidationError
from linkhub.logging import logger
from linkhub.managers.client_registry import ClientRegistry
from linkhub.schemas.client import DistributionResult
from linkhub.settings import app_settings
from linkhub.utils.metrics import MetricsCollector
from linkhub.utils.payload import compile_deny_patterns, validate_payload


class CommandDistributor:
    """
    Validates operator payloads and fans them out through the registry.

    Validation failures are returned to the caller and never reach the
    registry. Per-recipient send failures only show up in the tally.
    """

    def __init__(
        self,
        registry: ClientRegistry,
        deny_patterns: list[str] | None = None,
    ):
        self.registry = registry
        self.deny_patterns = compile_deny_patterns(
            deny_patterns
            if deny_patterns is not None
            else app_settings.PAYLOAD_DENY_PATTERNS
        )

    async def distribute(self, raw_payload: str | None) -> DistributionResult:
        """
        Broadcast a payload to every live client.

        Args:
            raw_payload: Payload text as submitted by the operator.

        Returns:
            DistributionResult with counts, or with an error on validation
            failure.
        """
        try:
            payload = validate_payload(raw_payload, self.deny_patterns)
        except PayloadValidationError as ex:
            logger.warning(f"[BROADCAST] Payload rejected: {ex.message}")
            MetricsCollector.record_payload_rejected()
            return DistributionResult.rejected(ex.message)

        success_count, failure_count = await self.registry.broadcast(payload)
        MetricsCollector.record_broadcast(success_count, failure_count)

        logger.info(
            f"[BROADCAST] Payload sent | Success: {success_count}, "
            f"Errors: {failure_count} | "
            f"{payload[:PAYLOAD_LOG_PREVIEW_LENGTH]}..."
        )
        return DistributionResult.delivered(success_count, failure_count)
