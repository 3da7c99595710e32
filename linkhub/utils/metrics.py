"""
Prometheus metrics for link admission, frames and broadcasts.

Metrics are registered once per process; re-importing the module (e.g. under
uvicorn --reload) reuses the collectors already in the default registry.
"""

from typing import Any

from prometheus_client import REGISTRY, Counter, Gauge


def _get_or_create(metric_cls: type, name: str, doc: str, labels=None) -> Any:
    """
    Get an existing collector from the default registry or create it.

    Args:
        metric_cls: Counter or Gauge.
        name: Metric name.
        doc: Metric documentation.
        labels: Optional list of label names.

    Returns:
        The collector instance.
    """
    try:
        return metric_cls(name, doc, labels or [])
    except ValueError:
        # Metric already exists, retrieve it from registry
        return REGISTRY._names_to_collectors[name]


ws_connections_active = _get_or_create(
    Gauge, "ws_connections_active", "Number of registered client links"
)

ws_connections_total = _get_or_create(
    Counter,
    "ws_connections_total",
    "Total WebSocket link attempts",
    ["status"],  # accepted, rejected_<reason>
)

ws_messages_received_total = _get_or_create(
    Counter,
    "ws_messages_received_total",
    "Total well-formed frames received from clients",
    ["kind"],
)

ws_messages_sent_total = _get_or_create(
    Counter,
    "ws_messages_sent_total",
    "Total frames sent to clients",
    ["kind"],
)

ws_frame_parse_errors_total = _get_or_create(
    Counter,
    "ws_frame_parse_errors_total",
    "Total inbound frames discarded because they could not be parsed",
)

broadcast_sends_total = _get_or_create(
    Counter,
    "broadcast_sends_total",
    "Per-recipient broadcast send outcomes",
    ["outcome"],  # success, failure
)

broadcast_payloads_rejected_total = _get_or_create(
    Counter,
    "broadcast_payloads_rejected_total",
    "Broadcast payloads rejected by validation",
)


class MetricsCollector:
    """
    Facade for metrics emission.

    All methods are static so call sites do not depend on Prometheus types.
    """

    @staticmethod
    def record_connection_accepted() -> None:
        ws_connections_total.labels(status="accepted").inc()
        ws_connections_active.inc()

    @staticmethod
    def record_connection_rejected(reason: str) -> None:
        """
        Record a refused link.

        Args:
            reason: 'denied', 'rate_limited', 'unrecognized_client' or
                'duplicate'.
        """
        ws_connections_total.labels(status=f"rejected_{reason}").inc()

    @staticmethod
    def record_disconnection() -> None:
        ws_connections_active.dec()

    @staticmethod
    def record_frame_received(kind: str) -> None:
        ws_messages_received_total.labels(kind=kind).inc()

    @staticmethod
    def record_frame_sent(kind: str) -> None:
        ws_messages_sent_total.labels(kind=kind).inc()

    @staticmethod
    def record_parse_error() -> None:
        ws_frame_parse_errors_total.inc()

    @staticmethod
    def record_broadcast(success_count: int, failure_count: int) -> None:
        if success_count:
            broadcast_sends_total.labels(outcome="success").inc(success_count)
        if failure_count:
            broadcast_sends_total.labels(outcome="failure").inc(failure_count)

    @staticmethod
    def record_payload_rejected() -> None:
        broadcast_payloads_rejected_total.inc()
