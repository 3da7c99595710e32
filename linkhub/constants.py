"""
Application-level constants for hardcoded protocol behavior.

These values are part of the wire contract with connected clients and should
NEVER be changed via environment variables. For tunable values (rate limits,
intervals, timeouts) see linkhub/settings.py.
"""

APP_VERSION = "1.0.0"

# ============================================================================
# WebSocket Close Codes (RFC 6455)
# ============================================================================

# Link closed because it was already served by another link from its address
WS_NORMAL_CLOSURE_CODE = 1000

# Service is shutting down
WS_GOING_AWAY_CODE = 1001

# Admission rejected (deny-list, rate limit, unrecognized client)
WS_POLICY_VIOLATION_CODE = 1008


# ============================================================================
# Messages sent to clients
# ============================================================================

WELCOME_MESSAGE = "Connection established"
ACKNOWLEDGED_MESSAGE = "Message received"
ADDRESS_ALREADY_CONNECTED_MESSAGE = "Address already connected"
SHUTDOWN_MESSAGE = "Server shutting down"


# ============================================================================
# Logging
# ============================================================================

# Client identities are shortened to this many characters in log lines
SHORT_IDENTITY_LENGTH = 8

# Maximum characters of an execution result echoed into the log
RESULT_LOG_PREVIEW_LENGTH = 50

# Maximum characters of a broadcast payload echoed into the log
PAYLOAD_LOG_PREVIEW_LENGTH = 30

# Loki rejects entries larger than this
LOKI_MAX_LOG_SIZE_BYTES = 256 * 1024


# ============================================================================
# Background Task Behavior
# ============================================================================

# Backoff delay (seconds) when a periodic task iteration fails
TASK_ERROR_BACKOFF_SECONDS = 1
