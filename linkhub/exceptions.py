"""
Custom exception classes for the application.

Each exception carries an http_status so the HTTP control plane can report it
consistently. Link-level failures are never escalated beyond the link they
happened on.
"""


class AppException(Exception):
    """
    Base exception class for all application exceptions.

    Attributes:
        message: Human-readable error message.
        http_status: HTTP status code for control-plane responses.
    """

    http_status: int = 500

    def __init__(self, message: str):
        """
        Initialize the exception with a message.

        Args:
            message: Human-readable error description.
        """
        self.message = message
        super().__init__(message)


class PayloadValidationError(AppException):
    """
    Broadcast payload failed validation.

    Raised when a payload is empty or matches a denied pattern. The registry
    is never touched for such a payload.

    HTTP Status: 400 Bad Request
    """

    http_status = 400


class DuplicateAddressError(AppException):
    """
    An entry for this address already exists.

    Raised by ClientRegistry.try_add; the caller must close the new link
    without creating any state.

    HTTP Status: 409 Conflict
    """

    http_status = 409

    def __init__(self, address: str):
        self.address = address
        super().__init__(f"Address {address} is already connected")


class ProtocolError(AppException):
    """
    Inbound frame could not be parsed.

    Raised by frame parsing; recoverable, logged and otherwise ignored.

    HTTP Status: 400 Bad Request
    """

    http_status = 400
