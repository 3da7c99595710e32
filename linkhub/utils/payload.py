"""Screening of operator payloads before they are broadcast."""

import re

from linkhub.exceptions import PayloadValidationError


def compile_deny_patterns(patterns: list[str]) -> list[re.Pattern[str]]:
    return [re.compile(pattern, re.IGNORECASE) for pattern in patterns]


def validate_payload(
    payload: str | None, deny_patterns: list[re.Pattern[str]]
) -> str:
    """
    Validate and normalize a broadcast payload.

    Args:
        payload: Raw payload text.
        deny_patterns: Compiled patterns that must not match.

    Returns:
        The payload with surrounding whitespace removed.

    Raises:
        PayloadValidationError: If the payload is missing, blank, not text, or
            matches a denied pattern.
    """
    if payload is None or not isinstance(payload, str):
        raise PayloadValidationError("Payload is missing or not text")

    trimmed = payload.strip()
    if not trimmed:
        raise PayloadValidationError("Payload is empty")

    for pattern in deny_patterns:
        if pattern.search(trimmed):
            raise PayloadValidationError(
                "Payload contains potentially dangerous operations"
            )

    return trimmed
