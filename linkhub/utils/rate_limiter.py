"""
In-memory rate limiter using a sliding window algorithm.

Counts connection attempts per client address within a fixed time window.
State lives in process memory; one service instance owns one limiter.
"""

import threading
import time
from collections.abc import Callable

from linkhub.logging import logger
from linkhub.settings import app_settings
from linkhub.utils.ip_utils import is_valid_address


class RateLimiter:
    """
    Sliding-window request counter keyed by address.

    Each address maps to the ordered timestamps of its accepted attempts
    within the current window. Addresses whose sequence becomes empty are
    deleted rather than kept as placeholders.
    """

    def __init__(
        self,
        limit: int | None = None,
        window_seconds: float | None = None,
        enabled: bool | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the rate limiter.

        Args:
            limit: Maximum attempts per window (default from settings).
            window_seconds: Window duration in seconds (default from settings).
            enabled: When False every valid address is allowed.
            clock: Monotonic time source, injectable for tests.
        """
        self.limit = (
            limit if limit is not None else app_settings.RATE_LIMIT_MAX_ATTEMPTS
        )
        self.window_seconds = (
            window_seconds
            if window_seconds is not None
            else app_settings.RATE_LIMIT_WINDOW_SECONDS
        )
        self.enabled = (
            enabled if enabled is not None else app_settings.RATE_LIMIT_ENABLED
        )
        self._clock = clock
        self._requests: dict[str, list[float]] = {}
        self._lock = threading.Lock()

    def _in_window(self, timestamps: list[float], now: float) -> list[float]:
        return [ts for ts in timestamps if now - ts < self.window_seconds]

    def allow(self, address: str | None) -> bool:
        """
        Check and record an attempt for an address.

        Addresses that are absent or not valid IP addresses always fail, since
        they cannot be fairly rate limited.

        Args:
            address: Resolved client address.

        Returns:
            True if the attempt is within the limit (and was recorded),
            False otherwise.
        """
        if not is_valid_address(address):
            logger.debug(f"Rate check failed for invalid address {address!r}")
            return False

        if not self.enabled:
            return True

        with self._lock:
            now = self._clock()
            recent = self._in_window(self._requests.get(address, []), now)

            if len(recent) >= self.limit:
                # Keep the filtered sequence, it can only shrink from here
                self._requests[address] = recent
                return False

            recent.append(now)
            self._requests[address] = recent
            return True

    def cleanup(self) -> int:
        """
        Drop expired timestamps for every address.

        Addresses left without timestamps are deleted. Safe to call
        concurrently with allow().

        Returns:
            Number of addresses removed.
        """
        with self._lock:
            now = self._clock()
            removed = 0

            for address in list(self._requests):
                recent = self._in_window(self._requests[address], now)
                if recent:
                    self._requests[address] = recent
                else:
                    del self._requests[address]
                    removed += 1

        if removed:
            logger.debug(f"Rate limiter cleanup removed {removed} address(es)")

        return removed

    def tracked_addresses(self) -> int:
        """Number of addresses currently holding timestamps."""
        with self._lock:
            return len(self._requests)

    def reset(self) -> None:
        """Forget all recorded attempts."""
        with self._lock:
            self._requests.clear()
