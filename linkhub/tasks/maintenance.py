"""
Periodic upkeep tasks owned by the application lifecycle.

Both tasks run until cancelled at shutdown. A failing iteration is logged and
retried after a short backoff instead of ending the task.
"""

import asyncio

from linkhub.constants import TASK_ERROR_BACKOFF_SECONDS
from linkhub.logging import logger
from linkhub.managers.client_registry import ClientRegistry
from linkhub.settings import app_settings
from linkhub.utils.rate_limiter import RateLimiter


async def rate_limit_cleanup_task(
    rate_limiter: RateLimiter, interval: float | None = None
) -> None:
    """
    Drop expired rate-limit records so memory stays bounded.

    Args:
        rate_limiter: Limiter to clean.
        interval: Seconds between runs (default from settings).
    """
    if interval is None:
        interval = app_settings.RATE_LIMIT_CLEANUP_INTERVAL_SECONDS

    while True:
        try:
            await asyncio.sleep(interval)
            rate_limiter.cleanup()
        except asyncio.CancelledError:
            logger.info("Task for rate limiter cleanup cancelled!")
            break
        except Exception as ex:
            logger.error(f"Rate limiter cleanup error: {ex}", exc_info=True)
            await asyncio.sleep(TASK_ERROR_BACKOFF_SECONDS)


async def registry_stats_task(
    registry: ClientRegistry, interval: float | None = None
) -> None:
    """
    Periodically log how many clients are connected.

    Args:
        registry: Registry to report on.
        interval: Seconds between reports (default from settings).
    """
    if interval is None:
        interval = app_settings.STATS_LOG_INTERVAL_SECONDS

    while True:
        try:
            await asyncio.sleep(interval)
            if count := len(registry):
                logger.info(f"[STATS] {count} client(s) connected")
        except asyncio.CancelledError:
            logger.info("Task for registry stats cancelled!")
            break
        except Exception as ex:
            logger.error(f"Registry stats error: {ex}", exc_info=True)
            await asyncio.sleep(TASK_ERROR_BACKOFF_SECONDS)
