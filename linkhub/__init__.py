# Uvicorn application factory <https://www.uvicorn.org/#application-factories>
import logging as stdlib_logging
import time
from asyncio import create_task, gather
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from linkhub.constants import APP_VERSION
from linkhub.logging import ExcludeMonitoringPathsFilter, logger
from linkhub.managers.admission_gate import AdmissionGate
from linkhub.managers.client_registry import ClientRegistry
from linkhub.managers.command_distributor import CommandDistributor
from linkhub.middlewares.request_size_limit import RequestSizeLimitMiddleware
from linkhub.middlewares.security_headers import SecurityHeadersMiddleware
from linkhub.routing import collect_subrouters
from linkhub.settings import app_settings
from linkhub.tasks.maintenance import rate_limit_cleanup_task, registry_stats_task
from linkhub.utils.deny_list import DenyList
from linkhub.utils.rate_limiter import RateLimiter


async def startup(app: FastAPI) -> None:
    """
    Application startup handler.

    Starts the periodic rate limiter cleanup and the connected-clients
    report as background tasks owned by the application.
    """
    logger.info("Application startup initiated")

    stdlib_logging.getLogger("uvicorn.access").addFilter(ExcludeMonitoringPathsFilter())

    app.state.tasks = [
        create_task(rate_limit_cleanup_task(app.state.rate_limiter)),
        create_task(registry_stats_task(app.state.registry)),
    ]
    logger.info(f"Started {len(app.state.tasks)} background tasks")
    logger.info(
        f"Accepting user agents: {', '.join(app_settings.ALLOWED_USER_AGENTS)}"
    )


async def shutdown(app: FastAPI) -> None:
    """
    Application shutdown handler.

    Cleanup order:
    1. Cancel and wait for background tasks
    2. Close every live client link
    3. Release rate limiter state
    """
    logger.info("Application shutdown initiated")

    tasks = getattr(app.state, "tasks", [])
    if tasks:
        logger.info(f"Cancelling {len(tasks)} background tasks")
        for task in tasks:
            task.cancel()
        await gather(*tasks, return_exceptions=True)
        logger.info("All background tasks completed")

    await app.state.registry.close_all()
    app.state.rate_limiter.reset()

    logger.info("Application shutdown complete")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    await startup(app)
    try:
        yield
    finally:
        await shutdown(app)


def application() -> FastAPI:
    """
    Initializes and configures the FastAPI application.

    Creates one instance of each service and stores it on app.state:
    - `rate_limiter`: sliding-window limiter for link attempts
    - `admission_gate`: deny-list, rate limit and user-agent checks
    - `registry`: the authoritative map of connected clients
    - `distributor`: payload validation and broadcast

    Routers are collected from `api/http` and `api/ws/consumers`, and the
    request size limit and security headers middlewares are installed.
    """
    app = FastAPI(
        title="linkhub",
        description="Client connection registry and command distribution",
        version=APP_VERSION,
        lifespan=lifespan,
    )

    rate_limiter = RateLimiter()
    registry = ClientRegistry()

    app.state.started_at = time.monotonic()
    app.state.rate_limiter = rate_limiter
    app.state.admission_gate = AdmissionGate(
        DenyList(app_settings.DENY_LIST_FILE), rate_limiter
    )
    app.state.registry = registry
    app.state.distributor = CommandDistributor(registry)

    app.include_router(collect_subrouters())

    # Middlewares (execute in REVERSE order of registration)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestSizeLimitMiddleware)

    return app


app = application()  # Need for fastapi cli
