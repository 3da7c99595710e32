"""
Pytest configuration and fixtures for testing.

This module provides shared fixtures for the registry, admission components
and a fully wired application.
"""

import pytest
from fastapi.testclient import TestClient

from linkhub import application
from linkhub.managers.admission_gate import AdmissionGate
from linkhub.managers.client_registry import ClientRegistry
from linkhub.managers.command_distributor import CommandDistributor
from linkhub.utils.deny_list import DenyList
from linkhub.utils.rate_limiter import RateLimiter
from tests.mocks.websocket_mocks import FakeClock


@pytest.fixture
def clock():
    """
    Provides a manually advanced clock.

    Returns:
        FakeClock: Clock starting at t=1000
    """
    return FakeClock()


@pytest.fixture
def rate_limiter(clock):
    """
    Provides a RateLimiter with N=10, W=60s driven by the fake clock.

    Returns:
        RateLimiter: Enabled limiter
    """
    return RateLimiter(limit=10, window_seconds=60, enabled=True, clock=clock)


@pytest.fixture
def deny_list_path(tmp_path):
    """
    Provides the path of an (initially absent) deny-list file.

    Returns:
        Path: tmp_path / "denylist.txt"
    """
    return tmp_path / "denylist.txt"


@pytest.fixture
def deny_list(deny_list_path):
    return DenyList(deny_list_path)


@pytest.fixture
def admission_gate(deny_list, rate_limiter):
    """
    Provides an AdmissionGate accepting only "Mozilla" user agents.

    Returns:
        AdmissionGate: Gate wired to the fixture deny-list and limiter
    """
    return AdmissionGate(deny_list, rate_limiter, ["Mozilla"])


@pytest.fixture
def registry():
    """
    Provides an empty ClientRegistry with a short send timeout.

    Returns:
        ClientRegistry: Empty registry
    """
    return ClientRegistry(send_timeout=0.5)


@pytest.fixture
def distributor(registry):
    return CommandDistributor(registry)


@pytest.fixture
def app(deny_list, rate_limiter):
    """
    Create a fully wired application with test admission settings.

    The admission gate uses the fixture deny-list and rate limiter and only
    accepts "Mozilla" user agents.

    Returns:
        FastAPI: Application instance
    """
    test_app = application()
    test_app.state.rate_limiter = rate_limiter
    test_app.state.admission_gate = AdmissionGate(
        deny_list, rate_limiter, ["Mozilla"]
    )
    return test_app


@pytest.fixture
def client(app):
    """
    Create a test client for the application (lifespan not started).

    Returns:
        TestClient: FastAPI test client instance.
    """
    return TestClient(app)

