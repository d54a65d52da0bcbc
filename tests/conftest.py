"""
tests/conftest.py

Shared pytest fixtures used by both unit and integration test suites.
All HTTP fixtures use respx.mock; no real network calls are made in any test.
"""

from __future__ import annotations

import logging

import httpx
import pytest
import respx

from repositories.identifier_cache import IdentifierCache


@pytest.fixture(autouse=True)
def _reset_root_logging():
    """
    Removes handlers installed by configure_logging() during a test.

    CliRunner swaps sys.stdout per invocation; a handler left behind would
    keep writing to a closed stream in later tests.
    """
    root = logging.getLogger()
    before = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in before:
            root.removeHandler(handler)
    root.setLevel(level)


# ---------------------------------------------------------------------------
# HTTP mock fixture: intercepts all httpx calls
# ---------------------------------------------------------------------------


@pytest.fixture()
def mock_http():
    """
    Yields a respx router that intercepts all httpx.AsyncClient calls.

    No real network traffic is allowed during tests. Use this fixture
    wherever a service or client would normally make an outbound request.
    """
    with respx.mock(assert_all_called=False) as router:
        yield router


# ---------------------------------------------------------------------------
# Shared httpx.AsyncClient fixture
# ---------------------------------------------------------------------------


@pytest.fixture()
async def http_client():
    """
    Yields a real httpx.AsyncClient instance for use in tests.

    Pair with the mock_http fixture so all requests are intercepted by respx.
    The client is closed after each test.
    """
    async with httpx.AsyncClient() as client:
        yield client


# ---------------------------------------------------------------------------
# Time and cache fixtures
# ---------------------------------------------------------------------------


class FakeClock:
    """A manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def clock() -> FakeClock:
    """Yields a FakeClock starting at t=1000s."""
    return FakeClock()


@pytest.fixture()
def cache(clock: FakeClock) -> IdentifierCache:
    """
    Yields a fresh IdentifierCache driven by the fake clock.

    Capacity 3 fits one zone plus two records, as in the default scenario.
    """
    return IdentifierCache(capacity=3, clock=clock)
