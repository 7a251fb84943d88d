"""Shared pytest fixtures for trailwake tests.

Test Tiers:
- unit: Fast tests with fixtures, no network (default)
- live: Real API tests against Open-Meteo and sunrisesunset.io

Run live tests with: pytest -m live --run-live
"""

from unittest.mock import Mock

import pytest
import requests

from trailwake.cache import MemoryStore, TTLCache


def pytest_addoption(parser):
    """Add command line options for test configuration."""
    parser.addoption(
        "--run-live",
        action="store_true",
        default=False,
        help="Run live API tests (slow, requires network)",
    )


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: fast unit tests using fixtures")
    config.addinivalue_line("markers", "live: real API tests (slow, requires network)")


def pytest_collection_modifyitems(config, items):
    """Skip live tests unless --run-live is specified."""
    if config.getoption("--run-live"):
        return

    skip_live = pytest.mark.skip(reason="need --run-live option to run")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)


class FakeClock:
    """Manually advanced clock returning epoch seconds."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    """Clock fixed at 2023-11-14T22:13:20Z."""
    return FakeClock()


@pytest.fixture
def memory_store() -> MemoryStore:
    """Empty in-memory store."""
    return MemoryStore()


@pytest.fixture
def cache(memory_store, clock) -> TTLCache:
    """TTL cache over an in-memory store with a controllable clock."""
    return TTLCache(memory_store, clock=clock)


def make_response(payload=None, status_code: int = 200, json_error: bool = False) -> Mock:
    """Build a mock requests.Response."""
    response = Mock()
    response.status_code = status_code
    if json_error:
        response.json.side_effect = ValueError("No JSON object could be decoded")
    else:
        response.json.return_value = payload
    if status_code >= 400:
        error = requests.HTTPError(f"{status_code} Error")
        error.response = response
        response.raise_for_status.side_effect = error
    else:
        response.raise_for_status.return_value = None
    return response


@pytest.fixture
def mock_session() -> Mock:
    """Mock requests session; set .get.return_value or .get.side_effect per test."""
    return Mock()


@pytest.fixture
def response_factory():
    """Factory for mock HTTP responses."""
    return make_response
