"""
Pytest configuration for the tool invoker test suite.

This configuration sets up:
- Test markers for categorization
- Isolation fixtures (settings cache, global registry)
- A scripted fake Transport following the FakeRepository pattern
- A recording sleeper so backoff and rate-limit waits can be asserted
  without real waiting
"""

import asyncio
from typing import Any, Callable, Optional, Union

import httpx
import pytest

from tool_invoker.clients.cancellation import CancellationToken
from tool_invoker.core.config import Settings, get_settings
from tool_invoker.core.exceptions import CancellationError
from tool_invoker.tools.registry import reset_tool_registry


# =============================================================================
# Test Markers
# =============================================================================


def pytest_configure(config):
    """
    Register custom markers for test categorization.

    - unit: Tests for individual components
    - slow: Tests that take a long time to run
    """
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "slow: Tests that take a long time to run")


# =============================================================================
# Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def _isolate_globals():
    """Clear the settings cache and the global registry around each test."""
    get_settings.cache_clear()
    reset_tool_registry()
    yield
    get_settings.cache_clear()
    reset_tool_registry()


@pytest.fixture
def test_settings() -> Settings:
    """Settings with small, deterministic values."""
    return Settings(
        service_name="tool-invoker-test",
        log_level="DEBUG",
        http_timeout_seconds=5.0,
        default_retry_attempts=2,
        default_retry_delay_ms=100,
        default_rate_limit_delay_ms=500,
        max_rate_limit_waits=3,
    )


# =============================================================================
# Fake Transport
# =============================================================================

ScriptStep = Union[httpx.Response, Exception, Callable[..., Any]]


class FakeTransport:
    """
    Transport double that answers from a script.

    Each call to send() consumes the next step: an httpx.Response is
    returned, an exception is raised, and a callable is awaited with the
    call's keyword arguments. ``block()`` makes the next call wait until
    its cancellation token fires, the way HttpxTransport behaves for a
    request that never completes.
    """

    def __init__(self, steps: Optional[list[ScriptStep]] = None) -> None:
        self.steps: list[ScriptStep] = list(steps or [])
        self.calls: list[dict[str, Any]] = []
        self.started = asyncio.Event()

    def script(self, *steps: ScriptStep) -> "FakeTransport":
        self.steps.extend(steps)
        return self

    def block(self) -> "FakeTransport":
        return self.script(_wait_for_cancellation)

    @property
    def call_count(self) -> int:
        return len(self.calls)

    async def send(
        self,
        method: str,
        url: str,
        *,
        headers: Optional[dict[str, str]] = None,
        json: Any = None,
        cancellation: Optional[CancellationToken] = None,
        timeout: Optional[float] = None,
    ) -> httpx.Response:
        call = {
            "method": method,
            "url": url,
            "headers": headers,
            "json": json,
            "cancellation": cancellation,
            "timeout": timeout,
        }
        self.calls.append(call)
        self.started.set()
        if cancellation is not None:
            cancellation.raise_if_cancelled()
        if not self.steps:
            raise AssertionError(f"Unexpected request: {method} {url}")

        step = self.steps.pop(0)
        if isinstance(step, httpx.Response):
            return step
        if isinstance(step, Exception):
            raise step
        return await step(**call)


async def _wait_for_cancellation(
    cancellation: Optional[CancellationToken] = None, **_: Any
) -> httpx.Response:
    assert cancellation is not None, "blocking step needs a cancellation token"
    await cancellation.wait()
    raise CancellationError(cancellation.reason or "Request cancelled")


class RecordingSleeper:
    """Sleeper that records requested waits and returns immediately."""

    def __init__(self) -> None:
        self.waits: list[float] = []

    async def __call__(self, seconds: float, token: CancellationToken) -> None:
        token.raise_if_cancelled()
        self.waits.append(seconds)
        await asyncio.sleep(0)
        token.raise_if_cancelled()


@pytest.fixture
def fake_transport() -> FakeTransport:
    """A FakeTransport with an empty script."""
    return FakeTransport()


@pytest.fixture
def sleeper() -> RecordingSleeper:
    """A RecordingSleeper with no waits recorded."""
    return RecordingSleeper()


@pytest.fixture
def transport_factory() -> Callable[..., FakeTransport]:
    """Build additional FakeTransports from a list of steps."""
    return FakeTransport
