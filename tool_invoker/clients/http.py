"""
HTTP Client Module

This module provides the transport collaborator used by networked tools:

- create_http_client(): factory for a pooled httpx.AsyncClient
- Transport: the protocol a networked tool needs from its transport
- HttpxTransport: Transport implementation over httpx that observes
  cancellation tokens and per-call timeouts

A networked tool is handed its transport or owns one; there is no
module-level client.

Pattern: Factory pattern for creating configured HTTP clients
Pattern: Adapter from httpx to the Transport protocol
"""

import asyncio
from typing import Any, Optional, Protocol

import httpx

from tool_invoker.clients.cancellation import CancellationToken
from tool_invoker.core.config import Settings, get_settings
from tool_invoker.core.exceptions import CancellationError, TransportError


# =============================================================================
# HTTP Client Factory
# =============================================================================


def create_http_client(
    base_url: Optional[str] = None,
    timeout_seconds: Optional[float] = None,
    max_connections: Optional[int] = None,
    max_keepalive: Optional[int] = None,
    headers: Optional[dict[str, str]] = None,
    settings: Optional[Settings] = None,
) -> httpx.AsyncClient:
    """
    Create a configured HTTP client with connection pooling and timeouts.

    Unset arguments fall back to Settings. Transport-level retries are left
    disabled: retries are the networked tool's job, and doing them twice
    would multiply the retry budget.

    Args:
        base_url: Base URL for all requests
        timeout_seconds: Request timeout in seconds
        max_connections: Maximum connections in pool
        max_keepalive: Maximum keepalive connections
        headers: Additional headers to include in all requests
        settings: Settings to read defaults from (default: get_settings())

    Returns:
        httpx.AsyncClient: Configured async HTTP client

    Example:
        >>> client = create_http_client(base_url="http://localhost:8081")
        >>> async with client:
        ...     response = await client.get("/search")
    """
    settings = settings or get_settings()

    timeout = timeout_seconds if timeout_seconds is not None else settings.http_timeout_seconds
    max_conn = max_connections if max_connections is not None else settings.max_connections
    max_keep = max_keepalive if max_keepalive is not None else settings.max_keepalive

    limits = httpx.Limits(
        max_connections=max_conn,
        max_keepalive_connections=max_keep,
    )

    default_headers = {
        "User-Agent": settings.user_agent,
        "Accept": "application/json",
    }
    if headers:
        default_headers.update(headers)

    return httpx.AsyncClient(
        base_url=base_url or "",
        timeout=httpx.Timeout(timeout),
        headers=default_headers,
        limits=limits,
    )


# =============================================================================
# Transport Protocol
# =============================================================================


class Transport(Protocol):
    """
    What a networked tool needs from its transport.

    Implementations perform exactly one request/response exchange per call.
    The returned httpx.Response exposes the status code, headers (including
    a Retry-After hint) and a body decoder (``response.json()``).
    """

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
        ...


# =============================================================================
# HttpxTransport
# =============================================================================


class HttpxTransport:
    """
    Transport over an httpx.AsyncClient.

    When a cancellation token is supplied the request is raced against it:
    if the token fires first the request task is cancelled and
    CancellationError is raised.

    Network failures and timeouts are raised as TransportError. Error
    statuses are returned as responses; classifying them is the caller's job.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        settings: Optional[Settings] = None,
        timeout_seconds: Optional[float] = None,
    ) -> None:
        """
        Initialize the transport.

        Without a client, one is created on first use and closed by aclose().

        Args:
            client: Pre-configured client (not closed by aclose()).
            settings: Settings for the client created when none is given.
            timeout_seconds: Default timeout of the created client.
        """
        self._client = client
        self._owns_client = client is None
        self._settings = settings
        self._timeout_seconds = timeout_seconds

    @property
    def client(self) -> httpx.AsyncClient:
        """The underlying client, created on first access when owned."""
        if self._client is None:
            self._client = create_http_client(
                timeout_seconds=self._timeout_seconds, settings=self._settings
            )
        return self._client

    async def aclose(self) -> None:
        """Close the HTTP client if owned by this instance and created."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()

    async def __aenter__(self) -> "HttpxTransport":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()

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
        if cancellation is None:
            return await self._request(method, url, headers, json, timeout)

        cancellation.raise_if_cancelled()

        request_task = asyncio.ensure_future(
            self._request(method, url, headers, json, timeout)
        )
        cancel_task = asyncio.ensure_future(cancellation.wait())
        try:
            done, _ = await asyncio.wait(
                {request_task, cancel_task},
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            cancel_task.cancel()
            if not request_task.done():
                request_task.cancel()
            await asyncio.gather(request_task, cancel_task, return_exceptions=True)

        if request_task in done:
            return request_task.result()
        raise CancellationError(cancellation.reason or "Request cancelled")

    async def _request(
        self,
        method: str,
        url: str,
        headers: Optional[dict[str, str]],
        json: Any,
        timeout: Optional[float],
    ) -> httpx.Response:
        kwargs: dict[str, Any] = {"headers": headers}
        if json is not None:
            kwargs["json"] = json
        if timeout is not None:
            kwargs["timeout"] = timeout

        try:
            return await self.client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            raise TransportError(f"Request timed out: {e}", url=url) from e
        except httpx.RequestError as e:
            raise TransportError(f"Request failed: {e}", url=url) from e
