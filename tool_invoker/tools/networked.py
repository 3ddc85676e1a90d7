"""
Networked Tool Adapter

This module turns the abstract tool contract into one logical HTTP
operation with a resilience layer:

- Retry with linear backoff: after the n-th failed attempt the adapter
  waits ``retry_delay_ms * n`` before trying again, up to
  ``retry_attempts`` retries after the first try.
- Rate-limit honoring: a 429 response is not a failure. The adapter waits
  for the server's Retry-After hint (or ``rate_limit_delay_ms``) and tries
  again without consuming a retry. Rate-limit waits have their own cap,
  ``max_rate_limit_waits`` (None for unbounded).
- Single-flight cancellation: starting a call cancels the previous call's
  token. Each call is tagged with a generation; only the current generation
  may write last_result, last_error and is_loading.

Cancellation (CancellationError) is terminal: never retried, never stored
as last_error.

Pattern: Adapter (Tool Descriptor over a Transport collaborator)
Pattern: Retry with backoff at the orchestration level
"""

import time
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Awaitable, Callable, Generic, Literal, Optional, TypeVar, Union

import httpx
from pydantic import BaseModel, Field

from tool_invoker.clients.cancellation import CancellationToken, cancellable_sleep
from tool_invoker.clients.http import HttpxTransport, Transport
from tool_invoker.core.config import Settings, get_settings
from tool_invoker.core.exceptions import (
    CancellationError,
    ErrorCode,
    RateLimitExceededError,
    TransportError,
)
from tool_invoker.models.domain import (
    ErrorDetails,
    ExecutionContext,
    ExecutionMetadata,
    ToolCategory,
    ToolFailure,
    ToolResult,
    ToolSuccess,
    now_ms,
)
from tool_invoker.observability.logging import get_logger
from tool_invoker.observability.metrics import record_rate_limit_wait, record_retry
from tool_invoker.schema.adapters import as_schema
from tool_invoker.tools.descriptor import ToolDescriptor

logger = get_logger(__name__)

P = TypeVar("P")
R = TypeVar("R")

RATE_LIMIT_STATUS = 429

TRANSPORT_ERROR_SUGGESTIONS = ["Check your connection", "Try again later"]

Sleeper = Callable[[float, CancellationToken], Awaitable[None]]
QueryValue = Union[str, int, float, bool]


# =============================================================================
# Configuration
# =============================================================================


class APIConfig(BaseModel):
    """
    Configuration of a networked tool.

    Attributes:
        base_url: Prefix of every request URL.
        headers: Default headers sent with every request.
        timeout_ms: Per-call timeout, enforced by the transport.
        retry_attempts: Retries after the first try (0 disables retrying).
        retry_delay_ms: Base interval of the linear backoff.
        rate_limit_delay_ms: Wait used when a 429 carries no Retry-After.
        max_rate_limit_waits: Cap on rate-limit waits per call (None: no cap).
    """

    base_url: str = Field(..., description="Base URL of the API")
    headers: dict[str, str] = Field(default_factory=dict)
    timeout_ms: Optional[float] = Field(default=None, gt=0)
    retry_attempts: int = Field(default=0, ge=0)
    retry_delay_ms: float = Field(default=1000, ge=0)
    rate_limit_delay_ms: float = Field(default=5000, ge=0)
    max_rate_limit_waits: Optional[int] = Field(default=10, ge=1)

    model_config = {"frozen": True}

    @classmethod
    def from_settings(
        cls,
        base_url: str,
        settings: Optional[Settings] = None,
        **overrides: Any,
    ) -> "APIConfig":
        """Build a config whose defaults come from Settings."""
        settings = settings or get_settings()
        values: dict[str, Any] = {
            "base_url": base_url,
            "timeout_ms": settings.http_timeout_seconds * 1000,
            "retry_attempts": settings.default_retry_attempts,
            "retry_delay_ms": settings.default_retry_delay_ms,
            "rate_limit_delay_ms": settings.default_rate_limit_delay_ms,
            "max_rate_limit_waits": settings.max_rate_limit_waits,
        }
        values.update(overrides)
        return cls(**values)


class RequestSpec(BaseModel):
    """
    One logical request, produced from the tool's parameters.

    Attributes:
        endpoint: Path appended to the base URL.
        method: HTTP method.
        data: JSON body (sent for POST and PUT only).
        query_params: Query string parameters.
    """

    endpoint: str = Field(..., description="Endpoint path")
    method: Literal["GET", "POST", "PUT", "DELETE"] = "GET"
    data: Any = None
    query_params: Optional[dict[str, QueryValue]] = None


# =============================================================================
# Helpers
# =============================================================================


def build_url(
    base_url: str, endpoint: str, query_params: Optional[dict[str, QueryValue]] = None
) -> str:
    """
    Join base URL and endpoint and append query parameters.

    Example:
        >>> build_url("https://api.test", "/search", {"q": "py", "exact": True})
        'https://api.test/search?q=py&exact=true'
    """
    url = f"{base_url}{endpoint}"
    if not query_params:
        return url
    return str(httpx.URL(url).copy_merge_params(query_params))


def parse_retry_after(value: Optional[str]) -> Optional[float]:
    """
    Parse a Retry-After header into seconds.

    Accepts delta-seconds or an HTTP date. Returns None for missing,
    malformed or non-positive hints.
    """
    if not value:
        return None
    try:
        seconds = float(value)
    except ValueError:
        try:
            when = parsedate_to_datetime(value)
        except (TypeError, ValueError):
            return None
        if when.tzinfo is None:
            when = when.replace(tzinfo=timezone.utc)
        seconds = (when - datetime.now(timezone.utc)).total_seconds()
    return seconds if seconds > 0 else None


# =============================================================================
# NetworkedToolAdapter
# =============================================================================


class NetworkedToolAdapter(Generic[P, R]):
    """
    Tool whose execution is one resilient request/response exchange.

    Attributes:
        name: Tool name.
        config: The APIConfig in effect.
        tool: The ToolDescriptor to register or hand to an orchestrator.

    Example:
        >>> adapter = NetworkedToolAdapter(
        ...     name="weather",
        ...     description="Current weather for a city",
        ...     api_config=APIConfig(base_url="https://api.example.com", retry_attempts=2),
        ...     parameters=PydanticSchema(WeatherParams),
        ...     params_to_request=lambda p: RequestSpec(
        ...         endpoint="/weather", query_params={"city": p.city}
        ...     ),
        ...     response_to_result=lambda body: body["current"],
        ...     transport=HttpxTransport(),
        ... )
        >>> orchestrator = ExecutionOrchestrator(adapter.tool, {"city": "Oslo"})
    """

    def __init__(
        self,
        name: str,
        description: str,
        api_config: APIConfig,
        parameters: Any,
        params_to_request: Callable[[P], RequestSpec],
        response_to_result: Callable[[Any], R],
        transport: Optional[Transport] = None,
        category: ToolCategory = ToolCategory.API,
        metadata: Optional[dict[str, Any]] = None,
        on_success: Optional[Callable[[R], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
        on_retry: Optional[Callable[[int, Exception], None]] = None,
        on_rate_limit: Optional[Callable[[float], None]] = None,
        sleep: Optional[Sleeper] = None,
    ) -> None:
        """
        Initialize the adapter.

        Args:
            name: Tool name.
            description: Tool description.
            api_config: Base URL, headers and resilience policy.
            parameters: Schema, pydantic model class, or validator callable.
            params_to_request: Maps parsed parameters to a RequestSpec.
            response_to_result: Maps the decoded JSON body to the result.
            transport: Transport collaborator. When omitted an HttpxTransport
                owned by this adapter is used; its client is created on the
                first request and closed by aclose().
            category: Tool kind (API unless the caller knows better).
            metadata: Extra descriptor metadata.
            on_success: Called with each committed result.
            on_error: Called with each terminal (non-cancellation) error.
            on_retry: Called with (attempt, error) before each backoff wait.
            on_rate_limit: Called with the wait in ms before each 429 wait.
            sleep: Waits ``seconds`` unless the token is cancelled.
        """
        self.name = name
        self.config = api_config
        self._params_to_request = params_to_request
        self._response_to_result = response_to_result
        self._on_success = on_success
        self._on_error = on_error
        self._on_retry = on_retry
        self._on_rate_limit = on_rate_limit
        self._sleep: Sleeper = sleep or cancellable_sleep

        if transport is not None:
            self._transport: Transport = transport
            self._owned_transport: Optional[HttpxTransport] = None
        else:
            timeout = api_config.timeout_ms / 1000 if api_config.timeout_ms else None
            self._owned_transport = HttpxTransport(timeout_seconds=timeout)
            self._transport = self._owned_transport

        self._last_result: Optional[R] = None
        self._last_error: Optional[Exception] = None
        self._is_loading = False
        self._generation = 0
        self._inflight: Optional[CancellationToken] = None

        self.tool = ToolDescriptor(
            name=name,
            description=description,
            parameters=as_schema(parameters),
            category=category,
            metadata={"base_url": api_config.base_url, **(metadata or {})},
            execute=self._execute_tool,
        )

    # =========================================================================
    # State
    # =========================================================================

    @property
    def last_result(self) -> Optional[R]:
        return self._last_result

    @property
    def last_error(self) -> Optional[Exception]:
        return self._last_error

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    def reset(self) -> None:
        """Cancel any in-flight call and clear result, error and loading flag."""
        self._generation += 1
        if self._inflight is not None:
            self._inflight.cancel("Adapter reset")
            self._inflight = None
        self._last_result = None
        self._last_error = None
        self._is_loading = False

    async def aclose(self) -> None:
        """Close the transport if this adapter created it."""
        if self._owned_transport is not None:
            await self._owned_transport.aclose()

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    # =========================================================================
    # Request Loop
    # =========================================================================

    async def execute_api(
        self,
        params: P,
        cancellation: Optional[CancellationToken] = None,
        timeout_ms: Optional[float] = None,
    ) -> R:
        """
        Perform the request with retries, rate-limit waits and cancellation.

        Args:
            params: Parsed tool parameters.
            cancellation: Caller's token; cancelling it cancels this call.
            timeout_ms: Per-call timeout (default: config.timeout_ms).

        Returns:
            The mapped result.

        Raises:
            CancellationError: If cancelled or superseded by a newer call.
            RateLimitExceededError: If the rate-limit wait cap is exceeded.
            Exception: The last attempt's error once retries are exhausted.
        """
        self._generation += 1
        generation = self._generation

        if self._inflight is not None:
            self._inflight.cancel("Superseded by a newer request")
        token = CancellationToken()
        self._inflight = token
        unlink = token.link(cancellation)

        self._is_loading = True
        self._last_error = None
        try:
            return await self._request_loop(params, token, generation, timeout_ms)
        finally:
            unlink()
            if self._is_current(generation):
                self._is_loading = False
                self._inflight = None

    async def _request_loop(
        self,
        params: P,
        token: CancellationToken,
        generation: int,
        timeout_ms: Optional[float],
    ) -> R:
        request = self._params_to_request(params)
        url = build_url(self.config.base_url, request.endpoint, request.query_params)
        headers = {"Content-Type": "application/json", **self.config.headers}
        body = request.data if request.method in ("POST", "PUT") else None
        effective_timeout = timeout_ms if timeout_ms is not None else self.config.timeout_ms
        timeout = effective_timeout / 1000 if effective_timeout is not None else None

        attempt = 0
        rate_limit_waits = 0
        while True:
            try:
                response = await self._transport.send(
                    request.method,
                    url,
                    headers=headers,
                    json=body,
                    cancellation=token,
                    timeout=timeout,
                )

                if response.status_code == RATE_LIMIT_STATUS:
                    rate_limit_waits += 1
                    await self._wait_for_rate_limit(response, rate_limit_waits, token)
                    continue

                if response.is_error:
                    raise TransportError(
                        f"API error: {response.status_code} {response.reason_phrase}",
                        status_code=response.status_code,
                        url=url,
                    )

                result = self._response_to_result(response.json())
            except CancellationError as e:
                logger.info("request cancelled", tool=self.name, reason=e.reason)
                raise
            except RateLimitExceededError as e:
                self._record_terminal_error(e, generation)
                raise
            except Exception as e:
                attempt += 1
                if attempt > self.config.retry_attempts:
                    self._record_terminal_error(e, generation)
                    raise

                delay_ms = self.config.retry_delay_ms * attempt
                logger.warning(
                    "request failed, retrying",
                    tool=self.name,
                    attempt=attempt,
                    max_retries=self.config.retry_attempts,
                    delay_ms=delay_ms,
                    error=str(e),
                )
                record_retry(self.name)
                self._call_observer("on_retry", self._on_retry, attempt, e)
                await self._sleep(delay_ms / 1000, token)
                continue

            self._record_success(result, generation)
            return result

    async def _wait_for_rate_limit(
        self, response: httpx.Response, waits: int, token: CancellationToken
    ) -> None:
        cap = self.config.max_rate_limit_waits
        if cap is not None and waits > cap:
            raise RateLimitExceededError(
                f"Rate limited {waits} times, giving up after {cap} waits", waits=cap
            )

        hint = parse_retry_after(response.headers.get("retry-after"))
        delay_ms = hint * 1000 if hint is not None else self.config.rate_limit_delay_ms

        logger.warning("rate limited, waiting", tool=self.name, delay_ms=delay_ms, wait=waits)
        record_rate_limit_wait(self.name)
        self._call_observer("on_rate_limit", self._on_rate_limit, delay_ms)
        await self._sleep(delay_ms / 1000, token)

    def _record_success(self, result: R, generation: int) -> None:
        if not self._is_current(generation):
            logger.debug("superseded result discarded", tool=self.name)
            return
        self._last_result = result
        self._call_observer("on_success", self._on_success, result)

    def _record_terminal_error(self, error: Exception, generation: int) -> None:
        if not self._is_current(generation):
            logger.debug("superseded error discarded", tool=self.name, error=str(error))
            return
        logger.error("request failed", tool=self.name, error=str(error))
        self._last_error = error
        self._call_observer("on_error", self._on_error, error)

    def _call_observer(
        self, event: str, callback: Optional[Callable[..., None]], *args: Any
    ) -> None:
        if callback is None:
            return
        try:
            callback(*args)
        except Exception:
            logger.exception("observer failed", tool=self.name, observer=event)

    # =========================================================================
    # Tool Execution
    # =========================================================================

    async def _execute_tool(self, params: P, context: ExecutionContext) -> ToolResult:
        started = time.monotonic()
        try:
            data = await self.execute_api(
                params,
                cancellation=context.cancellation,
                timeout_ms=context.timeout_ms,
            )
        except CancellationError as e:
            return ToolFailure(
                error=e.message,
                error_details=ErrorDetails(
                    code=ErrorCode.CANCELLED.value,
                    details={"reason": e.reason},
                ),
                metadata=self._metadata(started, context),
            )
        except Exception as e:
            message = str(e) or type(e).__name__
            details: dict[str, Any] = {"message": message}
            status_code = getattr(e, "status_code", None)
            if status_code is not None:
                details["status_code"] = status_code
            return ToolFailure(
                error=message,
                error_details=ErrorDetails(
                    code=ErrorCode.TRANSPORT_ERROR.value,
                    details=details,
                    suggestions=list(TRANSPORT_ERROR_SUGGESTIONS),
                ),
                metadata=self._metadata(started, context),
            )

        return ToolSuccess(data=data, metadata=self._metadata(started, context))

    @staticmethod
    def _metadata(started: float, context: ExecutionContext) -> ExecutionMetadata:
        return ExecutionMetadata(
            duration_ms=(time.monotonic() - started) * 1000,
            completed_at=now_ms(),
            tool_call_id=context.tool_call_id,
        )
