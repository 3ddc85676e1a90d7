"""
Prometheus Metrics Module

This module provides Prometheus metrics for tool invocation.

Metrics:
- tool_invoker_executions_total: executions by tool and outcome
- tool_invoker_execution_duration_seconds: execution latency by tool
- tool_invoker_retries_total: retries scheduled by networked tools
- tool_invoker_rate_limit_waits_total: rate-limit waits honored
- tool_invoker_validation_failures_total: drafts rejected before execution

Pattern: Metrics collection for observability
"""

from prometheus_client import REGISTRY, Counter, Histogram, generate_latest


# =============================================================================
# Execution Metrics
# =============================================================================

EXECUTIONS_TOTAL = Counter(
    name="tool_invoker_executions_total",
    documentation="Total number of tool executions by outcome",
    labelnames=["tool", "outcome"],
)

EXECUTION_DURATION_SECONDS = Histogram(
    name="tool_invoker_execution_duration_seconds",
    documentation="Tool execution duration in seconds",
    labelnames=["tool"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

VALIDATION_FAILURES_TOTAL = Counter(
    name="tool_invoker_validation_failures_total",
    documentation="Total number of parameter drafts rejected by validation",
    labelnames=["tool"],
)

# =============================================================================
# Resilience Metrics
# =============================================================================

RETRIES_TOTAL = Counter(
    name="tool_invoker_retries_total",
    documentation="Total number of retries scheduled by networked tools",
    labelnames=["tool"],
)

RATE_LIMIT_WAITS_TOTAL = Counter(
    name="tool_invoker_rate_limit_waits_total",
    documentation="Total number of rate-limit waits honored by networked tools",
    labelnames=["tool"],
)


# =============================================================================
# Helper Functions
# =============================================================================


def record_execution(tool: str, outcome: str, duration_seconds: float) -> None:
    """
    Record a settled tool execution.

    Args:
        tool: Tool name
        outcome: "success", "failure" or "cancelled"
        duration_seconds: Wall time from start to settlement
    """
    EXECUTIONS_TOTAL.labels(tool=tool, outcome=outcome).inc()
    EXECUTION_DURATION_SECONDS.labels(tool=tool).observe(duration_seconds)


def record_validation_failure(tool: str) -> None:
    """Record a parameter draft rejected by validation."""
    VALIDATION_FAILURES_TOTAL.labels(tool=tool).inc()


def record_retry(tool: str) -> None:
    """Record a retry scheduled after a failed attempt."""
    RETRIES_TOTAL.labels(tool=tool).inc()


def record_rate_limit_wait(tool: str) -> None:
    """Record a rate-limit wait."""
    RATE_LIMIT_WAITS_TOTAL.labels(tool=tool).inc()


def generate_metrics() -> str:
    """
    Generate Prometheus metrics text format.

    Returns:
        Prometheus exposition format text
    """
    return generate_latest(REGISTRY).decode("utf-8")
