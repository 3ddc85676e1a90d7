"""
Observability Package

This package provides observability infrastructure including:
- Structured JSON logging bound to the current tool call
- Prometheus metrics for executions, retries and rate-limit waits
"""

from tool_invoker.observability.logging import (
    clear_tool_call_id,
    configure_logging,
    get_logger,
    get_tool_call_id,
    set_tool_call_id,
    tool_call_context,
)
from tool_invoker.observability.metrics import (
    generate_metrics,
    record_execution,
    record_rate_limit_wait,
    record_retry,
    record_validation_failure,
)

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    "set_tool_call_id",
    "get_tool_call_id",
    "clear_tool_call_id",
    "tool_call_context",
    # Metrics
    "generate_metrics",
    "record_execution",
    "record_validation_failure",
    "record_retry",
    "record_rate_limit_wait",
]
