"""
Clients Package

Transport collaborators for networked tools and the cancellation tokens
they observe.
"""

from tool_invoker.clients.cancellation import CancellationToken, cancellable_sleep
from tool_invoker.clients.http import HttpxTransport, Transport, create_http_client

__all__ = [
    "CancellationToken",
    "cancellable_sleep",
    "HttpxTransport",
    "Transport",
    "create_http_client",
]
