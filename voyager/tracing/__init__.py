"""
Langfuse tracing integration for Voyager.

Mirrors the orchestration trace of each chat request into Langfuse.
"""

from .client import (
    TracingClient,
    init_tracing_client,
    get_tracing_client,
    shutdown_tracing,
)
from .context import TracingContext
from .sink import LangfuseEventSink

__all__ = [
    "TracingClient",
    "init_tracing_client",
    "get_tracing_client",
    "shutdown_tracing",
    "TracingContext",
    "LangfuseEventSink",
]
