"""
Request-scoped tracing context using Langfuse SDK v3.

Each chat request gets a root span; trace entries become event observations
linked to it through an explicit trace_context, so nesting is correct
regardless of OTEL context state across awaits.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Optional

from langfuse.types import TraceContext

from .client import get_tracing_client

logger = logging.getLogger(__name__)


@dataclass
class TracingContext:
    """
    Request-scoped tracing context.

    All methods are no-ops when the tracing client is missing or disabled.
    """

    execution_id: str
    session_id: Optional[str] = None
    _context_manager: Any = field(default=None, repr=False)
    _root_span: Any = field(default=None, repr=False)
    _enabled: bool = field(default=False, repr=False)
    _start_time: float = field(default_factory=time.time, repr=False)
    _trace_id: Optional[str] = field(default=None, repr=False)
    _root_span_id: Optional[str] = field(default=None, repr=False)

    def __post_init__(self):
        client = get_tracing_client()
        self._enabled = client is not None and client.enabled

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def active(self) -> bool:
        """True between a successful start_trace() and end_trace()."""
        return self._root_span is not None

    def start_trace(
        self,
        name: str = "chat_request",
        input: Optional[Any] = None,
        metadata: Optional[dict] = None,
    ) -> None:
        """
        Start the root span for this request.

        Args:
            name: Name for the trace
            input: Input to record on the root span
            metadata: Additional metadata
        """
        if not self._enabled:
            return

        client = get_tracing_client()
        if not client or not client.enabled:
            return

        try:
            trace_metadata = {"execution_id": self.execution_id}
            if metadata:
                trace_metadata.update(metadata)

            self._context_manager, self._root_span = client.start_chat_span(
                name=name,
                session_id=self.session_id,
                input=input,
                metadata=trace_metadata,
            )
            self._trace_id = getattr(self._root_span, "trace_id", None)
            self._root_span_id = getattr(self._root_span, "id", None)
            self._start_time = time.time()
            logger.debug(
                f"[{self.execution_id}] Trace started: trace_id={self._trace_id}"
            )
        except Exception as e:
            logger.warning(f"[{self.execution_id}] Failed to start trace: {e}")
            self._root_span = None

    def get_trace_context(self) -> Optional[TraceContext]:
        """TraceContext that makes the root span the parent of new observations."""
        if not self._trace_id or not self._root_span_id:
            return None
        return TraceContext(trace_id=self._trace_id, parent_span_id=self._root_span_id)

    def event(
        self,
        name: str,
        input: Optional[Any] = None,
        metadata: Optional[dict] = None,
        level: str = "DEFAULT",
    ) -> None:
        """Record a point-in-time event under the root span."""
        if not self._enabled or not self._root_span:
            return

        client = get_tracing_client()
        if not client or not client.client:
            return

        try:
            client.client.create_event(
                trace_context=self.get_trace_context(),
                name=name,
                input=input,
                metadata=metadata,
                level=level,
            )
        except Exception as e:
            logger.warning(f"[{self.execution_id}] Failed to record event '{name}': {e}")

    def end_trace(
        self,
        output: Optional[str] = None,
        status: str = "success",
        metadata: Optional[dict] = None,
    ) -> None:
        """
        End the root span.

        Args:
            output: Final output to record
            status: Status of the request (success, error, cancelled)
            metadata: Additional metadata to add
        """
        if not self._enabled or not self._root_span:
            return

        try:
            duration_ms = (time.time() - self._start_time) * 1000
            self._root_span.update(
                output=output,
                metadata={
                    "status": status,
                    "duration_ms": round(duration_ms, 2),
                    **(metadata or {}),
                },
            )
            if self._context_manager:
                self._context_manager.__exit__(None, None, None)
        except Exception as e:
            logger.warning(f"[{self.execution_id}] Failed to end trace: {e}")
        finally:
            self._root_span = None
            self._context_manager = None
