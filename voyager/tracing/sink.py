"""Event sink that mirrors orchestration trace entries into Langfuse."""

from ..orchestration.events import EventKind, TraceEntry
from .context import TracingContext


class LangfuseEventSink:
    """
    Records every trace entry as a Langfuse event under a request's root span.

    ERROR entries are recorded at level ERROR. Does nothing when the
    tracing context is disabled.
    """

    def __init__(self, tracing_context: TracingContext):
        self.tracing_context = tracing_context

    def on_event(self, entry: TraceEntry) -> None:
        self.tracing_context.event(
            name=entry.label,
            input=entry.payload,
            metadata={
                "entry_id": entry.id,
                "kind": entry.kind.value,
                "timestamp": entry.timestamp,
            },
            level="ERROR" if entry.kind is EventKind.ERROR else "DEFAULT",
        )
