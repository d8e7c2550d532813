"""
Event sink implementations.

The loop publishes trace entries synchronously; sinks decide where they go.
Transport details (sockets, log files, tracing backends) stay out of the loop.
"""

import asyncio
import json
import logging
from typing import Iterable, Optional

from .events import EventKind, EventSink, TraceEntry

logger = logging.getLogger(__name__)

# Dedicated logger so trace traffic can be routed separately from app logs.
events_logger = logging.getLogger("voyager.events")


class LoggingEventSink:
    """Mirror trace entries to the ``voyager.events`` logger."""

    def __init__(self, log: Optional[logging.Logger] = None):
        self.log = log or events_logger

    def on_event(self, entry: TraceEntry) -> None:
        level = logging.ERROR if entry.kind is EventKind.ERROR else logging.INFO
        self.log.log(level, "[%s] %s", entry.kind.value, entry.label)
        if self.log.isEnabledFor(logging.DEBUG):
            self.log.debug(
                "%s payload: %s",
                entry.id,
                json.dumps(entry.payload, default=str)[:2000],
            )


class QueueEventSink:
    """
    Publish trace entries onto an asyncio queue.

    A consumer (for example a WebSocket broadcaster) drains the queue at its
    own pace. When the queue is full the entry is dropped and counted.
    """

    def __init__(self, maxsize: int = 0):
        self.queue: asyncio.Queue[TraceEntry] = asyncio.Queue(maxsize=maxsize)
        self.dropped = 0

    def on_event(self, entry: TraceEntry) -> None:
        try:
            self.queue.put_nowait(entry)
        except asyncio.QueueFull:
            self.dropped += 1
            logger.warning("Event queue full, dropped %s entry %s", entry.kind.value, entry.id)


class CompositeEventSink:
    """Fan out each entry to several sinks, isolating failures per sink."""

    def __init__(self, sinks: Iterable[EventSink] = ()):
        self.sinks: list[EventSink] = list(sinks)

    def add(self, sink: EventSink) -> None:
        self.sinks.append(sink)

    def on_event(self, entry: TraceEntry) -> None:
        for sink in self.sinks:
            try:
                sink.on_event(entry)
            except Exception as e:
                logger.warning("Event sink %s failed: %s", type(sink).__name__, e)
