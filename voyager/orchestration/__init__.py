"""
Tool-augmented chat orchestration.

The loop drives model calls and tool dispatch for one chat request and
publishes an ordered event trace to an EventSink.
"""

from .events import EventKind, EventSink, TraceEntry, TraceRecorder
from .loop import (
    BUDGET_EXHAUSTED_MESSAGE,
    MAX_ITERATIONS,
    SYSTEM_PROMPT,
    LoopOutcome,
    LoopState,
    OrchestrationLoop,
)
from .sinks import CompositeEventSink, LoggingEventSink, QueueEventSink
from .stats import SessionStats
from .tool_defs import build_tool_definitions

__all__ = [
    "EventKind",
    "EventSink",
    "TraceEntry",
    "TraceRecorder",
    "BUDGET_EXHAUSTED_MESSAGE",
    "MAX_ITERATIONS",
    "SYSTEM_PROMPT",
    "LoopOutcome",
    "LoopState",
    "OrchestrationLoop",
    "CompositeEventSink",
    "LoggingEventSink",
    "QueueEventSink",
    "SessionStats",
    "build_tool_definitions",
]
