"""
Event trace for the orchestration loop.

Every significant loop action becomes one ``TraceEntry``. Entries are kept
in order on a ``TraceRecorder`` and published synchronously to an
``EventSink`` as they happen.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


class EventKind(str, Enum):
    """Kinds of trace entries."""

    SYSTEM = "SYSTEM"
    REQUEST = "REQUEST"
    TOOL_CALL = "TOOL_CALL"
    TOOL_RESULT = "TOOL_RESULT"
    RESPONSE = "RESPONSE"
    ERROR = "ERROR"


@dataclass(frozen=True)
class TraceEntry:
    """One record in the append-only event trace."""

    kind: EventKind
    label: str
    payload: dict = field(default_factory=dict)
    id: str = field(default_factory=lambda: f"evt_{uuid.uuid4().hex[:12]}")
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(timespec="milliseconds")
    )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.kind.value,
            "timestamp": self.timestamp,
            "label": self.label,
            "data": self.payload,
        }


@runtime_checkable
class EventSink(Protocol):
    """Receives each trace entry as it is produced."""

    def on_event(self, entry: TraceEntry) -> None:
        ...


class TraceRecorder:
    """
    Ordered trace for one loop run.

    Sink failures are logged and never reach the caller. Once closed, the
    recorder drops further entries.
    """

    def __init__(self, sink: Optional[EventSink] = None, execution_id: Optional[str] = None):
        self.sink = sink
        self.execution_id = execution_id
        self.entries: list[TraceEntry] = []
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        self._closed = True

    def emit(self, kind: EventKind, label: str, payload: Optional[dict] = None) -> Optional[TraceEntry]:
        """Record an entry and publish it. Returns None if the recorder is closed."""
        if self._closed:
            return None
        entry = TraceEntry(kind=kind, label=label, payload=payload or {})
        self.entries.append(entry)
        if self.sink is not None:
            try:
                self.sink.on_event(entry)
            except Exception as e:
                prefix = f"[{self.execution_id}] " if self.execution_id else ""
                logger.warning(
                    "%sEvent sink %s failed on %s: %s",
                    prefix,
                    type(self.sink).__name__,
                    entry.kind.value,
                    e,
                )
        return entry

    def of_kind(self, kind: EventKind) -> list[TraceEntry]:
        return [entry for entry in self.entries if entry.kind is kind]


# =============================================================================
# Entry builders
# =============================================================================


def request_entry(
    recorder: TraceRecorder,
    model: str,
    messages: list[dict],
    tool_names: list[str],
    iteration: int,
) -> Optional[TraceEntry]:
    return recorder.emit(
        EventKind.REQUEST,
        "→ Model API Request",
        {
            "model": model,
            "messageCount": len(messages),
            "toolCount": len(tool_names),
            "payload": {
                "model": model,
                "messages": messages,
                "tools": tool_names,
                "iteration": iteration,
            },
        },
    )


def tool_call_entry(
    recorder: TraceRecorder, tool_name: str, arguments: Any, envelope: dict
) -> Optional[TraceEntry]:
    return recorder.emit(
        EventKind.TOOL_CALL,
        f"→ {tool_name} invoked",
        {"toolName": tool_name, "arguments": arguments, "mcpRequest": envelope},
    )


def tool_result_entry(
    recorder: TraceRecorder,
    tool_name: str,
    result: Any,
    envelope: dict,
    duration_ms: int,
) -> Optional[TraceEntry]:
    return recorder.emit(
        EventKind.TOOL_RESULT,
        f"← {tool_name} completed ({duration_ms}ms)",
        {
            "toolName": tool_name,
            "result": result,
            "mcpResponse": envelope,
            "durationMs": duration_ms,
        },
    )


def response_entry(
    recorder: TraceRecorder,
    content: str,
    done_reason: Optional[str] = None,
    eval_count: Optional[int] = None,
    eval_duration: Optional[int] = None,
) -> Optional[TraceEntry]:
    return recorder.emit(
        EventKind.RESPONSE,
        "← Final Response",
        {
            "stopReason": done_reason or "end_turn",
            "content": content,
            "evalCount": eval_count,
            "evalDuration": eval_duration,
        },
    )


def error_entry(recorder: TraceRecorder, error: BaseException, **context: Any) -> Optional[TraceEntry]:
    return recorder.emit(
        EventKind.ERROR,
        f"Error: {error}",
        {"message": str(error), "errorType": type(error).__name__, **context},
    )
