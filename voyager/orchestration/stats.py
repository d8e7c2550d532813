"""
Session statistics aggregator.

Collects call counts and response times across chat requests. Owned by
whoever creates it (normally the ChatSession) and passed to each loop run.
"""

import threading
import time
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ..tools.registry import ToolRegistry
    from .loop import LoopOutcome

# Rough characters-per-token ratio for usage estimates.
CHARS_PER_TOKEN = 4


class SessionStats:
    """Thread-safe aggregate statistics for a chat session."""

    def __init__(self):
        self._lock = threading.Lock()
        self._reset_locked()

    def _reset_locked(self) -> None:
        self.start_time = time.time()
        self.total_api_calls = 0
        self.total_tool_invocations = 0
        self.estimated_tokens = 0.0
        self.response_times_ms: list[int] = []

    def reset(self) -> None:
        with self._lock:
            self._reset_locked()

    def record_tool_invocation(self) -> None:
        with self._lock:
            self.total_tool_invocations += 1

    def record_chat(self, outcome: "LoopOutcome", response_time_ms: int) -> None:
        """Account for one completed chat request."""
        content = outcome.final_message.content or ""
        with self._lock:
            self.total_api_calls += 1
            self.response_times_ms.append(response_time_ms)
            self.estimated_tokens += len(content) / CHARS_PER_TOKEN

    @property
    def avg_response_time_ms(self) -> int:
        with self._lock:
            if not self.response_times_ms:
                return 0
            return round(sum(self.response_times_ms) / len(self.response_times_ms))

    def snapshot(self, registry: Optional["ToolRegistry"] = None) -> dict:
        """Current statistics, with per-tool usage when a registry is given."""
        avg = self.avg_response_time_ms
        with self._lock:
            stats = {
                "sessionDuration": int((time.time() - self.start_time) * 1000),
                "totalApiCalls": self.total_api_calls,
                "totalToolInvocations": self.total_tool_invocations,
                "estimatedTokens": round(self.estimated_tokens),
                "avgResponseTime": avg,
            }
        if registry is not None:
            stats["toolBreakdown"] = [
                {"name": name, "usageCount": count}
                for name, count in registry.usage_counts().items()
            ]
        return stats
