"""
Pytest configuration and fixtures for Voyager tests.
"""

from typing import Sequence, Union

import pytest

from voyager.gateway.base import (
    AnswerReply,
    HealthStatus,
    ModelGateway,
    ModelReply,
    ToolCallRequest,
    ToolCallsReply,
)
from voyager.messages import Message
from voyager.orchestration.events import TraceEntry
from voyager.tools import build_default_registry


class FakeGateway(ModelGateway):
    """
    Model gateway that replays a script of replies.

    Each script item is a ModelReply or an exception to raise. The
    conversation passed to each send() is recorded.
    """

    def __init__(self, script: Sequence[Union[ModelReply, Exception]] = (), model: str = "test-model"):
        self.script = list(script)
        self.model = model
        self.calls: list[tuple[Message, ...]] = []
        self.tools_seen: list[list[dict]] = []
        self.closed = False
        self.health = HealthStatus(healthy=True, model_available=True, model=model)

    async def send(self, conversation, tools) -> ModelReply:
        self.calls.append(tuple(conversation))
        self.tools_seen.append(list(tools))
        if not self.script:
            raise AssertionError("FakeGateway script exhausted")
        item = self.script.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    async def health_check(self) -> HealthStatus:
        return self.health

    async def close(self) -> None:
        self.closed = True


class RecordingSink:
    """Event sink that keeps every entry it receives."""

    def __init__(self):
        self.entries: list[TraceEntry] = []

    def on_event(self, entry: TraceEntry) -> None:
        self.entries.append(entry)

    @property
    def kinds(self) -> list[str]:
        return [entry.kind.value for entry in self.entries]


def answer(text: str = "Here is your trip plan.", **kwargs) -> AnswerReply:
    return AnswerReply(text=text, **kwargs)


def tool_calls(*calls: tuple[str, dict], content: str = "") -> ToolCallsReply:
    """Build a ToolCallsReply from (tool_name, arguments) pairs."""
    requests = tuple(
        ToolCallRequest(id=f"call_{i}", tool_name=name, arguments=arguments)
        for i, (name, arguments) in enumerate(calls)
    )
    raw = tuple(
        {"id": call.id, "function": {"name": call.tool_name, "arguments": call.arguments}}
        for call in requests
    )
    return ToolCallsReply(calls=requests, raw_assistant_content=content, raw_tool_calls=raw)


FLIGHT_ARGS = {"origin": "NYC", "destination": "DXB", "date": "2025-03-15"}


@pytest.fixture
def registry():
    """Travel tool registry with no simulated latency."""
    return build_default_registry(min_latency_ms=0, max_latency_ms=0)


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def user_messages():
    return [Message(role="user", content="Find me flights from NYC to Dubai on 2025-03-15")]
