"""
Chat session: the surface the HTTP API and the terminal client talk to.

Owns the tool registry, the model gateway and the stats aggregator, and runs
one OrchestrationLoop per chat request.
"""

import asyncio
import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping, Optional, Union

from .gateway.base import ModelGateway
from .messages import Message
from .orchestration.events import EventKind, EventSink, TraceRecorder
from .orchestration.loop import MAX_ITERATIONS, LoopOutcome, OrchestrationLoop
from .orchestration.sinks import CompositeEventSink, LoggingEventSink
from .orchestration.stats import SessionStats
from .protocol.envelopes import PROTOCOL_VERSION, get_server_info, simulate_handshake
from .tools.registry import ToolRegistry
from .tracing import LangfuseEventSink, TracingContext, get_tracing_client

logger = logging.getLogger(__name__)


def new_execution_id() -> str:
    return f"exec-{uuid.uuid4().hex[:8]}"


class ChatSession:
    """
    Session-level operations over one registry and gateway.

    Concurrent chat() calls are independent loop runs; they share only the
    registry usage counters and the stats aggregator, both thread-safe.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        gateway: ModelGateway,
        stats: Optional[SessionStats] = None,
        sink: Optional[EventSink] = None,
        max_iterations: int = MAX_ITERATIONS,
        system_prompt: Optional[str] = None,
    ):
        self.registry = registry
        self.gateway = gateway
        self.stats_aggregator = stats or SessionStats()
        self.sink = sink if sink is not None else LoggingEventSink()
        self.max_iterations = max_iterations
        self.system_prompt = system_prompt
        self.session_id = f"session-{uuid.uuid4().hex[:8]}"
        self.started_at = time.time()

    @classmethod
    def from_config(cls, sink: Optional[EventSink] = None) -> "ChatSession":
        """Build a session with the travel registry and an Ollama gateway."""
        from .config import config
        from .gateway.ollama import OllamaGateway
        from .tools import build_default_registry

        return cls(
            registry=build_default_registry(),
            gateway=OllamaGateway(),
            sink=sink,
            max_iterations=config.orchestrator.max_iterations,
            system_prompt=config.orchestrator.system_prompt or None,
        )

    def initialize(self) -> dict:
        """
        Announce the tool server: emits two SYSTEM trace entries.

        Returns:
            Dict with the emitted entries, the handshake simulation, the
            server info and the tool list.
        """
        server_info = get_server_info()
        tools = self.registry.export_schemas()
        recorder = TraceRecorder(sink=self.sink)
        recorder.emit(
            EventKind.SYSTEM,
            "Protocol Session Initialized",
            {
                "protocolVersion": PROTOCOL_VERSION,
                "serverName": server_info["name"],
                "capabilities": server_info["capabilities"],
            },
        )
        recorder.emit(
            EventKind.SYSTEM,
            f"Registered {len(tools)} tools",
            {"tools": [tool["name"] for tool in tools]},
        )
        logger.info("Protocol session initialized with %d tools", len(tools))
        return {
            "logs": [entry.to_dict() for entry in recorder.entries],
            "handshake": simulate_handshake(tools),
            "serverInfo": server_info,
            "tools": tools,
        }

    def handshake(self) -> dict:
        return simulate_handshake(self.registry.export_schemas())

    def list_tools(self) -> list[dict]:
        counts = self.registry.usage_counts()
        return [
            {**schema, "usageCount": counts.get(schema["name"], 0)}
            for schema in self.registry.export_schemas()
        ]

    def tool_stats(self) -> list[dict]:
        return [
            {"name": name, "usageCount": count}
            for name, count in self.registry.usage_counts().items()
        ]

    async def chat(
        self,
        messages: Iterable[Union[Message, Mapping[str, Any]]],
        sink: Optional[EventSink] = None,
        execution_id: Optional[str] = None,
    ) -> LoopOutcome:
        """
        Run one chat request through the orchestration loop.

        Args:
            messages: Conversation so far, oldest first
            sink: Extra sink for this request's trace entries
            execution_id: Log/trace correlation id (generated if omitted)

        Returns:
            The LoopOutcome. Backend failures are reported on the outcome.
        """
        execution_id = execution_id or new_execution_id()
        messages = list(messages)

        tracing_context = TracingContext(execution_id=execution_id, session_id=self.session_id)
        tracing_context.start_trace(
            name="chat_request",
            input={"messageCount": len(messages)},
            metadata={"model": self.gateway.model},
        )

        sinks = CompositeEventSink([self.sink])
        if tracing_context.enabled:
            sinks.add(LangfuseEventSink(tracing_context))
        if sink is not None:
            sinks.add(sink)

        loop = OrchestrationLoop(
            gateway=self.gateway,
            registry=self.registry,
            max_iterations=self.max_iterations,
            system_prompt=self.system_prompt,
            sink=sinks,
            stats=self.stats_aggregator,
            execution_id=execution_id,
        )
        logger.info(f"[{execution_id}] Processing chat request with {len(messages)} messages")

        try:
            outcome = await loop.run(messages)
        except asyncio.CancelledError:
            tracing_context.end_trace(status="cancelled")
            _flush_tracing()
            raise
        except Exception as e:
            logger.error(f"[{execution_id}] Chat request failed: {e}")
            tracing_context.end_trace(output=str(e), status="error")
            _flush_tracing()
            raise

        tracing_context.end_trace(
            output=outcome.final_message.content,
            status="error" if outcome.failed else "success",
            metadata={"state": outcome.state.value, **outcome.stats()},
        )
        _flush_tracing()
        return outcome

    def stats(self) -> dict:
        return self.stats_aggregator.snapshot(self.registry)

    def reset(self) -> None:
        """Zero the stats aggregator and every tool usage counter."""
        self.stats_aggregator.reset()
        self.registry.reset_usage()
        logger.info("Session reset")

    async def health(self) -> dict:
        """Server, model backend and tool server status."""
        status = await self.gateway.health_check()
        server_info = get_server_info()
        return {
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
            "server": {
                "name": "voyager-ai-server",
                "version": "1.0.0",
                "uptime": int(time.time() - self.started_at),
            },
            "model": status.to_dict(),
            "protocol": {
                "serverName": server_info["name"],
                "toolsRegistered": len(self.registry),
            },
        }

    async def close(self) -> None:
        await self.gateway.close()


def _flush_tracing() -> None:
    """Flush tracing client if available."""
    client = get_tracing_client()
    if client:
        client.flush()
