"""
Tool-augmented chat orchestration loop.

Frames the conversation for the model backend, dispatches the tool calls the
model asks for, folds the results back into the conversation and repeats
until the model answers or the iteration budget runs out. Every request,
tool call and response is recorded as a trace entry.

States::

    START → AWAITING_MODEL → DISPATCHING_TOOLS → AWAITING_MODEL → …
                           ↘ ANSWER_READY → DONE
    (any model failure)    → FAILED
    (budget used up)       → BUDGET_EXHAUSTED
"""

import asyncio
import json
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping, Optional, Union

from ..errors import (
    BackendError,
    BackendProtocolError,
    BudgetExhaustedError,
    InvalidToolArgumentsError,
    ToolError,
    UnknownToolError,
    VoyagerError,
)
from ..gateway.base import AnswerReply, ModelGateway, ToolCallRequest, ToolCallsReply
from ..messages import Message, system
from ..protocol.envelopes import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    METHOD_NOT_FOUND,
    create_error_response,
    create_tool_call_request,
    create_tool_call_response,
)
from ..tools.registry import ToolRegistry
from .events import (
    EventKind,
    EventSink,
    TraceEntry,
    TraceRecorder,
    error_entry,
    request_entry,
    response_entry,
    tool_call_entry,
    tool_result_entry,
)
from .stats import SessionStats
from .tool_defs import build_tool_definitions, tool_names

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 8

SYSTEM_PROMPT = """You are Voyager AI, an expert travel concierge. Use your tools proactively to help users plan complete trips. When a user asks to plan a trip, automatically search flights AND hotels AND weather AND activities without being asked. Compare options and give specific recommendations with prices. Always be helpful, specific, and enthusiastic about travel.

When presenting results:
- Format prices clearly with currency
- Highlight the best value options
- Mention key amenities and features
- Give personalized recommendations based on the user's needs
- Be concise but thorough

Important: Use the tools available to you. Don't make up flight numbers, prices, or hotel names - always use the tools to get real data."""

BUDGET_EXHAUSTED_MESSAGE = (
    "I apologize, but I reached the maximum number of tool iterations. "
    "Please try a simpler request."
)

# Tool invocations orphaned by cancellation; held so they can finish.
_background_tools: set[asyncio.Task] = set()


class LoopState(str, Enum):
    """Orchestration loop states."""

    START = "START"
    AWAITING_MODEL = "AWAITING_MODEL"
    DISPATCHING_TOOLS = "DISPATCHING_TOOLS"
    ANSWER_READY = "ANSWER_READY"
    DONE = "DONE"
    FAILED = "FAILED"
    BUDGET_EXHAUSTED = "BUDGET_EXHAUSTED"

    @property
    def is_terminal(self) -> bool:
        return self in (LoopState.DONE, LoopState.FAILED, LoopState.BUDGET_EXHAUSTED)


@dataclass
class LoopOutcome:
    """Result of one orchestration run."""

    final_message: Message
    state: LoopState
    iterations_used: int
    tool_call_count: int
    total_tool_duration_ms: int
    trace: list[TraceEntry] = field(default_factory=list)
    conversation: list[Message] = field(default_factory=list)
    model: str = ""
    eval_count: Optional[int] = None
    eval_duration: Optional[int] = None
    error: Optional[VoyagerError] = None

    @property
    def failed(self) -> bool:
        return self.state in (LoopState.FAILED, LoopState.BUDGET_EXHAUSTED)

    def response(self) -> dict:
        """Final assistant message in the shape returned to chat clients."""
        response: dict[str, Any] = {
            "role": "assistant",
            "content": self.final_message.content,
            "iterations": self.iterations_used,
            "model": self.model,
        }
        if self.failed:
            response["error"] = True
        else:
            response["done"] = True
            response["eval_count"] = self.eval_count
            response["eval_duration"] = self.eval_duration
        return response

    def stats(self) -> dict:
        return {
            "iterations": self.iterations_used,
            "toolCallsTotal": self.tool_call_count,
            "totalDurationMs": self.total_tool_duration_ms,
        }


def _discard_result(task: asyncio.Task) -> None:
    _background_tools.discard(task)
    if not task.cancelled() and task.exception() is not None:
        logger.debug("Orphaned tool invocation failed: %s", task.exception())


def _error_code(error: ToolError) -> int:
    if isinstance(error, UnknownToolError):
        return METHOD_NOT_FOUND
    if isinstance(error, InvalidToolArgumentsError):
        return INVALID_PARAMS
    return INTERNAL_ERROR


class OrchestrationLoop:
    """
    Drives one chat request end to end.

    Use one instance per request: the conversation, state and trace belong
    to the run. The registry and stats aggregator may be shared between
    concurrent instances.
    """

    def __init__(
        self,
        gateway: ModelGateway,
        registry: ToolRegistry,
        max_iterations: int = MAX_ITERATIONS,
        system_prompt: Optional[str] = None,
        sink: Optional[EventSink] = None,
        stats: Optional[SessionStats] = None,
        execution_id: Optional[str] = None,
    ):
        if max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")
        self.gateway = gateway
        self.registry = registry
        self.max_iterations = max_iterations
        self.system_prompt = system_prompt or SYSTEM_PROMPT
        self.sink = sink
        self.stats = stats
        self.execution_id = execution_id

        self.state = LoopState.START
        self.conversation: list[Message] = []
        self.recorder = TraceRecorder(sink=sink, execution_id=execution_id)

    @property
    def _prefix(self) -> str:
        return f"[{self.execution_id}] " if self.execution_id else ""

    async def run(self, messages: Iterable[Union[Message, Mapping[str, Any]]]) -> LoopOutcome:
        """
        Run the loop for a caller-supplied message history.

        Args:
            messages: Prior conversation, oldest first. Dicts are accepted in
                wire format.

        Returns:
            LoopOutcome with the final assistant message and the full trace.
            Model backend failures and budget exhaustion are reported on the
            outcome, not raised.
        """
        history = [m if isinstance(m, Message) else Message.from_dict(m) for m in messages]

        self.state = LoopState.START
        self.conversation = [system(self.system_prompt), *history]
        self.recorder = TraceRecorder(sink=self.sink, execution_id=self.execution_id)
        started = time.perf_counter()

        logger.debug("%sStarting orchestration with %d messages", self._prefix, len(history))

        try:
            outcome = await self._run_loop()
        except asyncio.CancelledError:
            self.recorder.close()
            logger.info("%sChat request cancelled in state %s", self._prefix, self.state.value)
            raise

        if self.stats is not None:
            self.stats.record_chat(outcome, int((time.perf_counter() - started) * 1000))
        self._log_summary(outcome)
        return outcome

    async def _run_loop(self) -> LoopOutcome:
        tools = build_tool_definitions(self.registry)
        names = tool_names(tools)
        model = self.gateway.model
        iteration = 0
        tool_call_count = 0
        tool_duration_ms = 0

        while iteration < self.max_iterations:
            iteration += 1
            self.state = LoopState.AWAITING_MODEL
            request_entry(
                self.recorder,
                model=model,
                messages=[
                    {"role": m.role, "contentLength": len(m.content)} for m in self.conversation
                ],
                tool_names=names,
                iteration=iteration,
            )

            try:
                logger.debug("%sIteration %d: calling model", self._prefix, iteration)
                reply = await self.gateway.send(tuple(self.conversation), tools)
                if not isinstance(reply, (AnswerReply, ToolCallsReply)):
                    raise BackendProtocolError(
                        f"Model gateway returned an unsupported reply: {type(reply).__name__}"
                    )
            except BackendError as e:
                logger.error("%sModel call failed at iteration %d: %s", self._prefix, iteration, e)
                error_entry(self.recorder, e, iteration=iteration)
                self.state = LoopState.FAILED
                return self._outcome(
                    content=(
                        f"I apologize, but I encountered an error: {e}. Please try again "
                        f"or check if Ollama is running with the {model} model."
                    ),
                    iterations=iteration,
                    tool_call_count=tool_call_count,
                    tool_duration_ms=tool_duration_ms,
                    error=e,
                )

            if isinstance(reply, ToolCallsReply):
                self.state = LoopState.DISPATCHING_TOOLS
                self.conversation.append(
                    Message(
                        role="assistant",
                        content=reply.raw_assistant_content,
                        tool_calls=reply.raw_tool_calls or None,
                    )
                )
                for call in reply.calls:
                    tool_call_count += 1
                    tool_duration_ms += await self._dispatch(call)
                continue

            self.state = LoopState.ANSWER_READY
            response_entry(
                self.recorder,
                content=reply.text,
                done_reason=reply.done_reason,
                eval_count=reply.eval_count,
                eval_duration=reply.eval_duration,
            )
            self.state = LoopState.DONE
            return self._outcome(
                content=reply.text,
                iterations=iteration,
                tool_call_count=tool_call_count,
                tool_duration_ms=tool_duration_ms,
                eval_count=reply.eval_count,
                eval_duration=reply.eval_duration,
            )

        logger.warning(
            "%sMax iterations (%d) reached without an answer", self._prefix, self.max_iterations
        )
        self.state = LoopState.BUDGET_EXHAUSTED
        return self._outcome(
            content=BUDGET_EXHAUSTED_MESSAGE,
            iterations=iteration,
            tool_call_count=tool_call_count,
            tool_duration_ms=tool_duration_ms,
            error=BudgetExhaustedError(self.max_iterations),
        )

    async def _dispatch(self, call: ToolCallRequest) -> int:
        """
        Run one tool call and append exactly one tool message for it.

        Returns:
            Elapsed time in milliseconds.
        """
        envelope = create_tool_call_request(call.tool_name, call.arguments)
        tool_call_entry(self.recorder, call.tool_name, call.arguments, envelope)
        if self.stats is not None:
            self.stats.record_tool_invocation()

        started = time.perf_counter()
        try:
            result = await self._invoke(call)
        except ToolError as e:
            duration_ms = int((time.perf_counter() - started) * 1000)
            logger.warning("%sTool '%s' failed: %s", self._prefix, call.tool_name, e)
            error_entry(
                self.recorder,
                e,
                toolName=call.tool_name,
                mcpResponse=create_tool_call_response(envelope["id"], e, is_error=True),
                rpcError=create_error_response(envelope["id"], _error_code(e), str(e)),
                durationMs=duration_ms,
            )
            content = json.dumps({"error": str(e)})
        else:
            duration_ms = int((time.perf_counter() - started) * 1000)
            tool_result_entry(
                self.recorder,
                call.tool_name,
                result,
                create_tool_call_response(envelope["id"], result),
                duration_ms,
            )
            content = json.dumps(result, default=str)

        self.conversation.append(Message(role="tool", content=content, tool_call_id=call.id))
        return duration_ms

    async def _invoke(self, call: ToolCallRequest) -> Any:
        """
        Invoke through the registry in a task of its own.

        If this request is cancelled the invocation keeps running to
        completion in the background; cancellation is not delayed by it.
        """
        task = asyncio.ensure_future(self.registry.invoke(call.tool_name, call.arguments))
        _background_tools.add(task)
        task.add_done_callback(_discard_result)
        return await asyncio.shield(task)

    def _outcome(
        self,
        content: str,
        iterations: int,
        tool_call_count: int,
        tool_duration_ms: int,
        eval_count: Optional[int] = None,
        eval_duration: Optional[int] = None,
        error: Optional[VoyagerError] = None,
    ) -> LoopOutcome:
        return LoopOutcome(
            final_message=Message(role="assistant", content=content),
            state=self.state,
            iterations_used=iterations,
            tool_call_count=tool_call_count,
            total_tool_duration_ms=tool_duration_ms,
            trace=list(self.recorder.entries),
            conversation=list(self.conversation),
            model=self.gateway.model,
            eval_count=eval_count,
            eval_duration=eval_duration,
            error=error,
        )

    def _log_summary(self, outcome: LoopOutcome) -> None:
        """Log a compact trace summary."""
        logger.info("%s%s", self._prefix, "─" * 50)
        logger.info(
            "%sTRACE SUMMARY: %s after %d iteration(s), %d tool call(s), %dms in tools",
            self._prefix,
            outcome.state.value,
            outcome.iterations_used,
            outcome.tool_call_count,
            outcome.total_tool_duration_ms,
        )
        for entry in outcome.trace:
            if entry.kind is EventKind.ERROR:
                logger.info("%s  %s: %s", self._prefix, entry.kind.value, entry.label)
            else:
                logger.debug("%s  %s: %s", self._prefix, entry.kind.value, entry.label)
        logger.info("%s%s", self._prefix, "─" * 50)
