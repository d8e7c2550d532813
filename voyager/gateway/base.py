"""
Model Gateway contract.

The gateway is the only component that talks to the language-model backend.
It turns a conversation plus a tool manifest into either a final answer or a
batch of tool-call requests, and never mutates the conversation it is given.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, ClassVar, Literal, Optional, Sequence, Union

from ..messages import Message


@dataclass(frozen=True)
class ToolCallRequest:
    """One tool invocation requested by the model."""

    id: str
    tool_name: str
    arguments: dict


@dataclass(frozen=True)
class AnswerReply:
    """The model produced a natural-language answer."""

    kind: ClassVar[Literal["answer"]] = "answer"

    text: str
    done_reason: Optional[str] = None
    eval_count: Optional[int] = None
    eval_duration: Optional[int] = None


@dataclass(frozen=True)
class ToolCallsReply:
    """The model asked for one or more tools to be run."""

    kind: ClassVar[Literal["tool_calls"]] = "tool_calls"

    calls: tuple[ToolCallRequest, ...]
    raw_assistant_content: str = ""
    # Tool calls exactly as the backend sent them, echoed back in the
    # assistant message so the next turn sees its own directive.
    raw_tool_calls: tuple[dict, ...] = field(default_factory=tuple)


ModelReply = Union[AnswerReply, ToolCallsReply]


@dataclass
class HealthStatus:
    """Advisory backend health."""

    healthy: bool
    model_available: bool = False
    detail: Optional[str] = None
    url: str = ""
    model: str = ""
    models: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "healthy": self.healthy,
            "modelAvailable": self.model_available,
            "detail": self.detail,
            "url": self.url,
            "model": self.model,
            "models": list(self.models),
        }


class ModelGateway(ABC):
    """Sole point of contact with the model backend."""

    model: str = ""

    @abstractmethod
    async def send(
        self,
        conversation: Sequence[Message],
        tools: Sequence[dict],
    ) -> ModelReply:
        """
        Send the conversation and tool manifest to the backend.

        Raises:
            BackendUnavailableError: If the backend cannot be reached
            BackendProtocolError: If the reply is malformed or not a success
        """

    @abstractmethod
    async def health_check(self) -> HealthStatus:
        """Check backend reachability. Never raises."""

    async def close(self) -> None:
        """Release transport resources."""
