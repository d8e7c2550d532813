"""
Conversation messages.

A conversation is an ordered sequence of immutable messages; the
orchestration loop only ever appends to it.
"""

from dataclasses import dataclass
from typing import Any, Literal, Mapping, Optional

Role = Literal["system", "user", "assistant", "tool"]

ROLES: frozenset[str] = frozenset({"system", "user", "assistant", "tool"})


@dataclass(frozen=True)
class Message:
    """A single message in a conversation."""

    role: Role
    content: str
    tool_call_id: Optional[str] = None
    # Backend tool-call directives carried by an assistant message.
    tool_calls: Optional[tuple[dict, ...]] = None

    def __post_init__(self):
        if self.role not in ROLES:
            raise ValueError(f"Invalid message role: {self.role!r}")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Message":
        """Build a message from a wire-format dict (``tool_call_id`` or ``toolCallId``)."""
        tool_calls = data.get("tool_calls")
        return cls(
            role=data["role"],
            content=data.get("content") or "",
            tool_call_id=data.get("tool_call_id") or data.get("toolCallId"),
            tool_calls=tuple(tool_calls) if tool_calls else None,
        )

    def to_wire(self) -> dict[str, Any]:
        """Serialize for the model backend."""
        wire: dict[str, Any] = {"role": self.role, "content": self.content}
        if self.tool_calls:
            wire["tool_calls"] = list(self.tool_calls)
        if self.tool_call_id:
            wire["tool_call_id"] = self.tool_call_id
        return wire


def system(content: str) -> Message:
    return Message(role="system", content=content)


def user(content: str) -> Message:
    return Message(role="user", content=content)
