"""
Pydantic schemas for the Voyager HTTP API.
"""

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from ..messages import Message


class ChatMessage(BaseModel):
    """A single message in a chat conversation."""

    role: Literal["system", "user", "assistant", "tool"] = Field(
        ..., description="The role of the message author"
    )
    content: str = Field(default="", description="The text content of the message")
    tool_call_id: Optional[str] = Field(
        default=None, description="Correlation id of the tool call a tool message answers"
    )

    def to_message(self) -> Message:
        return Message(role=self.role, content=self.content, tool_call_id=self.tool_call_id)


class ChatRequest(BaseModel):
    """Request body for POST /api/chat."""

    messages: list[ChatMessage] = Field(
        ..., description="Conversation so far, oldest first", min_length=1
    )
    include_trace: bool = Field(
        default=False, description="Include the orchestration event trace in the response"
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "messages": [
                    {"role": "user", "content": "Plan a 3 day trip from NYC to Dubai on 2025-03-15"}
                ],
            }
        }
    }


class AssistantResponse(BaseModel):
    """Final assistant message of a chat request."""

    role: Literal["assistant"] = "assistant"
    content: str
    iterations: int
    model: str
    done: Optional[bool] = None
    error: Optional[bool] = None
    eval_count: Optional[int] = None
    eval_duration: Optional[int] = None


class ChatStats(BaseModel):
    """Per-request orchestration statistics."""

    iterations: int
    toolCallsTotal: int
    totalDurationMs: int


class TraceEntryModel(BaseModel):
    """One orchestration trace entry."""

    id: str
    type: str
    timestamp: str
    label: str
    data: dict[str, Any] = Field(default_factory=dict)


class ChatResponse(BaseModel):
    """Response body for POST /api/chat."""

    success: bool = True
    response: AssistantResponse
    stats: ChatStats
    trace: Optional[list[TraceEntryModel]] = Field(
        default=None, description="Orchestration trace (when include_trace=True)"
    )


class ToolInfo(BaseModel):
    name: str
    description: str
    inputSchema: dict[str, Any]
    usageCount: int = 0


class ToolListResponse(BaseModel):
    """Response body for GET /api/tools."""

    tools: list[ToolInfo]


class ToolUsage(BaseModel):
    name: str
    usageCount: int


class ToolStatsResponse(BaseModel):
    """Response body for GET /api/tools/stats."""

    stats: list[ToolUsage]


class SessionStatsResponse(BaseModel):
    """Response body for GET /api/stats."""

    sessionDuration: int
    totalApiCalls: int
    totalToolInvocations: int
    estimatedTokens: int
    avgResponseTime: int
    toolBreakdown: list[ToolUsage] = Field(default_factory=list)


class ResetResponse(BaseModel):
    """Response body for POST /api/session/reset."""

    success: bool = True
    stats: SessionStatsResponse


class ErrorResponse(BaseModel):
    """Error response body."""

    success: bool = False
    error: str
