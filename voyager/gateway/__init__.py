"""
Model backend gateway.
"""

from .base import (
    AnswerReply,
    HealthStatus,
    ModelGateway,
    ModelReply,
    ToolCallRequest,
    ToolCallsReply,
)
from .ollama import OllamaGateway

__all__ = [
    "AnswerReply",
    "HealthStatus",
    "ModelGateway",
    "ModelReply",
    "ToolCallRequest",
    "ToolCallsReply",
    "OllamaGateway",
]
