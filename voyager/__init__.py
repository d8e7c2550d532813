"""
Voyager AI - tool-augmented travel concierge chat

This package provides:
- Tool registry with schema-validated travel tools
- Protocol envelopes describing each tool exchange
- Ollama model gateway
- Orchestration loop with an ordered event trace
- FastAPI server and interactive CLI
"""

from .messages import Message
from .orchestration import LoopOutcome, LoopState, OrchestrationLoop
from .session import ChatSession

__all__ = [
    "Message",
    "LoopOutcome",
    "LoopState",
    "OrchestrationLoop",
    "ChatSession",
]

__version__ = "1.0.0"
