"""
Ollama gateway.

Talks to Ollama's native ``/api/chat`` endpoint with tool calling enabled.
Requests are sent with ``stream: false``; no retries are attempted.
"""

import json
import logging
import uuid
from typing import Any, Optional, Sequence

import httpx

from ..errors import BackendProtocolError, BackendUnavailableError
from ..messages import Message
from .base import (
    AnswerReply,
    HealthStatus,
    ModelGateway,
    ModelReply,
    ToolCallRequest,
    ToolCallsReply,
)

logger = logging.getLogger(__name__)

# Upper bound for error bodies copied into exception messages.
MAX_ERROR_BODY_CHARS = 500


class OllamaGateway(ModelGateway):
    """Model gateway backed by an Ollama server."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            base_url: Ollama server URL (defaults to configuration)
            model: Model name (defaults to configuration)
            timeout: Request timeout in seconds; None waits indefinitely
            transport: Optional httpx transport, used by tests
        """
        from ..config import config

        self.base_url = (base_url or config.ollama.base_url).rstrip("/")
        self.model = model or config.ollama.model
        if timeout is None:
            timeout = config.ollama.timeout
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    def build_payload(self, conversation: Sequence[Message], tools: Sequence[dict]) -> dict:
        return {
            "model": self.model,
            "messages": [message.to_wire() for message in conversation],
            "tools": list(tools),
            "stream": False,
        }

    async def send(
        self,
        conversation: Sequence[Message],
        tools: Sequence[dict],
    ) -> ModelReply:
        payload = self.build_payload(conversation, tools)

        try:
            response = await self._client.post("/api/chat", json=payload)
        except httpx.TransportError as e:
            logger.error("Ollama unreachable at %s: %s", self.base_url, e)
            raise BackendUnavailableError(
                f"Cannot reach model backend at {self.base_url}: {e}"
            ) from e
        except httpx.HTTPError as e:
            # Reached the backend but could not read its reply (e.g. corrupt encoding).
            logger.error("Unreadable response from Ollama at %s: %s", self.base_url, e)
            raise BackendProtocolError(f"Ollama response could not be read: {e}") from e

        if response.status_code >= 400:
            body = response.text[:MAX_ERROR_BODY_CHARS]
            raise BackendProtocolError(
                f"Ollama API error: {response.status_code} - {body}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise BackendProtocolError(f"Ollama returned invalid JSON: {e}") from e

        return self.parse_reply(data)

    @staticmethod
    def parse_reply(data: Any) -> ModelReply:
        """
        Convert an ``/api/chat`` response body into a ModelReply.

        Raises:
            BackendProtocolError: If the body does not have the expected shape
        """
        if not isinstance(data, dict):
            raise BackendProtocolError("Ollama response is not a JSON object")
        if data.get("error"):
            raise BackendProtocolError(f"Ollama API error: {data['error']}")

        message = data.get("message")
        if not isinstance(message, dict):
            raise BackendProtocolError("Ollama response has no message")

        content = message.get("content") or ""
        raw_calls = message.get("tool_calls") or []
        if not isinstance(raw_calls, list):
            raise BackendProtocolError("Ollama message.tool_calls is not a list")

        if not raw_calls:
            return AnswerReply(
                text=content,
                done_reason=data.get("done_reason"),
                eval_count=data.get("eval_count"),
                eval_duration=data.get("eval_duration"),
            )

        calls = tuple(_parse_tool_call(raw) for raw in raw_calls)
        return ToolCallsReply(
            calls=calls,
            raw_assistant_content=content,
            raw_tool_calls=tuple(raw_calls),
        )

    async def health_check(self) -> HealthStatus:
        """Query ``/api/tags`` and look for the configured model."""
        try:
            response = await self._client.get("/api/tags")
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Ollama health check failed: %s", e)
            return HealthStatus(
                healthy=False,
                detail=str(e) or type(e).__name__,
                url=self.base_url,
                model=self.model,
            )

        entries = (data.get("models") or []) if isinstance(data, dict) else None
        if not isinstance(entries, list):
            logger.warning("Ollama health check got an unexpected /api/tags body")
            return HealthStatus(
                healthy=False,
                detail="Malformed /api/tags response",
                url=self.base_url,
                model=self.model,
            )

        models = [
            m["name"] for m in entries if isinstance(m, dict) and isinstance(m.get("name"), str)
        ]
        family = self.model.split(":")[0]
        model_available = any(family in name for name in models)
        detail = None if model_available else (
            f"Model {self.model} not found. Run: ollama pull {self.model}"
        )
        return HealthStatus(
            healthy=True,
            model_available=model_available,
            detail=detail,
            url=self.base_url,
            model=self.model,
            models=models,
        )


def _parse_tool_call(raw: Any) -> ToolCallRequest:
    """Parse one ``{id?, function: {name, arguments}}`` entry."""
    function = raw.get("function") if isinstance(raw, dict) else None
    if not isinstance(function, dict) or not function.get("name"):
        raise BackendProtocolError(f"Malformed tool call: {str(raw)[:200]}")

    arguments = function.get("arguments")
    if arguments is None or arguments == "":
        arguments = {}
    elif isinstance(arguments, str):
        # Some models double-encode arguments as a JSON string.
        try:
            arguments = json.loads(arguments)
        except json.JSONDecodeError as e:
            raise BackendProtocolError(
                f"Tool call '{function['name']}' has undecodable arguments: {e}"
            ) from e
    if not isinstance(arguments, dict):
        raise BackendProtocolError(
            f"Tool call '{function['name']}' arguments must be an object"
        )

    return ToolCallRequest(
        id=raw.get("id") or f"call_{uuid.uuid4().hex[:12]}",
        tool_name=function["name"],
        arguments=arguments,
    )
