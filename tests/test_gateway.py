"""
Tests for the Ollama model gateway.

Transport is replaced with httpx.MockTransport; no server is needed.
"""

import json

import httpx
import pytest

from voyager.errors import BackendProtocolError, BackendUnavailableError
from voyager.gateway.base import AnswerReply, ToolCallsReply
from voyager.gateway.ollama import OllamaGateway
from voyager.messages import Message, system, user
from voyager.orchestration.loop import LoopState, OrchestrationLoop

CONVERSATION = (system("You are a travel agent."), user("Weather in Tokyo?"))
TOOLS = [{"type": "function", "function": {"name": "get_weather_forecast", "description": "", "parameters": {}}}]


def make_gateway(handler) -> OllamaGateway:
    return OllamaGateway(
        base_url="http://ollama.test:11434/",
        model="qwen3:8b",
        transport=httpx.MockTransport(handler),
    )


class TestSend:
    """Tests for OllamaGateway.send()."""

    @pytest.mark.asyncio
    async def test_request_payload(self):
        """The conversation and tool manifest are posted to /api/chat without streaming."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"message": {"role": "assistant", "content": "Sunny."}})

        gateway = make_gateway(handler)
        await gateway.send(CONVERSATION, TOOLS)

        assert seen["url"] == "http://ollama.test:11434/api/chat"
        assert seen["body"] == {
            "model": "qwen3:8b",
            "messages": [
                {"role": "system", "content": "You are a travel agent."},
                {"role": "user", "content": "Weather in Tokyo?"},
            ],
            "tools": TOOLS,
            "stream": False,
        }

    @pytest.mark.asyncio
    async def test_answer_reply(self):
        def handler(request):
            return httpx.Response(
                200,
                json={
                    "message": {"role": "assistant", "content": "Sunny all week."},
                    "done_reason": "stop",
                    "eval_count": 42,
                    "eval_duration": 1234,
                },
            )

        reply = await make_gateway(handler).send(CONVERSATION, TOOLS)

        assert reply == AnswerReply(text="Sunny all week.", done_reason="stop", eval_count=42, eval_duration=1234)
        assert reply.kind == "answer"

    @pytest.mark.asyncio
    async def test_tool_calls_reply(self):
        raw_call = {
            "id": "call_abc",
            "function": {"name": "get_weather_forecast", "arguments": {"city": "Tokyo"}},
        }

        def handler(request):
            return httpx.Response(
                200, json={"message": {"role": "assistant", "content": "", "tool_calls": [raw_call]}}
            )

        reply = await make_gateway(handler).send(CONVERSATION, TOOLS)

        assert isinstance(reply, ToolCallsReply)
        assert reply.kind == "tool_calls"
        assert len(reply.calls) == 1
        assert reply.calls[0].id == "call_abc"
        assert reply.calls[0].tool_name == "get_weather_forecast"
        assert reply.calls[0].arguments == {"city": "Tokyo"}
        assert reply.raw_tool_calls == (raw_call,)

    @pytest.mark.asyncio
    async def test_conversation_not_mutated(self):
        conversation = list(CONVERSATION)

        def handler(request):
            return httpx.Response(200, json={"message": {"content": "ok"}})

        await make_gateway(handler).send(conversation, TOOLS)

        assert conversation == list(CONVERSATION)

    @pytest.mark.asyncio
    async def test_unreachable_backend(self):
        def handler(request):
            raise httpx.ConnectError("Connection refused", request=request)

        with pytest.raises(BackendUnavailableError, match="Connection refused"):
            await make_gateway(handler).send(CONVERSATION, TOOLS)

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        def handler(request):
            return httpx.Response(404, text='{"error":"model \\"qwen3:8b\\" not found"}')

        with pytest.raises(BackendProtocolError, match="Ollama API error: 404") as exc_info:
            await make_gateway(handler).send(CONVERSATION, TOOLS)
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        def handler(request):
            return httpx.Response(200, text="<html>not json</html>")

        with pytest.raises(BackendProtocolError, match="invalid JSON"):
            await make_gateway(handler).send(CONVERSATION, TOOLS)

    @pytest.mark.asyncio
    async def test_corrupt_encoding_is_protocol_error(self):
        """A body that cannot be decoded is a protocol error, not a transport crash."""

        def handler(request):
            return httpx.Response(200, headers={"content-encoding": "gzip"}, content=b"not-gzip")

        with pytest.raises(BackendProtocolError, match="could not be read"):
            await make_gateway(handler).send(CONVERSATION, TOOLS)

    @pytest.mark.asyncio
    async def test_corrupt_encoding_fails_the_chat(self, registry):
        """The loop turns an unreadable reply into a FAILED outcome with an apology."""

        def handler(request):
            return httpx.Response(200, headers={"content-encoding": "gzip"}, content=b"not-gzip")

        loop = OrchestrationLoop(gateway=make_gateway(handler), registry=registry)
        outcome = await loop.run([user("hi")])

        assert outcome.state is LoopState.FAILED
        assert outcome.iterations_used == 1
        assert isinstance(outcome.error, BackendProtocolError)
        assert outcome.final_message.content.startswith("I apologize, but I encountered an error")


class TestParseReply:
    """Tests for OllamaGateway.parse_reply()."""

    def test_string_arguments_are_decoded(self):
        reply = OllamaGateway.parse_reply(
            {"message": {"tool_calls": [{"function": {"name": "currency_exchange", "arguments": '{"amount": 5}'}}]}}
        )
        assert reply.calls[0].arguments == {"amount": 5}

    def test_missing_id_is_generated(self):
        reply = OllamaGateway.parse_reply(
            {"message": {"tool_calls": [{"function": {"name": "currency_exchange", "arguments": {}}}]}}
        )
        assert reply.calls[0].id.startswith("call_")
        assert len(reply.calls[0].id) == len("call_") + 12

    def test_empty_tool_calls_is_an_answer(self):
        reply = OllamaGateway.parse_reply({"message": {"content": "Done", "tool_calls": []}})
        assert isinstance(reply, AnswerReply)

    @pytest.mark.parametrize(
        "body",
        [
            [],
            {"error": "model is loading"},
            {"done": True},
            {"message": {"tool_calls": "search_flights"}},
            {"message": {"tool_calls": [{"function": {"arguments": {}}}]}},
            {"message": {"tool_calls": [{"function": {"name": "x", "arguments": "{not json"}}]}},
            {"message": {"tool_calls": [{"function": {"name": "x", "arguments": "[1, 2]"}}]}},
        ],
    )
    def test_malformed_bodies(self, body):
        with pytest.raises(BackendProtocolError):
            OllamaGateway.parse_reply(body)


class TestHealthCheck:
    """Tests for OllamaGateway.health_check()."""

    @pytest.mark.asyncio
    async def test_model_available(self):
        def handler(request):
            assert request.url.path == "/api/tags"
            return httpx.Response(200, json={"models": [{"name": "qwen3:8b"}, {"name": "llama3:latest"}]})

        status = await make_gateway(handler).health_check()

        assert status.healthy is True
        assert status.model_available is True
        assert status.detail is None
        assert status.models == ["qwen3:8b", "llama3:latest"]

    @pytest.mark.asyncio
    async def test_model_missing(self):
        def handler(request):
            return httpx.Response(200, json={"models": [{"name": "llama3:latest"}]})

        status = await make_gateway(handler).health_check()

        assert status.healthy is True
        assert status.model_available is False
        assert "ollama pull qwen3:8b" in status.detail

    @pytest.mark.asyncio
    async def test_unreachable_never_raises(self):
        def handler(request):
            raise httpx.ConnectError("Connection refused", request=request)

        status = await make_gateway(handler).health_check()

        assert status.healthy is False
        assert status.to_dict()["modelAvailable"] is False
        assert "Connection refused" in status.detail

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [["qwen3:8b"], {"models": "qwen3:8b"}, "ok"])
    async def test_malformed_tags_body_never_raises(self, body):
        def handler(request):
            return httpx.Response(200, json=body)

        status = await make_gateway(handler).health_check()

        assert status.healthy is False
        assert status.model_available is False
        assert "Malformed" in status.detail

    @pytest.mark.asyncio
    async def test_entries_without_string_names_are_skipped(self):
        def handler(request):
            return httpx.Response(
                200, json={"models": [{"name": None}, "qwen3:8b", {"size": 1}, {"name": "qwen3:8b"}]}
            )

        status = await make_gateway(handler).health_check()

        assert status.healthy is True
        assert status.model_available is True
        assert status.models == ["qwen3:8b"]


class TestMessageWire:
    def test_tool_message_wire_format(self):
        message = Message(role="tool", content='{"ok": true}', tool_call_id="call_1")
        assert message.to_wire() == {"role": "tool", "content": '{"ok": true}', "tool_call_id": "call_1"}

    def test_from_dict_accepts_camel_case_id(self):
        message = Message.from_dict({"role": "tool", "content": "{}", "toolCallId": "call_9"})
        assert message.tool_call_id == "call_9"
