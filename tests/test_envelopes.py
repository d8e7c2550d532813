"""
Tests for the protocol envelope builders.
"""

import json

from voyager.protocol.envelopes import (
    INTERNAL_ERROR,
    JSONRPC_VERSION,
    PROTOCOL_VERSION,
    SERVER_INFO,
    create_error_response,
    create_initialize_request,
    create_initialize_response,
    create_initialized_notification,
    create_tool_call_request,
    create_tool_call_response,
    create_tools_list_response,
    simulate_handshake,
)

TOOLS = [
    {
        "name": "currency_exchange",
        "description": "Convert currencies",
        "inputSchema": {"type": "object", "properties": {}},
    }
]


class TestRequestEnvelopes:
    """Request envelopes carry fresh ids; responses echo them."""

    def test_initialize_round(self):
        request = create_initialize_request()
        response = create_initialize_response(request["id"])

        assert request["jsonrpc"] == JSONRPC_VERSION
        assert request["method"] == "initialize"
        assert request["params"]["protocolVersion"] == PROTOCOL_VERSION
        assert response["id"] == request["id"]
        assert response["result"]["serverInfo"]["name"] == SERVER_INFO["name"]

    def test_request_ids_are_unique(self):
        ids = {create_tool_call_request("currency_exchange", {})["id"] for _ in range(20)}
        assert len(ids) == 20

    def test_notification_has_no_id(self):
        notification = create_initialized_notification()
        assert "id" not in notification
        assert notification["method"] == "notifications/initialized"

    def test_tool_call_request(self):
        request = create_tool_call_request("search_flights", {"origin": "NYC"})

        assert request["method"] == "tools/call"
        assert request["params"] == {"name": "search_flights", "arguments": {"origin": "NYC"}}

    def test_tools_list_response(self):
        response = create_tools_list_response("req-1", TOOLS)
        assert response["result"]["tools"] == TOOLS


class TestToolCallResponse:
    """Tests for the success and error variants of tools/call responses."""

    def test_success_contains_result_verbatim(self):
        """The success payload decodes back to the original result."""
        result = {"success": True, "rate": "0.9200", "converted_amount": 92.0, "tags": ["a", "b"]}

        response = create_tool_call_response("req-1", result)

        content = response["result"]["content"]
        assert response["id"] == "req-1"
        assert response["result"]["isError"] is False
        assert content[0]["type"] == "text"
        assert json.loads(content[0]["text"]) == result

    def test_error_variant_from_exception(self):
        response = create_tool_call_response("req-2", RuntimeError("Unknown tool: teleport"), is_error=True)

        assert response["result"]["isError"] is True
        assert json.loads(response["result"]["content"][0]["text"]) == {"error": "Unknown tool: teleport"}

    def test_error_variant_from_message(self):
        response = create_tool_call_response("req-3", "bad dates", is_error=True)
        assert json.loads(response["result"]["content"][0]["text"]) == {"error": "bad dates"}


class TestErrorResponse:
    def test_generic_error(self):
        response = create_error_response("req-4", INTERNAL_ERROR, "boom", data={"tool": "x"})

        assert response["error"] == {"code": -32603, "message": "boom", "data": {"tool": "x"}}
        assert "result" not in response

    def test_data_omitted_when_none(self):
        response = create_error_response(None, INTERNAL_ERROR, "boom")
        assert "data" not in response["error"]


class TestHandshake:
    def test_sequence(self):
        """The simulated handshake is a five step correlated exchange."""
        handshake = simulate_handshake(TOOLS)
        sequence = handshake["sequence"]

        assert [step["message"].get("method") for step in sequence] == [
            "initialize",
            None,
            "notifications/initialized",
            "tools/list",
            None,
        ]
        assert sequence[1]["message"]["id"] == sequence[0]["message"]["id"]
        assert sequence[4]["message"]["id"] == sequence[3]["message"]["id"]
        assert handshake["tools"] == [{"name": "currency_exchange", "description": "Convert currencies"}]
        assert handshake["serverInfo"] == SERVER_INFO
