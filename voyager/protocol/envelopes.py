"""
Protocol envelopes for tool-call exchanges.

Builds JSON-RPC 2.0 request, response and notification envelopes in the
Model Context Protocol shape. Envelopes describe each tool call in a
self-describing, correlatable form for the event trace; they never drive
control flow. All functions are pure apart from generating fresh request ids.
"""

import json
import uuid
from typing import Any, Optional

JSONRPC_VERSION = "2.0"
PROTOCOL_VERSION = "2024-11-05"

CLIENT_INFO = {
    "name": "voyager-ai-client",
    "version": "1.0.0",
}

SERVER_INFO: dict = {
    "name": "travel-mcp-server",
    "version": "1.0.0",
    "capabilities": {
        "tools": {"listChanged": True},
        "resources": {"subscribe": False, "listChanged": False},
        "prompts": {"listChanged": False},
        "logging": {},
    },
}

# JSON-RPC error codes
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


def new_request_id() -> str:
    return str(uuid.uuid4())


def create_initialize_request() -> dict:
    """Client → server: open a session."""
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": new_request_id(),
        "method": "initialize",
        "params": {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {
                "roots": {"listChanged": True},
                "sampling": {},
            },
            "clientInfo": dict(CLIENT_INFO),
        },
    }


def create_initialize_response(request_id: str) -> dict:
    """Server → client: accept the session and advertise capabilities."""
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": request_id,
        "result": {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": SERVER_INFO["capabilities"],
            "serverInfo": {
                "name": SERVER_INFO["name"],
                "version": SERVER_INFO["version"],
            },
        },
    }


def create_initialized_notification() -> dict:
    """Client → server: handshake complete. Notifications carry no id."""
    return {
        "jsonrpc": JSONRPC_VERSION,
        "method": "notifications/initialized",
    }


def create_tools_list_request() -> dict:
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": new_request_id(),
        "method": "tools/list",
    }


def create_tools_list_response(request_id: str, tools: list[dict]) -> dict:
    """
    Args:
        request_id: Id of the originating tools/list request
        tools: Tool schemas as returned by ``ToolRegistry.export_schemas()``
    """
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": request_id,
        "result": {
            "tools": [
                {
                    "name": tool["name"],
                    "description": tool["description"],
                    "inputSchema": tool["inputSchema"],
                }
                for tool in tools
            ],
        },
    }


def create_tool_call_request(tool_name: str, arguments: Any) -> dict:
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": new_request_id(),
        "method": "tools/call",
        "params": {
            "name": tool_name,
            "arguments": arguments,
        },
    }


def create_tool_call_response(request_id: str, result: Any, is_error: bool = False) -> dict:
    """
    Wrap a tool outcome as the text content of a tools/call response.

    For the error variant ``result`` is an exception or message; its text is
    reported as ``{"error": message}`` with ``isError`` set.
    """
    if is_error:
        message = str(result) if isinstance(result, BaseException) else result
        payload: Any = {"error": message}
    else:
        payload = result

    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": request_id,
        "result": {
            "content": [
                {
                    "type": "text",
                    "text": json.dumps(payload, indent=2, default=str),
                },
            ],
            "isError": is_error,
        },
    }


def create_error_response(
    request_id: Optional[str],
    code: int,
    message: str,
    data: Any = None,
) -> dict:
    """Generic JSON-RPC error envelope."""
    error: dict = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": request_id,
        "error": error,
    }


def simulate_handshake(tools: list[dict]) -> dict:
    """
    Compose the initialize → initialized → tools/list exchange for inspection.

    Has no effect on runtime state and is not part of chat processing.
    """
    init_request = create_initialize_request()
    init_response = create_initialize_response(init_request["id"])
    initialized = create_initialized_notification()
    list_request = create_tools_list_request()
    list_response = create_tools_list_response(list_request["id"], tools)

    return {
        "sequence": [
            {"direction": "client→server", "message": init_request, "label": "Initialize Request"},
            {"direction": "server→client", "message": init_response, "label": "Initialize Response"},
            {"direction": "client→server", "message": initialized, "label": "Initialized Notification"},
            {"direction": "client→server", "message": list_request, "label": "Tools List Request"},
            {"direction": "server→client", "message": list_response, "label": "Tools List Response"},
        ],
        "serverInfo": SERVER_INFO,
        "tools": [{"name": t["name"], "description": t["description"]} for t in tools],
    }


def get_server_info() -> dict:
    return SERVER_INFO
