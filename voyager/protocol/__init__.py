"""
JSON-RPC envelopes describing tool-call exchanges.
"""

from .envelopes import (
    JSONRPC_VERSION,
    PROTOCOL_VERSION,
    SERVER_INFO,
    create_initialize_request,
    create_initialize_response,
    create_initialized_notification,
    create_tools_list_request,
    create_tools_list_response,
    create_tool_call_request,
    create_tool_call_response,
    create_error_response,
    simulate_handshake,
    get_server_info,
)

__all__ = [
    "JSONRPC_VERSION",
    "PROTOCOL_VERSION",
    "SERVER_INFO",
    "create_initialize_request",
    "create_initialize_response",
    "create_initialized_notification",
    "create_tools_list_request",
    "create_tools_list_response",
    "create_tool_call_request",
    "create_tool_call_response",
    "create_error_response",
    "simulate_handshake",
    "get_server_info",
]
