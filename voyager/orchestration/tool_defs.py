"""
Tool definitions for the orchestration loop.

Converts ToolRegistry entries into the function-calling manifest the model
backend expects alongside each request.
"""

from ..tools.registry import ToolRegistry


def build_tool_definitions(registry: ToolRegistry) -> list[dict]:
    """
    Build function-calling tool definitions from the registry.

    Args:
        registry: Registry holding the available tools.

    Returns:
        List of ``{"type": "function", "function": {...}}`` definitions,
        in registration order.
    """
    tools: list[dict] = []

    for schema in registry.export_schemas():
        tools.append(
            {
                "type": "function",
                "function": {
                    "name": schema["name"],
                    "description": schema["description"],
                    "parameters": schema["inputSchema"],
                },
            }
        )

    return tools


def tool_names(tools: list[dict]) -> list[str]:
    """Names of the tools in a manifest."""
    return [tool["function"]["name"] for tool in tools]
