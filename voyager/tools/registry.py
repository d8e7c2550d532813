"""
Tool Registry - Single source of truth for tool definitions.

Holds each tool's metadata, parameter schema, handler and usage counter.
Membership is open while the process starts up and closed once the
registry is sealed; the usage counters are the only state that changes
afterwards.
"""

import inspect
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional, Union

from pydantic import BaseModel

from ..errors import (
    DuplicateToolError,
    RegistrySealedError,
    ToolExecutionError,
    UnknownToolError,
)
from .schema import check_handler_signature, compile_parameter_schema, validate_arguments

logger = logging.getLogger(__name__)

ToolHandler = Callable[..., Union[Any, Awaitable[Any]]]


@dataclass
class ToolDefinition:
    """Metadata for a tool - defined once, used everywhere."""

    name: str
    description: str
    parameters: dict  # JSON-schema object: properties, required, enum
    handler: ToolHandler
    usage_count: int = 0
    arguments_model: Optional[type[BaseModel]] = field(default=None, repr=False)

    def schema(self) -> dict:
        """Read-only description of the tool for the backend and for clients."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.parameters,
        }


class ToolRegistry:
    """Registry of the tools a model may invoke."""

    def __init__(self, validate_arguments: bool = True):
        self._tools: dict[str, ToolDefinition] = {}
        self._lock = threading.Lock()
        self._sealed = False
        self.validate_arguments = validate_arguments

    def register(self, definition: ToolDefinition) -> ToolDefinition:
        """
        Register a tool.

        The parameter schema is checked against the handler signature and
        compiled for argument validation.

        Raises:
            DuplicateToolError: If the name is already registered
            ToolSchemaError: If schema and handler disagree
            RegistrySealedError: If the registry has been sealed
        """
        if self._sealed:
            raise RegistrySealedError(
                f"Cannot register '{definition.name}': registry is sealed"
            )
        if definition.name in self._tools:
            raise DuplicateToolError(definition.name)

        check_handler_signature(definition.name, definition.handler, definition.parameters)
        definition.arguments_model = compile_parameter_schema(
            definition.name, definition.parameters
        )
        self._tools[definition.name] = definition
        logger.debug("Registered tool: %s", definition.name)
        return definition

    def seal(self) -> None:
        """Close the registry to further registration."""
        self._sealed = True

    @property
    def sealed(self) -> bool:
        return self._sealed

    def lookup(self, name: str) -> Optional[ToolDefinition]:
        """Get a tool by name."""
        return self._tools.get(name)

    def names(self) -> list[str]:
        return list(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    async def invoke(self, name: str, arguments: Any) -> Any:
        """
        Invoke a tool handler.

        The usage counter is incremented once the call is dispatched, even
        if the handler then fails.

        Raises:
            UnknownToolError: If no tool has this name
            InvalidToolArgumentsError: If the arguments fail schema validation
            ToolExecutionError: If the handler raises
        """
        tool = self._tools.get(name)
        if tool is None:
            raise UnknownToolError(name)

        if self.validate_arguments and tool.arguments_model is not None:
            kwargs = validate_arguments(name, tool.arguments_model, arguments)
        else:
            kwargs = dict(arguments or {})

        with self._lock:
            tool.usage_count += 1

        try:
            result = tool.handler(**kwargs)
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            raise ToolExecutionError(str(e) or type(e).__name__, tool_name=name) from e
        return result

    def export_schemas(self) -> list[dict]:
        """Get {name, description, inputSchema} for every tool, in registration order."""
        return [tool.schema() for tool in self._tools.values()]

    def usage_counts(self) -> dict[str, int]:
        """Get a snapshot of per-tool usage counters."""
        with self._lock:
            return {name: tool.usage_count for name, tool in self._tools.items()}

    def reset_usage(self) -> None:
        """Set every usage counter to zero."""
        with self._lock:
            for tool in self._tools.values():
                tool.usage_count = 0
