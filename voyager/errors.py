"""
Exception hierarchy for Voyager.

Tool errors are recoverable: the orchestration loop turns them into a tool
result and keeps going. Backend errors abort the current chat request.
"""

from typing import Optional


class VoyagerError(Exception):
    """Base class for all Voyager errors."""


# =============================================================================
# Registry
# =============================================================================


class ToolRegistryError(VoyagerError):
    """Raised when the tool registry is misused."""


class DuplicateToolError(ToolRegistryError):
    """A tool with the same name is already registered."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Tool '{name}' is already registered")


class ToolSchemaError(ToolRegistryError):
    """A tool's parameter schema does not match its handler."""


class RegistrySealedError(ToolRegistryError):
    """The registry no longer accepts new tools."""


# =============================================================================
# Tool dispatch
# =============================================================================


class ToolError(VoyagerError):
    """Base class for failures at the per-tool-call boundary."""

    def __init__(self, message: str, tool_name: Optional[str] = None):
        self.tool_name = tool_name
        super().__init__(message)


class UnknownToolError(ToolError):
    """The model requested a tool that is not registered."""

    def __init__(self, tool_name: str):
        super().__init__(f"Unknown tool: {tool_name}", tool_name=tool_name)


class InvalidToolArgumentsError(ToolError):
    """Tool arguments do not satisfy the tool's parameter schema."""


class ToolExecutionError(ToolError):
    """The tool handler raised. The original exception is the __cause__."""


# =============================================================================
# Model backend
# =============================================================================


class BackendError(VoyagerError):
    """Base class for model backend failures."""


class BackendUnavailableError(BackendError):
    """The transport could not reach the model backend."""


class BackendProtocolError(BackendError):
    """The backend returned a malformed or non-success response."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class BudgetExhaustedError(VoyagerError):
    """The iteration budget ran out before the model produced an answer.

    Carried on the loop outcome rather than raised.
    """

    def __init__(self, max_iterations: int):
        self.max_iterations = max_iterations
        super().__init__(
            f"Reached the maximum of {max_iterations} model iterations without an answer"
        )
