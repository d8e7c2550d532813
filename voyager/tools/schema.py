"""
Parameter schema compilation.

Tool parameter schemas are written in the JSON-schema subset the model
backend understands (object with typed properties, ``required`` and
``enum``). At registration each schema is checked against the handler's
signature and compiled into a pydantic model used to validate model-supplied
arguments before dispatch.
"""

import inspect
from typing import Any, Callable, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, ValidationError, create_model

from ..errors import InvalidToolArgumentsError, ToolSchemaError

_SCALAR_TYPES: dict[str, Any] = {
    "string": str,
    # Keep integers as integers when the schema only says "number".
    "number": Union[int, float],
    "integer": int,
    "boolean": bool,
    "object": dict,
}


def _annotation_for(tool_name: str, prop_name: str, prop: dict) -> Any:
    """Map one JSON-schema property to a Python type annotation."""
    if "enum" in prop:
        values = tuple(prop["enum"])
        if not values:
            raise ToolSchemaError(
                f"Tool '{tool_name}': enum for '{prop_name}' is empty"
            )
        return Literal[values]

    json_type = prop.get("type")
    if json_type == "array":
        items = prop.get("items")
        if not items:
            return list[Any]
        return list[_annotation_for(tool_name, f"{prop_name}[]", items)]

    if json_type not in _SCALAR_TYPES:
        raise ToolSchemaError(
            f"Tool '{tool_name}': unsupported type {json_type!r} for '{prop_name}'"
        )
    return _SCALAR_TYPES[json_type]


def check_handler_signature(tool_name: str, handler: Callable, schema: dict) -> None:
    """
    Verify that a handler can be called with arguments matching the schema.

    Every declared property must be an accepted keyword, every required
    property must be declared, and every handler parameter without a default
    must be required.

    Raises:
        ToolSchemaError: On any mismatch
    """
    if schema.get("type") != "object":
        raise ToolSchemaError(f"Tool '{tool_name}': parameter schema must be an object")

    properties = schema.get("properties", {})
    required = set(schema.get("required", []))

    undeclared = required - set(properties)
    if undeclared:
        raise ToolSchemaError(
            f"Tool '{tool_name}': required parameters not declared: {sorted(undeclared)}"
        )

    try:
        params = inspect.signature(handler).parameters
    except (TypeError, ValueError) as e:
        raise ToolSchemaError(f"Tool '{tool_name}': handler has no signature: {e}") from e

    accepts_any_keyword = any(
        p.kind is inspect.Parameter.VAR_KEYWORD for p in params.values()
    )
    for prop_name in properties:
        if prop_name not in params and not accepts_any_keyword:
            raise ToolSchemaError(
                f"Tool '{tool_name}': handler does not accept parameter '{prop_name}'"
            )

    for name, param in params.items():
        if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue
        if param.default is inspect.Parameter.empty and name not in required:
            raise ToolSchemaError(
                f"Tool '{tool_name}': handler parameter '{name}' has no default "
                "but is not required by the schema"
            )


def compile_parameter_schema(tool_name: str, schema: dict) -> type[BaseModel]:
    """Compile a parameter schema into a pydantic model for argument validation."""
    properties = schema.get("properties", {})
    required = set(schema.get("required", []))

    fields: dict[str, Any] = {}
    for prop_name, prop in properties.items():
        annotation = _annotation_for(tool_name, prop_name, prop)
        if prop_name in required:
            fields[prop_name] = (annotation, ...)
        else:
            fields[prop_name] = (Optional[annotation], None)

    model_name = "".join(part.title() for part in tool_name.split("_")) + "Arguments"
    return create_model(
        model_name,
        __config__=ConfigDict(extra="ignore"),
        **fields,
    )


def validate_arguments(
    tool_name: str,
    arguments_model: type[BaseModel],
    arguments: Any,
) -> dict:
    """
    Validate model-supplied arguments.

    Returns:
        Keyword arguments for the handler. Properties the model omitted or
        sent as null are left out so handler defaults apply.

    Raises:
        InvalidToolArgumentsError: If the arguments do not match the schema
    """
    if arguments is None:
        arguments = {}
    if not isinstance(arguments, dict):
        raise InvalidToolArgumentsError(
            f"Arguments for '{tool_name}' must be an object, "
            f"got {type(arguments).__name__}",
            tool_name=tool_name,
        )
    try:
        parsed = arguments_model.model_validate(arguments)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(loc) for loc in err['loc']) or '<root>'}: {err['msg']}"
            for err in e.errors()
        )
        raise InvalidToolArgumentsError(
            f"Invalid arguments for '{tool_name}': {problems}",
            tool_name=tool_name,
        ) from e
    return parsed.model_dump(exclude_unset=True, exclude_none=True)
