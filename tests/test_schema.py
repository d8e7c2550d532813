"""
Tests for parameter schema compilation and argument validation.
"""

import pytest

from voyager.errors import InvalidToolArgumentsError, ToolSchemaError
from voyager.tools.schema import compile_parameter_schema, validate_arguments

FLIGHT_SCHEMA = {
    "type": "object",
    "properties": {
        "origin": {"type": "string"},
        "passengers": {"type": "number"},
        "cabin_class": {"type": "string", "enum": ["economy", "business", "first"]},
        "flight_ids": {"type": "array", "items": {"type": "string"}},
    },
    "required": ["origin"],
}


class TestCompileParameterSchema:
    """Tests for compile_parameter_schema()."""

    def test_model_name(self):
        model = compile_parameter_schema("search_flights", FLIGHT_SCHEMA)
        assert model.__name__ == "SearchFlightsArguments"

    def test_unsupported_type(self):
        schema = {"type": "object", "properties": {"when": {"type": "datetime"}}}
        with pytest.raises(ToolSchemaError, match="unsupported type"):
            compile_parameter_schema("bad", schema)

    def test_empty_enum(self):
        schema = {"type": "object", "properties": {"mode": {"type": "string", "enum": []}}}
        with pytest.raises(ToolSchemaError, match="enum"):
            compile_parameter_schema("bad", schema)


class TestValidateArguments:
    """Tests for validate_arguments()."""

    @pytest.fixture
    def model(self):
        return compile_parameter_schema("search_flights", FLIGHT_SCHEMA)

    def test_omitted_optionals_left_out(self, model):
        """Only supplied properties are passed on, so handler defaults apply."""
        assert validate_arguments("search_flights", model, {"origin": "NYC"}) == {"origin": "NYC"}

    def test_null_optional_left_out(self, model):
        kwargs = validate_arguments("search_flights", model, {"origin": "NYC", "passengers": None})
        assert kwargs == {"origin": "NYC"}

    def test_integer_number_stays_integer(self, model):
        kwargs = validate_arguments("search_flights", model, {"origin": "NYC", "passengers": 2})
        assert kwargs["passengers"] == 2
        assert isinstance(kwargs["passengers"], int)

    def test_unknown_properties_dropped(self, model):
        kwargs = validate_arguments("search_flights", model, {"origin": "NYC", "seat": "14A"})
        assert kwargs == {"origin": "NYC"}

    def test_array_items(self, model):
        kwargs = validate_arguments(
            "search_flights", model, {"origin": "NYC", "flight_ids": ["FL-1", "FL-2"]}
        )
        assert kwargs["flight_ids"] == ["FL-1", "FL-2"]

    def test_missing_required(self, model):
        with pytest.raises(InvalidToolArgumentsError, match="origin"):
            validate_arguments("search_flights", model, {})

    def test_enum_violation(self, model):
        with pytest.raises(InvalidToolArgumentsError, match="cabin_class"):
            validate_arguments("search_flights", model, {"origin": "NYC", "cabin_class": "steerage"})

    def test_non_object_arguments(self, model):
        with pytest.raises(InvalidToolArgumentsError, match="must be an object") as exc_info:
            validate_arguments("search_flights", model, ["NYC"])
        assert exc_info.value.tool_name == "search_flights"
