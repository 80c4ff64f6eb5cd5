"""
Tests for parameter validation.
"""

import pytest

from digital_tools.tools import (
    MissingRequiredParameterError,
    ParamSpec,
    ToolSpec,
    TypeMismatchError,
    UnexpectedParameterError,
    ValidationError,
    ValueKind,
    kind_of,
    validate_params,
)


@pytest.fixture
def spec():
    return ToolSpec(
        id="test.validate",
        parameters=[
            ParamSpec("name", "string"),
            ParamSpec("count", "integer", required=False, default=1),
            ParamSpec("ratio", "number", required=False),
            ParamSpec("tags", "array", required=False, items="string", default=[]),
            ParamSpec("mode", "string", required=False, enum=["fast", "slow"]),
            ParamSpec("payload", "any", required=False),
        ],
    )


class TestKindOf:
    """Tests for JSON value classification."""

    def test_kinds(self):
        assert kind_of(None) is ValueKind.NULL
        assert kind_of(True) is ValueKind.BOOLEAN
        assert kind_of(3) is ValueKind.INTEGER
        assert kind_of(3.5) is ValueKind.NUMBER
        assert kind_of("x") is ValueKind.STRING
        assert kind_of([1]) is ValueKind.ARRAY
        assert kind_of((1,)) is ValueKind.ARRAY
        assert kind_of({"a": 1}) is ValueKind.OBJECT
        assert kind_of(object()) is ValueKind.UNKNOWN


class TestValidateParams:
    """Tests for validate_params."""

    def test_valid_params_with_defaults(self, spec):
        result = validate_params(spec, {"name": "Ada"})

        assert result == {"name": "Ada", "count": 1, "tags": []}

    def test_missing_required(self, spec):
        with pytest.raises(MissingRequiredParameterError) as exc_info:
            validate_params(spec, {"count": 2})

        assert exc_info.value.param == "name"
        assert exc_info.value.code == "MISSING_REQUIRED_PARAMETER"
        assert isinstance(exc_info.value, ValidationError)

    def test_none_counts_as_missing(self, spec):
        with pytest.raises(MissingRequiredParameterError):
            validate_params(spec, {"name": None})

        result = validate_params(spec, {"name": "Ada", "count": None})
        assert result["count"] == 1

    def test_type_mismatch(self, spec):
        with pytest.raises(TypeMismatchError) as exc_info:
            validate_params(spec, {"name": "Ada", "count": "5"})

        error = exc_info.value
        assert error.code == "TYPE_MISMATCH"
        assert error.details == {"param": "count", "expected": "integer", "actual": "string"}

    def test_bool_is_not_integer(self, spec):
        with pytest.raises(TypeMismatchError):
            validate_params(spec, {"name": "Ada", "count": True})

    def test_number_accepts_integer(self, spec):
        result = validate_params(spec, {"name": "Ada", "ratio": 2})
        assert result["ratio"] == 2

    def test_integer_rejects_float(self, spec):
        with pytest.raises(TypeMismatchError):
            validate_params(spec, {"name": "Ada", "count": 1.5})

    def test_enum(self, spec):
        assert validate_params(spec, {"name": "Ada", "mode": "fast"})["mode"] == "fast"

        with pytest.raises(TypeMismatchError) as exc_info:
            validate_params(spec, {"name": "Ada", "mode": "medium"})
        assert exc_info.value.param == "mode"

    def test_array_items(self, spec):
        with pytest.raises(TypeMismatchError) as exc_info:
            validate_params(spec, {"name": "Ada", "tags": ["a", 1]})

        assert exc_info.value.param == "tags[1]"

    def test_any_accepts_everything(self, spec):
        for value in ("s", 1, 1.5, True, [1], {"a": 1}):
            assert validate_params(spec, {"name": "Ada", "payload": value})["payload"] == value

    def test_defaults_are_copied(self, spec):
        first = validate_params(spec, {"name": "Ada"})
        first["tags"].append("mutated")

        second = validate_params(spec, {"name": "Ada"})
        assert second["tags"] == []
        assert spec.get_param("tags").default == []

    def test_input_not_mutated(self, spec):
        params = {"name": "Ada"}
        result = validate_params(spec, params)

        assert params == {"name": "Ada"}
        assert result is not params

    def test_extra_params_pass_through(self, spec):
        result = validate_params(spec, {"name": "Ada", "extra": 7})
        assert result["extra"] == 7

    def test_strict_rejects_extra(self, spec):
        with pytest.raises(UnexpectedParameterError) as exc_info:
            validate_params(spec, {"name": "Ada", "extra": 7}, strict=True)

        assert exc_info.value.param == "extra"
        assert exc_info.value.code == "UNEXPECTED_PARAMETER"

    def test_closed_tool_rejects_extra(self):
        closed = ToolSpec(id="test.closed", strict=True, parameters=[ParamSpec("x")])

        with pytest.raises(UnexpectedParameterError):
            validate_params(closed, {"x": "1", "y": "2"})

    def test_no_parameters(self):
        empty = ToolSpec(id="test.empty")

        assert validate_params(empty, {}) == {}
        assert validate_params(empty, None) == {}
