"""
Parameter validation.

Argument maps are JSON-shaped. ``ValueKind`` classifies each value so
declared parameter types can be checked explicitly.
"""

import copy
import logging
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Mapping

from .errors import MissingRequiredParameterError, TypeMismatchError, UnexpectedParameterError

if TYPE_CHECKING:
    from .base import ParamSpec, ToolSpec

logger = logging.getLogger(__name__)


class ValueKind(str, Enum):
    """Kinds of JSON value."""
    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"
    NULL = "null"
    UNKNOWN = "unknown"


def kind_of(value: Any) -> ValueKind:
    """Classify a Python value as a JSON value kind."""
    # bool before int: bool is a subclass of int
    if value is None:
        return ValueKind.NULL
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, int):
        return ValueKind.INTEGER
    if isinstance(value, float):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, (list, tuple)):
        return ValueKind.ARRAY
    if isinstance(value, Mapping):
        return ValueKind.OBJECT
    return ValueKind.UNKNOWN


def matches_type(value: Any, declared: str) -> bool:
    """Check whether a value satisfies a declared parameter type."""
    if declared == "any":
        return True

    kind = kind_of(value)
    if declared == "number":
        return kind in (ValueKind.NUMBER, ValueKind.INTEGER)
    return kind.value == declared


def _check_value(param: "ParamSpec", value: Any) -> None:
    if not matches_type(value, param.type):
        raise TypeMismatchError(param.name, param.type, kind_of(value).value)

    if param.enum and value not in param.enum:
        allowed = ", ".join(repr(v) for v in param.enum)
        raise TypeMismatchError(param.name, f"one of [{allowed}]", repr(value))

    if param.items and param.type == "array":
        for i, item in enumerate(value):
            if not matches_type(item, param.items):
                raise TypeMismatchError(f"{param.name}[{i}]", param.items, kind_of(item).value)


def validate_params(spec: "ToolSpec", params: Mapping[str, Any], strict: bool = False) -> Dict[str, Any]:
    """
    Validate an argument map against a tool's parameters.

    Returns a new map with defaults filled in. A missing key and a
    ``None`` value are both treated as absent. Undeclared arguments
    pass through unless the tool (or ``strict``) is closed.

    Raises:
        MissingRequiredParameterError: a required parameter is absent
        TypeMismatchError: a value does not match its declared type
        UnexpectedParameterError: undeclared argument on a closed tool
    """
    params = dict(params or {})
    result: Dict[str, Any] = {}

    for param in spec.parameters:
        value = params.get(param.name)

        if value is None:
            if param.required:
                raise MissingRequiredParameterError(param.name)
            if param.has_default:
                result[param.name] = copy.deepcopy(param.default)
            continue

        _check_value(param, value)
        result[param.name] = value

    declared = {p.name for p in spec.parameters}
    for name, value in params.items():
        if name in declared:
            continue
        if strict or spec.strict:
            raise UnexpectedParameterError(name)
        result[name] = value

    logger.debug(f"Validated {len(result)} argument(s) for {spec.id}")
    return result
