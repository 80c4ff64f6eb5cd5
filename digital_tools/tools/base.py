"""
Base classes for the Digital Tools system.

A tool is a named, invocable capability with:
- Declared parameters (validated before the handler runs)
- An audience (human callers, AI agents, or both)
- Permission requirements
- An optional confirmation requirement for side-effecting actions
"""

import dataclasses
import inspect
import re
import time
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, Type, Union, get_type_hints

from .errors import ToolError
from .validation import validate_params

TOOL_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]+(\.[A-Za-z0-9_-]+)*$")

PARAM_TYPES = ("string", "number", "integer", "boolean", "array", "object", "null", "any")


class Audience(str, Enum):
    """Which class of caller may invoke a tool."""
    HUMAN = "human"
    AI = "ai"
    BOTH = "both"

    @classmethod
    def parse(cls, value: Union[str, "Audience"]) -> "Audience":
        if isinstance(value, Audience):
            return value
        normalized = str(value).strip().lower()
        if normalized == "agent":
            return cls.AI
        return cls(normalized)

    def allows(self, caller: "Audience") -> bool:
        """Check whether a caller class may use a tool with this audience."""
        return self is Audience.BOTH or self is caller


class InvocationState(str, Enum):
    """Lifecycle of a single invocation."""
    RECEIVED = "received"
    VALIDATED = "validated"
    GATED = "gated"
    EXECUTING = "executing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class Permission:
    """
    A ``resource:action`` pair, optionally narrowed to a scope.

    Grants may use ``*`` for resource or action. A grant without a
    scope covers every scope.
    """
    resource: str
    action: str
    scope: Optional[str] = None

    @classmethod
    def parse(cls, value: Union[str, "Permission", Dict[str, Any]]) -> "Permission":
        if isinstance(value, Permission):
            return value
        if isinstance(value, dict):
            return cls(
                resource=value["resource"],
                action=value.get("action") or value.get("type", "*"),
                scope=value.get("scope"),
            )
        parts = str(value).split(":")
        if len(parts) == 1:
            return cls(resource=parts[0], action="*")
        if len(parts) == 2:
            return cls(resource=parts[0], action=parts[1])
        return cls(resource=parts[0], action=parts[1], scope=":".join(parts[2:]))

    def covers(self, required: "Permission") -> bool:
        """Check if this grant covers a required permission."""
        if self.resource != "*" and self.resource != required.resource:
            return False
        if self.action != "*" and self.action != required.action:
            return False
        if self.scope is None:
            return True
        return self.scope == required.scope

    def __str__(self) -> str:
        base = f"{self.resource}:{self.action}"
        return f"{base}:{self.scope}" if self.scope else base


@dataclass(frozen=True)
class ParamSpec:
    """Specification for a tool parameter."""

    name: str
    type: str = "string"
    description: str = ""
    required: bool = True
    default: Any = None

    # Constraints
    enum: Optional[Tuple[Any, ...]] = None
    items: Optional[str] = None

    def __post_init__(self):
        if self.type not in PARAM_TYPES:
            raise ValueError(f"Unknown parameter type for {self.name}: {self.type}")
        if self.items is not None and self.items not in PARAM_TYPES:
            raise ValueError(f"Unknown item type for {self.name}: {self.items}")
        if self.enum is not None and not isinstance(self.enum, tuple):
            object.__setattr__(self, "enum", tuple(self.enum))

    @property
    def has_default(self) -> bool:
        return self.default is not None

    def to_json_schema(self) -> dict:
        """Convert to JSON Schema format."""
        schema: Dict[str, Any] = {}
        if self.type != "any":
            schema["type"] = self.type

        if self.description:
            schema["description"] = self.description
        if self.default is not None:
            schema["default"] = self.default
        if self.enum:
            schema["enum"] = list(self.enum)
        if self.items and self.items != "any":
            schema["items"] = {"type": self.items}

        return schema


def _as_tuple(value: Optional[Iterable[Any]]) -> tuple:
    if value is None:
        return ()
    if isinstance(value, (str, bytes)):
        return (value,)
    return tuple(value)


@dataclass(frozen=True)
class ToolSpec:
    """
    Complete, immutable definition of a tool.

    The ``id`` is the registry key, e.g. ``communication.email.send``.
    """

    # Identity
    id: str
    name: str = ""
    description: str = ""

    # Classification
    category: str = "general"
    subcategory: Optional[str] = None
    tags: Tuple[str, ...] = ()

    # Parameters
    parameters: Tuple[ParamSpec, ...] = ()
    strict: bool = False
    output: Optional[Dict[str, Any]] = None

    # Access
    audience: Audience = Audience.BOTH
    permissions: Tuple[Permission, ...] = ()
    requires_confirmation: bool = False

    # Execution
    idempotent: bool = False

    def __post_init__(self):
        if not self.id or not TOOL_ID_PATTERN.match(self.id):
            raise ValueError(f"Invalid tool id: {self.id!r}")

        parameters = _as_tuple(self.parameters)
        seen = set()
        for p in parameters:
            if p.name in seen:
                raise ValueError(f"Duplicate parameter {p.name!r} in tool {self.id}")
            seen.add(p.name)

        object.__setattr__(self, "parameters", parameters)
        object.__setattr__(self, "tags", _as_tuple(self.tags))
        object.__setattr__(self, "audience", Audience.parse(self.audience))
        object.__setattr__(
            self, "permissions", tuple(Permission.parse(p) for p in _as_tuple(self.permissions))
        )
        if not self.name:
            object.__setattr__(self, "name", self.id)

    def get_param(self, name: str) -> Optional[ParamSpec]:
        for p in self.parameters:
            if p.name == name:
                return p
        return None

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "subcategory": self.subcategory,
            "tags": list(self.tags),
            "audience": self.audience.value,
            "parameters": [
                {
                    "name": p.name,
                    "type": p.type,
                    "description": p.description,
                    "required": p.required,
                    "default": p.default,
                }
                for p in self.parameters
            ],
            "permissions": [str(p) for p in self.permissions],
            "requires_confirmation": self.requires_confirmation,
            "idempotent": self.idempotent,
            "strict": self.strict,
        }

    def to_json_schema(self) -> dict:
        """Generate JSON Schema for parameters."""
        return {
            "type": "object",
            "properties": {p.name: p.to_json_schema() for p in self.parameters},
            "required": [p.name for p in self.parameters if p.required],
            "additionalProperties": not self.strict,
        }

    def to_mcp(self) -> dict:
        """Describe the tool in Model Context Protocol form."""
        descriptor = {
            "name": self.id,
            "description": self.description,
            "inputSchema": self.to_json_schema(),
        }
        if self.output is not None:
            descriptor["outputSchema"] = self.output
        return descriptor


@dataclass
class ToolContext:
    """Caller context for an invocation."""

    caller: Audience = Audience.HUMAN
    caller_id: Optional[str] = None

    # Granted permissions; "resource:action[:scope]" strings are accepted
    permissions: List[Permission] = field(default_factory=list)

    # Token issued by a previous CONFIRMATION_REQUIRED result
    confirmation_token: Optional[str] = None

    # Tracking
    request_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    trace_id: Optional[str] = None
    timestamp: float = field(default_factory=time.time)

    def __post_init__(self):
        self.caller = Audience.parse(self.caller)
        if self.caller is Audience.BOTH:
            raise ValueError("Caller must be 'human' or 'ai'")
        self.permissions = [Permission.parse(p) for p in self.permissions]

    def has_permission(self, required: Union[str, Permission]) -> bool:
        """Check if context has a required permission."""
        required = Permission.parse(required)
        return any(grant.covers(required) for grant in self.permissions)

    def confirmed(self, token: str) -> "ToolContext":
        """Copy of this context carrying a confirmation token."""
        return dataclasses.replace(
            self,
            permissions=list(self.permissions),
            confirmation_token=token,
            request_id=uuid.uuid4().hex,
        )


@dataclass
class ToolResult:
    """Standard result wrapper for tool invocation."""

    success: bool
    result: Any = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)

    # Invocation metadata
    tool_id: Optional[str] = None
    request_id: Optional[str] = None
    state: InvocationState = InvocationState.COMPLETED
    duration_ms: float = 0
    attempts: int = 1

    @property
    def needs_confirmation(self) -> bool:
        return self.error_code == "CONFIRMATION_REQUIRED"

    @property
    def confirmation_token(self) -> Optional[str]:
        return self.details.get("confirmation_token")

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "result": self.result,
            "error": self.error,
            "error_code": self.error_code,
            "details": self.details,
            "tool_id": self.tool_id,
            "request_id": self.request_id,
            "state": self.state.value,
            "duration_ms": self.duration_ms,
            "attempts": self.attempts,
        }

    @classmethod
    def ok(cls, result: Any, **kwargs) -> "ToolResult":
        """Create a successful result."""
        return cls(success=True, result=result, state=InvocationState.COMPLETED, **kwargs)

    @classmethod
    def fail(cls, error: str, code: str = "ERROR", **kwargs) -> "ToolResult":
        """Create a failed result."""
        kwargs.setdefault("state", InvocationState.FAILED)
        return cls(success=False, error=error, error_code=code, **kwargs)

    @classmethod
    def from_error(cls, exc: ToolError, **kwargs) -> "ToolResult":
        """Create a failed result from a ToolError."""
        return cls.fail(str(exc), code=exc.code, details=exc.details, **kwargs)


class Tool(ABC):
    """
    Base class for tools.

    Subclass this to create custom tools. Define ``spec`` and override
    ``execute()``, which may be a plain or an ``async`` method.

    Example:
        class SendSmsTool(Tool):
            spec = ToolSpec(
                id="communication.sms.send",
                name="Send SMS",
                category="communication",
                parameters=(
                    ParamSpec("to", "string", "Phone number"),
                    ParamSpec("message", "string", "Message text"),
                ),
                requires_confirmation=True,
            )

            async def execute(self, to: str, message: str, **kwargs) -> Any:
                return {"success": True}
    """

    spec: ToolSpec  # Subclasses must define this

    def __init__(self, registry: Optional[Any] = None):
        self.registry = registry

    @property
    def id(self) -> str:
        return self.spec.id

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def description(self) -> str:
        return self.spec.description

    @property
    def category(self) -> str:
        return self.spec.category

    @property
    def subcategory(self) -> Optional[str]:
        return self.spec.subcategory

    @property
    def audience(self) -> Audience:
        return self.spec.audience

    @property
    def parameters(self) -> Tuple[ParamSpec, ...]:
        return self.spec.parameters

    @property
    def permissions(self) -> Tuple[Permission, ...]:
        return self.spec.permissions

    @property
    def requires_confirmation(self) -> bool:
        return self.spec.requires_confirmation

    @property
    def idempotent(self) -> bool:
        return self.spec.idempotent

    @property
    def tags(self) -> Tuple[str, ...]:
        return self.spec.tags

    def validate(self, params: Dict[str, Any], strict: bool = False) -> Dict[str, Any]:
        """
        Validate and normalize parameters.

        Returns validated params (with defaults filled in).
        Raises ValidationError if validation fails.
        """
        return validate_params(self.spec, params, strict=strict)

    @abstractmethod
    def execute(self, **kwargs) -> Any:
        """
        Execute the tool with validated parameters.

        May return a value or an awaitable; the executor awaits it.
        """
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.id}>"


class FunctionTool(Tool):
    """A tool whose handler is a plain function taking the argument map."""

    def __init__(
        self,
        spec: ToolSpec,
        handler: Callable[[Dict[str, Any]], Any],
        registry: Optional[Any] = None,
    ):
        super().__init__(registry=registry)
        self.spec = spec
        self.handler = handler

    def execute(self, **kwargs) -> Any:
        return self.handler(kwargs)


# === Schema conversion ===

def params_from_schema(schema: Dict[str, Any]) -> Tuple[ParamSpec, ...]:
    """
    Convert an object JSON Schema into parameter specs.

    A non-object schema becomes a single required ``input`` parameter.
    """
    if schema.get("type") != "object" or "properties" not in schema:
        return (
            ParamSpec(
                name="input",
                type=schema.get("type", "any"),
                description=schema.get("description", "Input value"),
                required=True,
            ),
        )

    required = set(schema.get("required", []))
    params = []
    for name, prop in schema["properties"].items():
        items = prop.get("items", {}).get("type") if isinstance(prop.get("items"), dict) else None
        params.append(ParamSpec(
            name=name,
            type=prop.get("type", "any"),
            description=prop.get("description", f"Parameter: {name}"),
            required=name in required,
            default=prop.get("default"),
            enum=prop.get("enum"),
            items=items,
        ))
    return tuple(params)


# === Functional tool definition ===

def define_tool(
    id: str,
    handler: Callable[[Dict[str, Any]], Any],
    name: str = "",
    description: str = "",
    category: str = "general",
    parameters: Optional[Iterable[ParamSpec]] = None,
    input_schema: Optional[Dict[str, Any]] = None,
    **spec_kwargs,
) -> FunctionTool:
    """
    Define a tool from a handler that receives the validated argument map.

    Usage:
        send_email = define_tool(
            id="communication.email.send",
            name="Send Email",
            category="communication",
            input_schema={
                "type": "object",
                "properties": {"to": {"type": "array", "items": {"type": "string"}}},
                "required": ["to"],
            },
            handler=lambda args: {"success": True},
            requires_confirmation=True,
        )
    """
    if parameters is not None and input_schema is not None:
        raise ValueError("Pass either parameters or input_schema, not both")
    if input_schema is not None:
        parameters = params_from_schema(input_schema)

    spec = ToolSpec(
        id=id,
        name=name,
        description=description,
        category=category,
        parameters=tuple(parameters or ()),
        **spec_kwargs,
    )
    return FunctionTool(spec, handler)


def param(
    description: str = "",
    type: str = "string",
    required: bool = True,
    default: Any = None,
    enum: Optional[List[Any]] = None,
    items: Optional[str] = None,
) -> ParamSpec:
    """
    Helper for declaring parameters in ``@tool`` function signatures.

    Usage:
        @tool("communication.notify")
        async def notify(
            message: str = param("The message to send"),
            urgency: str = param("Urgency", required=False, default="normal"),
        ):
            ...
    """
    # Name is filled in by @tool
    return ParamSpec(
        name="",
        type=type,
        description=description,
        required=required,
        default=default,
        enum=enum,
        items=items,
    )


_HINT_TYPES = {
    str: "string",
    int: "integer",
    float: "number",
    bool: "boolean",
    list: "array",
    dict: "object",
}


def tool(
    id: str,
    name: str = "",
    description: str = "",
    category: str = "general",
    **spec_kwargs,
) -> Callable:
    """
    Decorator to create a tool class from a function.

    The function receives the validated arguments as keyword arguments.

    Usage:
        @tool("data.greet", description="Greet someone", category="data")
        async def greet(name: str) -> str:
            return f"Hello, {name}!"
    """
    def decorator(func: Callable) -> Type[Tool]:
        sig = inspect.signature(func)
        type_hints = get_type_hints(func)
        params = []

        for param_name, param_obj in sig.parameters.items():
            if param_obj.kind in (inspect.Parameter.VAR_KEYWORD, inspect.Parameter.VAR_POSITIONAL):
                continue

            if isinstance(param_obj.default, ParamSpec):
                params.append(dataclasses.replace(param_obj.default, name=param_name))
                continue

            has_default = param_obj.default is not inspect.Parameter.empty
            params.append(ParamSpec(
                name=param_name,
                type=_HINT_TYPES.get(type_hints.get(param_name), "any"),
                required=not has_default,
                default=param_obj.default if has_default else None,
            ))

        spec = ToolSpec(
            id=id,
            name=name or func.__name__,
            description=description or inspect.getdoc(func) or "",
            category=category,
            parameters=tuple(params),
            **spec_kwargs,
        )

        class DecoratedTool(Tool):
            def execute(self, **kwargs):
                return func(**kwargs)

        DecoratedTool.spec = spec
        DecoratedTool.__name__ = f"{func.__name__.title().replace('_', '')}Tool"
        DecoratedTool.__doc__ = spec.description

        return DecoratedTool

    return decorator


class ToolBuilder:
    """
    Fluent builder for tools.

    Usage:
        fetch = (
            ToolBuilder("web.fetch")
            .name("Fetch URL")
            .category("web", "fetch")
            .input({"type": "object", "properties": {"url": {"type": "string"}}, "required": ["url"]})
            .handler(fetch_url)
            .build()
        )
    """

    def __init__(self, id: str):
        self._id = id
        self._name = ""
        self._description = ""
        self._category: Optional[str] = None
        self._subcategory: Optional[str] = None
        self._schema: Optional[Dict[str, Any]] = None
        self._output: Optional[Dict[str, Any]] = None
        self._handler: Optional[Callable[[Dict[str, Any]], Any]] = None
        self._options: Dict[str, Any] = {}

    def name(self, name: str) -> "ToolBuilder":
        self._name = name
        return self

    def description(self, description: str) -> "ToolBuilder":
        self._description = description
        return self

    def category(self, category: str, subcategory: Optional[str] = None) -> "ToolBuilder":
        self._category = category
        if subcategory is not None:
            self._subcategory = subcategory
        return self

    def subcategory(self, subcategory: str) -> "ToolBuilder":
        self._subcategory = subcategory
        return self

    def input(self, schema: Dict[str, Any]) -> "ToolBuilder":
        self._schema = schema
        return self

    def output(self, schema: Dict[str, Any]) -> "ToolBuilder":
        self._output = schema
        return self

    def handler(self, fn: Callable[[Dict[str, Any]], Any]) -> "ToolBuilder":
        self._handler = fn
        return self

    def options(self, **options) -> "ToolBuilder":
        self._options.update(options)
        return self

    def build(self) -> FunctionTool:
        missing = [
            label for label, value in (
                ("name", self._name),
                ("description", self._description),
                ("category", self._category),
                ("input", self._schema),
                ("handler", self._handler),
            )
            if not value
        ]
        if missing:
            raise ValueError(f"Tool {self._id} is missing: {', '.join(missing)}")

        options = dict(self._options)
        if self._output is not None:
            options["output"] = self._output

        return define_tool(
            id=self._id,
            name=self._name,
            description=self._description,
            category=self._category,
            subcategory=self._subcategory,
            input_schema=self._schema,
            handler=self._handler,
            **options,
        )

    def register(self, registry: Optional[Any] = None) -> FunctionTool:
        """Build the tool and register it (default registry if none given)."""
        from .registry import get_registry
        built = self.build()
        (registry if registry is not None else get_registry()).register(built)
        return built
