"""
Digital Tools tool system.

Tools are typed, permissioned capabilities that human workers and AI
agents invoke through one engine: look up, validate, gate, execute.
"""

from .errors import (
    ToolError,
    UnknownToolError,
    DuplicateToolIdError,
    ValidationError,
    MissingRequiredParameterError,
    TypeMismatchError,
    UnexpectedParameterError,
    AccessDeniedError,
    AudienceMismatchError,
    PermissionDeniedError,
    ConfirmationRequiredError,
    HandlerError,
    InternalError,
)
from .base import (
    Audience,
    InvocationState,
    Permission,
    ParamSpec,
    ToolSpec,
    ToolContext,
    ToolResult,
    Tool,
    FunctionTool,
    ToolBuilder,
    define_tool,
    params_from_schema,
    tool,
    param,
)
from .validation import ValueKind, kind_of, validate_params
from .gate import ConfirmationStore, PermissionGate
from .registry import (
    ToolRegistry,
    get_registry,
    set_registry,
    reset_registry,
    register_tool,
    get_tool,
)
from .models import InvocationRequest, InvocationResponse
from .executor import ToolExecutor, execute_tool, get_executor, reset_executor
from .builtin import BUILTIN_TOOLS, get_builtin_tools, register_builtin_tools

__all__ = [
    # Errors
    "ToolError",
    "UnknownToolError",
    "DuplicateToolIdError",
    "ValidationError",
    "MissingRequiredParameterError",
    "TypeMismatchError",
    "UnexpectedParameterError",
    "AccessDeniedError",
    "AudienceMismatchError",
    "PermissionDeniedError",
    "ConfirmationRequiredError",
    "HandlerError",
    "InternalError",
    # Base
    "Audience",
    "InvocationState",
    "Permission",
    "ParamSpec",
    "ToolSpec",
    "ToolContext",
    "ToolResult",
    "Tool",
    "FunctionTool",
    "ToolBuilder",
    "define_tool",
    "params_from_schema",
    "tool",
    "param",
    # Validation
    "ValueKind",
    "kind_of",
    "validate_params",
    # Gate
    "ConfirmationStore",
    "PermissionGate",
    # Registry
    "ToolRegistry",
    "get_registry",
    "set_registry",
    "reset_registry",
    "register_tool",
    "get_tool",
    # Models
    "InvocationRequest",
    "InvocationResponse",
    # Executor
    "ToolExecutor",
    "execute_tool",
    "get_executor",
    "reset_executor",
    # Built-in tools
    "BUILTIN_TOOLS",
    "get_builtin_tools",
    "register_builtin_tools",
]
