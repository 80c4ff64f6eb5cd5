"""
Digital Tools - declare once, invoke from anywhere.

A registry and invocation engine for business tools that both human
workers and AI agents can call.

Example:
    >>> from digital_tools import ToolExecutor, ToolRegistry, register_builtin_tools
    >>> registry = ToolRegistry()
    >>> register_builtin_tools(registry)
    >>> result = await ToolExecutor(registry).invoke("data.json.parse", {"text": "[1, 2]"})
"""

__version__ = "1.0.0"

from .config import Config, get_config
from .tools import (
    Audience,
    ToolContext,
    ToolExecutor,
    ToolRegistry,
    ToolResult,
    ToolSpec,
    get_registry,
    register_builtin_tools,
)

__all__ = [
    "__version__",
    "Config",
    "get_config",
    "Audience",
    "ToolContext",
    "ToolExecutor",
    "ToolRegistry",
    "ToolResult",
    "ToolSpec",
    "get_registry",
    "register_builtin_tools",
]
