"""
Built-in tool packs.

These are the tools available in every process: web, data and
communication.
"""

import logging
from typing import Dict, List, Optional, Type

from .base import Tool
from .communication import COMMUNICATION_TOOLS
from .data import DATA_TOOLS
from .errors import DuplicateToolIdError
from .registry import ToolRegistry, get_registry
from .web import WEB_TOOLS

logger = logging.getLogger(__name__)


BUILTIN_TOOLS: Dict[str, List[Type[Tool]]] = {
    "web": WEB_TOOLS,
    "data": DATA_TOOLS,
    "communication": COMMUNICATION_TOOLS,
}


def get_builtin_tools() -> List[Tool]:
    """Fresh instances of every built-in tool, in pack order."""
    return [tool_class() for tools in BUILTIN_TOOLS.values() for tool_class in tools]


def register_builtin_tools(registry: Optional[ToolRegistry] = None) -> int:
    """
    Register all built-in tools with a registry (the global one by default).

    Ids that are already registered are skipped, so calling this twice
    is harmless. Returns the number of tools registered.
    """
    registry = registry if registry is not None else get_registry()
    count = 0
    for tool in get_builtin_tools():
        try:
            registry.register(tool)
            count += 1
        except DuplicateToolIdError:
            logger.debug(f"Built-in tool {tool.id} already registered")

    logger.info(f"Registered {count} built-in tool(s)")
    return count
