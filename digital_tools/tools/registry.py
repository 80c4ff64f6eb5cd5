"""
Tool Registry.

Stores tool definitions by id and indexes them by category so callers
can discover what is available. Listing order is registration order.
"""

import logging
import threading
from typing import Dict, Iterable, List, Optional, Type, Union

from .base import Audience, Tool
from .errors import DuplicateToolIdError, UnknownToolError

logger = logging.getLogger(__name__)


class ToolRegistry:
    """
    Registry for tools.

    Ids are unique: registering an id twice is rejected and the first
    definition is kept. Entries are never removed individually;
    ``clear()`` resets everything.

    Usage:
        registry = ToolRegistry()

        registry.register(ParseJsonTool())

        tool = registry.get("data.json.parse")
        data_tools = registry.list_by_category("data")
    """

    def __init__(self, name: str = "default"):
        self.name = name

        # Insertion-ordered; the category indexes hold ids in the same order
        self._tools: Dict[str, Tool] = {}
        self._by_category: Dict[str, List[str]] = {}
        self._by_subcategory: Dict[str, List[str]] = {}

        # Guards the id map and both indexes together
        self._lock = threading.RLock()

    # === Registration ===

    def register(self, tool: Union[Tool, Type[Tool]]) -> Tool:
        """
        Register a tool instance (or a Tool subclass, which is instantiated).

        Raises DuplicateToolIdError if the id is already registered.
        """
        if isinstance(tool, type):
            tool = tool(registry=self)

        key = tool.id
        with self._lock:
            if key in self._tools:
                raise DuplicateToolIdError(key)

            tool.registry = self
            self._tools[key] = tool
            self._by_category.setdefault(tool.category, []).append(key)
            if tool.subcategory:
                self._by_subcategory.setdefault(tool.subcategory, []).append(key)

        logger.info(f"Registered tool: {key}")
        return tool

    def register_many(self, tools: Iterable[Union[Tool, Type[Tool]]]) -> int:
        """Register several tools; stops at the first duplicate."""
        count = 0
        for t in tools:
            self.register(t)
            count += 1
        return count

    # === Lookup ===

    def get(self, tool_id: str) -> Tool:
        """Get a tool by id. Raises UnknownToolError if absent."""
        with self._lock:
            tool = self._tools.get(tool_id)
        if tool is None:
            raise UnknownToolError(tool_id)
        return tool

    def find(self, tool_id: str) -> Optional[Tool]:
        """Get a tool by id, or None."""
        with self._lock:
            return self._tools.get(tool_id)

    def has(self, tool_id: str) -> bool:
        with self._lock:
            return tool_id in self._tools

    def __contains__(self, tool_id: object) -> bool:
        return isinstance(tool_id, str) and self.has(tool_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._tools)

    def list(self) -> List[Tool]:
        """List all tools in registration order."""
        with self._lock:
            return list(self._tools.values())

    def list_ids(self) -> List[str]:
        with self._lock:
            return list(self._tools.keys())

    def list_by_category(self, category: str) -> List[Tool]:
        """List tools in a category, in registration order."""
        with self._lock:
            return [self._tools[key] for key in self._by_category.get(category, [])]

    def list_by_subcategory(self, subcategory: str) -> List[Tool]:
        with self._lock:
            return [self._tools[key] for key in self._by_subcategory.get(subcategory, [])]

    def categories(self) -> List[str]:
        """Categories in the order they were first seen."""
        with self._lock:
            return list(self._by_category.keys())

    def query(
        self,
        category: Optional[str] = None,
        subcategory: Optional[str] = None,
        audience: Optional[Union[str, Audience]] = None,
        tags: Optional[Iterable[str]] = None,
        search: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[Tool]:
        """
        Find tools matching all given filters.

        ``audience`` keeps tools that caller class may use, ``tags``
        matches any of the given tags and ``search`` is a
        case-insensitive substring match over id, name, description
        and tags.
        """
        caller = Audience.parse(audience) if audience is not None else None
        wanted_tags = set(tags or ())
        needle = search.lower() if search else None

        result = []
        for t in self.list():
            if category is not None and t.category != category:
                continue
            if subcategory is not None and t.subcategory != subcategory:
                continue
            if caller is not None and caller is not Audience.BOTH and not t.audience.allows(caller):
                continue
            if wanted_tags and not wanted_tags.intersection(t.tags):
                continue
            if needle is not None:
                haystack = " ".join((t.id, t.name, t.description, *t.tags)).lower()
                if needle not in haystack:
                    continue
            result.append(t)

        result = result[offset:]
        if limit is not None:
            result = result[:limit]
        return result

    # === Export ===

    def to_mcp(self, tool_id: str) -> dict:
        """Describe one tool in Model Context Protocol form."""
        return self.get(tool_id).spec.to_mcp()

    def list_mcp(self) -> List[dict]:
        return [t.spec.to_mcp() for t in self.list()]

    # === Lifecycle ===

    def clear(self) -> None:
        """Remove all tools. Intended for tests and re-initialization."""
        with self._lock:
            count = len(self._tools)
            self._tools.clear()
            self._by_category.clear()
            self._by_subcategory.clear()
        logger.debug(f"Cleared {count} tool(s) from registry {self.name}")

    def stats(self) -> dict:
        """Get registry statistics."""
        with self._lock:
            return {
                "tools": len(self._tools),
                "categories": {c: len(ids) for c, ids in self._by_category.items()},
                "requires_confirmation": sum(
                    1 for t in self._tools.values() if t.requires_confirmation
                ),
            }


# Global registry
_registry: Optional[ToolRegistry] = None
_registry_lock = threading.Lock()


def get_registry() -> ToolRegistry:
    """Get the global tool registry, creating it on first use."""
    global _registry
    with _registry_lock:
        if _registry is None:
            _registry = ToolRegistry()
        return _registry


def set_registry(registry: ToolRegistry) -> None:
    """Set the global tool registry."""
    global _registry
    with _registry_lock:
        _registry = registry


def reset_registry() -> None:
    """Reset the global tool registry."""
    global _registry
    with _registry_lock:
        _registry = None


def register_tool(tool: Union[Tool, Type[Tool]]) -> Tool:
    """Register a tool in the global registry."""
    return get_registry().register(tool)


def get_tool(tool_id: str) -> Optional[Tool]:
    """Get a tool from the global registry, or None."""
    return get_registry().find(tool_id)
