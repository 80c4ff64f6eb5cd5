"""
Tool Executor - the invocation engine.

Each invocation moves through:
    RECEIVED -> VALIDATED -> GATED -> EXECUTING -> COMPLETED | FAILED

Only the EXECUTING step calls the handler. Lookup, validation and
gating failures end the invocation before any side effect. Every
outcome, including handler exceptions, comes back as a ToolResult.
"""

import asyncio
import dataclasses
import inspect
import logging
import time
import uuid
from collections import Counter
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Union

from .base import Audience, InvocationState, Tool, ToolContext, ToolResult
from .errors import HandlerError, InternalError, ToolError
from .gate import ConfirmationStore, PermissionGate
from .models import InvocationRequest
from .registry import ToolRegistry, get_registry

if TYPE_CHECKING:
    from ..config import Config

logger = logging.getLogger(__name__)


class ToolExecutor:
    """
    Validates, gates and runs tool invocations.

    The executor:
    1. Looks the tool up in the registry
    2. Validates parameters
    3. Checks audience, permissions and confirmation
    4. Runs the handler, awaiting it if it is asynchronous
    5. Retries handler failures for idempotent tools when asked

    Concurrent invocations are not serialized, even for the same tool.

    Usage:
        executor = ToolExecutor(registry)

        result = await executor.invoke(
            "data.json.parse",
            {"text": '{"name": "John"}'},
        )
    """

    def __init__(
        self,
        registry: Optional[ToolRegistry] = None,
        config: Optional["Config"] = None,
        confirmations: Optional[ConfirmationStore] = None,
    ):
        if config is None:
            from ..config import get_config
            config = get_config()

        self.registry = registry if registry is not None else get_registry()
        self.config = config
        self.default_caller = Audience.parse(config.default_caller)
        if self.default_caller is Audience.BOTH:
            raise ValueError("default_caller must be 'human' or 'ai'")
        if confirmations is None:
            confirmations = ConfirmationStore(ttl_seconds=config.confirmation_ttl_seconds)
        self.confirmations = confirmations
        self.gate = PermissionGate(self.confirmations)

        # Metrics
        self._invocations = 0
        self._successes = 0
        self._failures = 0
        self._errors_by_code: Counter = Counter()

    def _default_context(self) -> ToolContext:
        return ToolContext(caller=self.default_caller)

    async def invoke(
        self,
        tool_id: str,
        args: Optional[Dict[str, Any]] = None,
        context: Optional[ToolContext] = None,
        retries: int = 0,
    ) -> ToolResult:
        """
        Invoke a tool by id.

        Args:
            tool_id: Registered tool id
            args: Argument map
            context: Caller context (defaults to the configured caller)
            retries: Extra attempts after a handler failure; only used
                for tools declared idempotent

        Returns:
            ToolResult with success/failure and result data
        """
        context = context or self._default_context()
        args = args or {}
        self._invocations += 1
        start_time = time.time()

        attempts = 0
        while True:
            attempts += 1
            result = await self._invoke_once(tool_id, args, context)

            if result.success or result.error_code != "HANDLER_ERROR" or attempts > retries:
                break

            tool = self.registry.find(tool_id)
            if tool is None or not tool.idempotent:
                break

            logger.warning(f"Retrying {tool_id} (attempt {attempts + 1} of {retries + 1})")

        result.attempts = attempts
        result.duration_ms = (time.time() - start_time) * 1000

        if result.success:
            self._successes += 1
        else:
            self._failures += 1
            self._errors_by_code[result.error_code] += 1

        return result

    async def _invoke_once(
        self,
        tool_id: str,
        args: Dict[str, Any],
        context: ToolContext,
    ) -> ToolResult:
        state = InvocationState.RECEIVED
        meta = {"tool_id": tool_id, "request_id": context.request_id}

        try:
            tool = self.registry.get(tool_id)

            validated = tool.validate(args, strict=self.config.strict_params)
            state = InvocationState.VALIDATED

            self.gate.check(tool.spec, context, validated)
            state = InvocationState.GATED

        except ToolError as e:
            logger.info(f"Invocation of {tool_id} stopped at {state.value}: {e}")
            result = ToolResult.from_error(e, **meta)
            result.details["stage"] = state.value
            return result

        except Exception as e:
            error = InternalError(tool_id, state.value, e)
            logger.exception(f"Unexpected error invoking {tool_id}")
            return ToolResult.from_error(error, **meta)

        state = InvocationState.EXECUTING
        logger.debug(f"Executing {tool_id} (request {context.request_id})")

        try:
            output = await self._run_handler(tool, validated)
        except Exception as e:
            error = HandlerError(tool_id, e)
            logger.error(f"Tool {tool_id} failed: {e}")
            result = ToolResult.from_error(error, **meta)
            result.details["stage"] = state.value
            return result

        return ToolResult.ok(output, **meta)

    async def _run_handler(self, tool: Tool, args: Dict[str, Any]) -> Any:
        output = tool.execute(**args)
        if inspect.isawaitable(output):
            output = await output
        return output

    async def submit(self, request: InvocationRequest, retries: int = 0) -> ToolResult:
        """Invoke from a wire-format request."""
        return await self.invoke(request.tool, request.args, request.to_context(), retries=retries)

    async def invoke_batch(
        self,
        requests: List[Union[InvocationRequest, Dict[str, Any]]],
        context: Optional[ToolContext] = None,
        parallel: bool = True,
    ) -> List[ToolResult]:
        """
        Invoke multiple tools, optionally in parallel.

        Args:
            requests: InvocationRequests or {"tool": id, "args": {...}} dicts
            context: Shared caller context for dict requests
            parallel: Invoke concurrently if True

        Returns:
            List of ToolResults in same order as requests
        """
        context = context or self._default_context()

        def call(req):
            if isinstance(req, InvocationRequest):
                return self.submit(req)
            per_call = dataclasses.replace(
                context,
                permissions=list(context.permissions),
                request_id=uuid.uuid4().hex,
            )
            return self.invoke(req["tool"], req.get("args", {}), per_call)

        if parallel:
            return list(await asyncio.gather(*(call(req) for req in requests)))

        results = []
        for req in requests:
            results.append(await call(req))
        return results

    def list_available(self, context: Optional[ToolContext] = None) -> List[Tool]:
        """Tools this caller could invoke (audience and permissions)."""
        context = context or self._default_context()
        return [
            t for t in self.registry.query(audience=context.caller)
            if all(context.has_permission(p) for p in t.permissions)
        ]

    def stats(self) -> dict:
        """Get executor statistics."""
        return {
            "invocations": self._invocations,
            "successes": self._successes,
            "failures": self._failures,
            "errors_by_code": dict(self._errors_by_code),
            "pending_confirmations": len(self.confirmations),
            "success_rate": self._successes / self._invocations if self._invocations > 0 else 0,
        }


# Global executor, bound to the global registry
_executor: Optional[ToolExecutor] = None


def get_executor() -> ToolExecutor:
    """Get the executor for the global registry."""
    global _executor
    registry = get_registry()
    if _executor is None or _executor.registry is not registry:
        _executor = ToolExecutor(registry)
    return _executor


async def execute_tool(
    tool_id: str,
    args: Optional[Dict[str, Any]] = None,
    context: Optional[ToolContext] = None,
) -> ToolResult:
    """Invoke a tool from the global registry."""
    return await get_executor().invoke(tool_id, args, context)


def reset_executor() -> None:
    """Drop the global executor and its pending confirmations."""
    global _executor
    _executor = None
