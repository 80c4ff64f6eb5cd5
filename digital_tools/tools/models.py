"""
Wire models for invocation requests and results.

Used to accept invocations as JSON (CLI request files, queued jobs)
and to emit results in the same shape.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from .base import Audience, ToolContext, ToolResult


class InvocationRequest(BaseModel):
    """A request to invoke one tool."""
    tool: str = Field(..., description="Tool id, e.g. data.json.parse")
    args: Dict[str, Any] = Field(default_factory=dict, description="Arguments")
    caller: str = Field(default="human", description="human or ai")
    caller_id: Optional[str] = None
    permissions: List[str] = Field(default_factory=list, description="Granted resource:action[:scope]")
    confirmation_token: Optional[str] = None
    trace_id: Optional[str] = None

    @field_validator("caller")
    @classmethod
    def check_caller(cls, v: str) -> str:
        caller = Audience.parse(v)
        if caller is Audience.BOTH:
            raise ValueError("caller must be human or ai")
        return caller.value

    def to_context(self) -> ToolContext:
        return ToolContext(
            caller=self.caller,
            caller_id=self.caller_id,
            permissions=list(self.permissions),
            confirmation_token=self.confirmation_token,
            trace_id=self.trace_id,
        )


class InvocationResponse(BaseModel):
    """Serialized outcome of an invocation."""
    success: bool
    result: Any = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    details: Dict[str, Any] = Field(default_factory=dict)
    tool_id: Optional[str] = None
    request_id: Optional[str] = None
    state: str
    duration_ms: float = 0
    attempts: int = 1

    @classmethod
    def from_result(cls, result: ToolResult) -> "InvocationResponse":
        return cls(**result.to_dict())
