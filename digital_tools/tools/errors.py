"""
Error taxonomy for the tool system.

Registry and validation errors are raised before any handler runs.
The executor turns every one of these into a failed ToolResult, so
callers of ``ToolExecutor.invoke`` never see them raised.
"""

from typing import Any, Dict, Optional


class ToolError(Exception):
    """Base exception for tool errors."""

    def __init__(self, message: str, code: str = "TOOL_ERROR", retryable: bool = False):
        super().__init__(message)
        self.code = code
        self.retryable = retryable

    @property
    def details(self) -> Dict[str, Any]:
        """Structured fields describing the failure."""
        return {}

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": str(self),
            "retryable": self.retryable,
            "details": self.details,
        }


# === Registry ===

class UnknownToolError(ToolError):
    """Raised when a tool id is not registered."""

    def __init__(self, tool_id: str):
        super().__init__(f"Tool not found: {tool_id}", code="UNKNOWN_TOOL")
        self.tool_id = tool_id

    @property
    def details(self) -> Dict[str, Any]:
        return {"tool_id": self.tool_id}


class DuplicateToolIdError(ToolError):
    """Raised when registering a tool id that already exists."""

    def __init__(self, tool_id: str):
        super().__init__(f"Tool already registered: {tool_id}", code="DUPLICATE_TOOL_ID")
        self.tool_id = tool_id

    @property
    def details(self) -> Dict[str, Any]:
        return {"tool_id": self.tool_id}


# === Validation ===

class ValidationError(ToolError):
    """Raised when tool parameters fail validation."""

    def __init__(self, message: str, param: Optional[str] = None, code: str = "VALIDATION_ERROR"):
        super().__init__(message, code=code)
        self.param = param

    @property
    def details(self) -> Dict[str, Any]:
        return {"param": self.param}


class MissingRequiredParameterError(ValidationError):
    """A required parameter was absent."""

    def __init__(self, param: str):
        super().__init__(
            f"Missing required parameter: {param}",
            param=param,
            code="MISSING_REQUIRED_PARAMETER",
        )


class TypeMismatchError(ValidationError):
    """A parameter value does not match its declared type."""

    def __init__(self, param: str, expected: str, actual: str):
        super().__init__(
            f"Parameter '{param}' expected {expected}, got {actual}",
            param=param,
            code="TYPE_MISMATCH",
        )
        self.expected = expected
        self.actual = actual

    @property
    def details(self) -> Dict[str, Any]:
        return {"param": self.param, "expected": self.expected, "actual": self.actual}


class UnexpectedParameterError(ValidationError):
    """An undeclared parameter was passed to a closed tool."""

    def __init__(self, param: str):
        super().__init__(
            f"Unexpected parameter: {param}",
            param=param,
            code="UNEXPECTED_PARAMETER",
        )


# === Gate ===

class AccessDeniedError(ToolError):
    """Base for gate denials that need a different caller or grants."""


class AudienceMismatchError(AccessDeniedError):
    """The tool is not available to this class of caller."""

    def __init__(self, tool_id: str, audience: str, caller: str):
        super().__init__(
            f"Tool {tool_id} is available to {audience} callers, not {caller}",
            code="AUDIENCE_MISMATCH",
        )
        self.tool_id = tool_id
        self.audience = audience
        self.caller = caller

    @property
    def details(self) -> Dict[str, Any]:
        return {"tool_id": self.tool_id, "audience": self.audience, "caller": self.caller}


class PermissionDeniedError(AccessDeniedError):
    """Raised when caller lacks a required permission."""

    def __init__(self, resource: str, action: str, scope: Optional[str] = None):
        required = f"{resource}:{action}" + (f":{scope}" if scope else "")
        super().__init__(f"Permission denied. Required: {required}", code="PERMISSION_DENIED")
        self.resource = resource
        self.action = action
        self.scope = scope

    @property
    def details(self) -> Dict[str, Any]:
        return {"resource": self.resource, "action": self.action, "scope": self.scope}


class ConfirmationRequiredError(ToolError):
    """
    The tool needs explicit confirmation before it runs.

    Resubmit the same request with ``token`` as the confirmation token.
    """

    def __init__(self, tool_id: str, token: str, expires_at: Optional[float] = None):
        super().__init__(
            f"Tool {tool_id} requires confirmation before it runs",
            code="CONFIRMATION_REQUIRED",
            retryable=True,
        )
        self.tool_id = tool_id
        self.token = token
        self.expires_at = expires_at

    @property
    def details(self) -> Dict[str, Any]:
        return {
            "tool_id": self.tool_id,
            "confirmation_token": self.token,
            "expires_at": self.expires_at,
        }


# === Execution ===

class HandlerError(ToolError):
    """Wraps any failure raised inside a tool handler."""

    def __init__(self, tool_id: str, cause: BaseException):
        super().__init__(f"Tool {tool_id} failed: {cause}", code="HANDLER_ERROR")
        self.tool_id = tool_id
        self.cause = cause
        self.__cause__ = cause

    @property
    def details(self) -> Dict[str, Any]:
        return {
            "tool_id": self.tool_id,
            "cause": str(self.cause),
            "cause_type": type(self.cause).__name__,
        }


class InternalError(ToolError):
    """An unexpected failure before the handler ran."""

    def __init__(self, tool_id: str, stage: str, cause: BaseException):
        super().__init__(f"Invocation of {tool_id} failed at {stage}: {cause}", code="INTERNAL_ERROR")
        self.tool_id = tool_id
        self.stage = stage
        self.cause = cause
        self.__cause__ = cause

    @property
    def details(self) -> Dict[str, Any]:
        return {
            "tool_id": self.tool_id,
            "stage": self.stage,
            "cause": str(self.cause),
            "cause_type": type(self.cause).__name__,
        }
