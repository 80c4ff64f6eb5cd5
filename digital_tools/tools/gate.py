"""
Permission and confirmation gate.

Runs after validation and before the handler:
1. Audience - the caller class must be allowed by the tool
2. Permissions - every required permission must be granted
3. Confirmation - side-effecting tools need a token from a prior attempt
"""

import hashlib
import json
import logging
import secrets
import threading
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from .base import ToolContext, ToolSpec
from .errors import AudienceMismatchError, ConfirmationRequiredError, PermissionDeniedError

logger = logging.getLogger(__name__)

DEFAULT_CONFIRMATION_TTL = 300


def _canonical(value: Any) -> Any:
    # Keys become strings so maps with mixed key types still sort
    if isinstance(value, Mapping):
        return {str(k): _canonical(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_canonical(v) for v in value]
    return value


def args_digest(args: Dict[str, Any]) -> str:
    """Stable digest of an argument map."""
    canonical = json.dumps(_canonical(args), sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


@dataclass
class PendingConfirmation:
    """A confirmation token waiting to be used."""
    token: str
    tool_id: str
    digest: str
    issued_at: float
    ttl_seconds: float

    @property
    def expires_at(self) -> float:
        return self.issued_at + self.ttl_seconds

    @property
    def is_expired(self) -> bool:
        return time.time() > self.expires_at


class ConfirmationStore:
    """
    Issues and redeems single-use confirmation tokens.

    A token is bound to a tool id and to the exact (normalized) arguments
    it was issued for, so it cannot confirm a different request.
    """

    def __init__(self, ttl_seconds: float = DEFAULT_CONFIRMATION_TTL):
        self.ttl_seconds = ttl_seconds
        self._pending: Dict[str, PendingConfirmation] = {}
        self._lock = threading.Lock()

    def issue(self, tool_id: str, args: Dict[str, Any]) -> PendingConfirmation:
        pending = PendingConfirmation(
            token=secrets.token_urlsafe(16),
            tool_id=tool_id,
            digest=args_digest(args),
            issued_at=time.time(),
            ttl_seconds=self.ttl_seconds,
        )
        with self._lock:
            self._sweep()
            self._pending[pending.token] = pending
        logger.debug(f"Issued confirmation token for {tool_id}")
        return pending

    def consume(self, token: str, tool_id: str, args: Dict[str, Any]) -> bool:
        """Redeem a token. Returns False if unknown, expired, or for another request."""
        with self._lock:
            pending = self._pending.get(token)
            if pending is None:
                return False
            if pending.is_expired:
                del self._pending[token]
                logger.info(f"Confirmation token for {pending.tool_id} expired")
                return False
            if pending.tool_id != tool_id or pending.digest != args_digest(args):
                return False
            del self._pending[token]
            return True

    def pending(self) -> List[PendingConfirmation]:
        with self._lock:
            return [p for p in self._pending.values() if not p.is_expired]

    def _sweep(self) -> int:
        # Caller holds the lock
        expired = [t for t, p in self._pending.items() if p.is_expired]
        for token in expired:
            del self._pending[token]
        return len(expired)

    def purge_expired(self) -> int:
        with self._lock:
            return self._sweep()

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)


class PermissionGate:
    """Decides whether a caller may run a tool now."""

    def __init__(self, confirmations: Optional[ConfirmationStore] = None):
        self.confirmations = confirmations if confirmations is not None else ConfirmationStore()

    def check_audience(self, spec: ToolSpec, context: ToolContext) -> None:
        if not spec.audience.allows(context.caller):
            raise AudienceMismatchError(spec.id, spec.audience.value, context.caller.value)

    def check_permissions(self, spec: ToolSpec, context: ToolContext) -> None:
        for required in spec.permissions:
            if not context.has_permission(required):
                raise PermissionDeniedError(required.resource, required.action, required.scope)

    def check_confirmation(self, spec: ToolSpec, context: ToolContext, args: Dict[str, Any]) -> None:
        if not spec.requires_confirmation:
            return

        token = context.confirmation_token
        if token and self.confirmations.consume(token, spec.id, args):
            logger.info(f"Confirmation accepted for {spec.id}")
            return

        pending = self.confirmations.issue(spec.id, args)
        raise ConfirmationRequiredError(spec.id, pending.token, expires_at=pending.expires_at)

    def check(self, spec: ToolSpec, context: ToolContext, args: Dict[str, Any]) -> None:
        """
        Run all gate checks in order.

        Raises AudienceMismatchError, PermissionDeniedError or
        ConfirmationRequiredError. The confirmation token is only
        consumed when every check passes.
        """
        self.check_audience(spec, context)
        self.check_permissions(spec, context)
        self.check_confirmation(spec, context, args)
