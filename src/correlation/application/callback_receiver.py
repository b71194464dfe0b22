"""
Inbound Callback Receiver
Idempotent sink that completes the waiter named by a third-party callback.
"""
from __future__ import annotations

from typing import Optional

from src.correlation.application.registry import PendingWaiterRegistry
from src.shared.infrastructure.observability.logger import get_logger
from src.shared.security import verify_hub_signature

logger = get_logger(__name__)


class CallbackReceiver:
    def __init__(self, registry: PendingWaiterRegistry, *, signing_secret: Optional[str] = None) -> None:
        self._registry = registry
        self._signing_secret = signing_secret

    @property
    def requires_signature(self) -> bool:
        return bool(self._signing_secret)

    def authenticate(self, raw: bytes, signature: Optional[str]) -> bool:
        """Check ``X-Hub-Signature-256`` against the raw body. Always true when no secret is set."""
        if not self._signing_secret:
            return True
        if signature and verify_hub_signature(raw, self._signing_secret, signature):
            return True
        logger.warning("Rejected callback with bad signature", signature_present=bool(signature))
        return False

    def deliver(self, correlation_key: str, resource_id: str) -> bool:
        """
        Complete the matching waiter, if any.

        An unmatched delivery (stale, duplicate, unrelated) is normal and
        returns False; the sender is acknowledged either way.
        """
        matched = self._registry.complete(correlation_key, resource_id)
        if not matched:
            logger.info("Callback had no pending waiter", resource_id=resource_id)
        return matched
