"""Configurable fake payment gateway for tests.

Succeeds or fails on demand and records every call. An optional delay keeps
an attempt in flight long enough to exercise the single-flight guard.
"""

import asyncio
from uuid import uuid4

from storefront.payments.cancellation import CancellationToken
from storefront.payments.gateway.port import PaymentAttempt, PaymentGateway


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(self, should_succeed: bool = True, failure_reason: str = "Card declined", delay_seconds: float = 0.0):
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.delay_seconds = delay_seconds
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Card declined") -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    async def attempt(self, amount: float, token: CancellationToken | None = None) -> PaymentAttempt:
        self.calls.append({"method": "attempt", "amount": amount})

        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)
        if token is not None and token.cancelled:
            return PaymentAttempt(success=False, failure_reason="Payment cancelled")

        if self.should_succeed:
            return PaymentAttempt(success=True, reference=f"fake_txn_{uuid4().hex[:12]}")
        return PaymentAttempt(success=False, failure_reason=self.failure_reason)
