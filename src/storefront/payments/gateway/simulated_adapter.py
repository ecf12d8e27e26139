"""Simulated payment gateway used by the demo storefront.

Waits for a fixed delay and then succeeds with a fixed probability. Both
values come from the ``[custom]`` section of ``domain.toml``.
"""

import asyncio
import random
from uuid import uuid4

import structlog

from storefront import settings
from storefront.payments.cancellation import CancellationToken
from storefront.payments.gateway.port import PaymentAttempt, PaymentGateway

logger = structlog.get_logger(__name__)

CANCELLED = "Payment cancelled"
DECLINED = "Payment declined"


class SimulatedGateway(PaymentGateway):
    def __init__(
        self,
        success_rate: float | None = None,
        delay_seconds: float | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.success_rate = settings.payment_success_rate() if success_rate is None else success_rate
        self.delay_seconds = settings.payment_delay_seconds() if delay_seconds is None else delay_seconds
        self.rng = rng or random.Random()

    async def attempt(self, amount: float, token: CancellationToken | None = None) -> PaymentAttempt:
        if await self._wait(token):
            logger.info("Simulated payment cancelled", amount=amount)
            return PaymentAttempt(success=False, failure_reason=CANCELLED)

        if self.rng.random() < self.success_rate:
            reference = f"sim_{uuid4().hex[:12]}"
            logger.info("Simulated payment approved", amount=amount, reference=reference)
            return PaymentAttempt(success=True, reference=reference)

        logger.info("Simulated payment declined", amount=amount)
        return PaymentAttempt(success=False, failure_reason=DECLINED)

    async def _wait(self, token: CancellationToken | None) -> bool:
        """Sleep for the configured delay. Returns True if cancelled first."""
        if token is None:
            await asyncio.sleep(self.delay_seconds)
            return False
        if token.cancelled:
            return True
        try:
            await asyncio.wait_for(token.wait(), timeout=self.delay_seconds)
        except TimeoutError:
            return False
        return True
