"""Payment gateway port (abstract interface).

Order placement only ever talks to this contract, so the simulated gateway
used by the demo storefront and the fake used in tests are interchangeable.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from storefront.payments.cancellation import CancellationToken


@dataclass(frozen=True)
class PaymentAttempt:
    """Result of a payment attempt."""

    success: bool
    reference: str | None = None
    failure_reason: str | None = None


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    async def attempt(
        self,
        amount: float,
        token: CancellationToken | None = None,
    ) -> PaymentAttempt:
        """Attempt to take a payment of ``amount``. Cancelling ``token`` resolves the attempt as a failure."""
        ...
