"""Order placement: simulated payment followed by the order commit.

``place_order`` is the only suspending operation in the storefront. It claims
the checkout's payment guard before awaiting the gateway, so a second call
for the same checkout while the first is in flight is rejected instead of
charging twice. While the guard is held the cart and its discount are locked,
so the order records exactly what was charged. A failed attempt, or a commit
that still fails, releases the guard and leaves the cart and discount
untouched for a retry.
"""

from dataclasses import dataclass

import structlog
from protean.exceptions import InvalidOperationError
from protean.utils.globals import current_domain

from storefront.checkout.checkout import Checkout, PaymentStatus
from storefront.checkout.payment import BeginPayment, RecordPaymentFailure
from storefront.order.commit import CommitOrder
from storefront.payments.cancellation import CancellationToken
from storefront.payments.gateway import get_gateway
from storefront.payments.gateway.port import PaymentGateway
from storefront.pricing.quotes import quote_checkout

logger = structlog.get_logger(__name__)

SUCCESS = "success"
ERROR = "error"
REJECTED = "rejected"
BLOCKED = "blocked"

COMMIT_FAILED = "Order could not be recorded"


@dataclass(frozen=True)
class PlacementResult:
    status: str
    order_id: str | None = None
    reason: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == SUCCESS


async def place_order(
    checkout_id,
    gateway: PaymentGateway | None = None,
    token: CancellationToken | None = None,
) -> PlacementResult:
    gateway = gateway or get_gateway()
    log = logger.bind(checkout_id=str(checkout_id))

    checkout = current_domain.repository_for(Checkout).get(checkout_id)
    if PaymentStatus(checkout.payment_status) in (PaymentStatus.PROCESSING, PaymentStatus.SUCCESS):
        log.info("Placement rejected", payment_status=checkout.payment_status)
        return PlacementResult(status=REJECTED, reason=f"Payment is {checkout.payment_status.lower()}")

    quote = quote_checkout(checkout_id)
    if quote.is_empty:
        log.info("Placement blocked: cart is empty")
        return PlacementResult(status=BLOCKED, reason="Cart is empty")

    if not current_domain.process(BeginPayment(checkout_id=str(checkout_id)), asynchronous=False):
        return PlacementResult(status=REJECTED, reason="Payment already in progress")

    log.info("Payment attempt started", amount=quote.total)
    try:
        attempt = await gateway.attempt(quote.total, token=token)
    except Exception:
        log.exception("Payment gateway error")
        current_domain.process(
            RecordPaymentFailure(checkout_id=str(checkout_id), reason="Payment gateway error"),
            asynchronous=False,
        )
        raise

    if not attempt.success:
        current_domain.process(
            RecordPaymentFailure(checkout_id=str(checkout_id), reason=attempt.failure_reason),
            asynchronous=False,
        )
        return PlacementResult(status=ERROR, reason=attempt.failure_reason)

    try:
        order_id = current_domain.process(
            CommitOrder(
                checkout_id=str(checkout_id),
                payment_reference=attempt.reference,
                charged_amount=quote.total,
            ),
            asynchronous=False,
        )
    except InvalidOperationError as exc:
        log.warning("Order commit failed after payment", reference=attempt.reference, error=str(exc))
        current_domain.process(
            RecordPaymentFailure(checkout_id=str(checkout_id), reason=COMMIT_FAILED),
            asynchronous=False,
        )
        return PlacementResult(status=ERROR, reason=COMMIT_FAILED)

    log.info("Order placed", order_id=order_id, total=quote.total)
    return PlacementResult(status=SUCCESS, order_id=order_id)
