"""Payment guard commands and the cart lock held while a payment is in flight."""

import structlog
from protean import handle
from protean.exceptions import InvalidOperationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.checkout.checkout import Checkout, PaymentStatus
from storefront.domain import storefront

logger = structlog.get_logger(__name__)


def assert_cart_unlocked(cart_id):
    """Refuse cart and discount changes while a checkout of the cart is paying."""
    in_flight = (
        current_domain.repository_for(Checkout)
        ._dao.query.filter(cart_id=str(cart_id), payment_status=PaymentStatus.PROCESSING.value)
        .limit(None)
        .all()
        .items
    )
    if in_flight:
        logger.info("Cart change refused during payment", cart_id=str(cart_id), checkout_id=str(in_flight[0].id))
        raise InvalidOperationError(f"Cart {cart_id} is locked while a payment is processing")


@storefront.command(part_of="Checkout")
class BeginPayment:
    """Move the checkout's payment status to Processing. The handler returns False if it was already claimed."""

    checkout_id = Identifier(required=True)


@storefront.command(part_of="Checkout")
class RecordPaymentFailure:
    checkout_id = Identifier(required=True)
    reason = String(max_length=255)


@storefront.command_handler(part_of=Checkout)
class PaymentGuardHandler:
    @handle(BeginPayment)
    def begin_payment(self, command):
        repo = current_domain.repository_for(Checkout)
        checkout = repo.get(command.checkout_id)
        claimed = checkout.begin_payment()
        if claimed:
            repo.add(checkout)
            logger.info("Payment started", checkout_id=str(checkout.id), attempt=checkout.payment_attempts)
        else:
            logger.info("Payment already claimed", checkout_id=str(checkout.id), status=checkout.payment_status)
        return claimed

    @handle(RecordPaymentFailure)
    def record_payment_failure(self, command):
        repo = current_domain.repository_for(Checkout)
        checkout = repo.get(command.checkout_id)
        checkout.record_payment_failure(command.reason)
        repo.add(checkout)
        logger.warning("Payment failed", checkout_id=str(checkout.id), reason=command.reason)
