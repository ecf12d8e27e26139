"""Order commit: turn a completed checkout into an order in one unit of work.

The handler prices the cart once, snapshots it into a new Order, and then
clears the cart, resets the discount ledger and closes the checkout. All
aggregates are written inside the same command handler, so either every
change is persisted or none is.
"""

import structlog
from protean import handle
from protean.exceptions import InvalidOperationError
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.catalogue import get_catalog
from storefront.checkout.checkout import Checkout
from storefront.discount.ledger import DiscountLedger
from storefront.domain import storefront
from storefront.order.order import Order
from storefront.pricing.engine import summarize

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class CommitOrder:
    """Record the order for a checkout at the summary step. The handler returns the new order id.

    When ``charged_amount`` is given, the cart must still price to that amount.
    """

    checkout_id = Identifier(required=True)
    payment_reference = String(max_length=255)
    charged_amount = Float()


@storefront.command_handler(part_of=Order)
class CommitOrderHandler:
    @handle(CommitOrder)
    def commit_order(self, command):
        checkout_repo = current_domain.repository_for(Checkout)
        cart_repo = current_domain.repository_for(ShoppingCart)
        ledger_repo = current_domain.repository_for(DiscountLedger)

        checkout = checkout_repo.get(command.checkout_id)
        checkout.assert_ready_for_commit()

        cart = cart_repo.get(checkout.cart_id)
        ledger = ledger_repo.get(checkout.cart_id)

        summary = summarize(cart.items, get_catalog(), ledger.discount, checkout.shipping_method)
        if summary.is_empty:
            raise InvalidOperationError(f"Cart {cart.id} has no items to order")
        if command.charged_amount is not None and abs(summary.total - command.charged_amount) > 0.005:
            raise InvalidOperationError(
                f"Cart {cart.id} totals {summary.total:.2f} but {command.charged_amount:.2f} was charged"
            )

        order = Order.place(
            summary,
            details=checkout.order_details(),
            payment_reference=command.payment_reference,
        )
        current_domain.repository_for(Order).add(order)

        cart.clear()
        cart_repo.add(cart)

        ledger.reset()
        ledger_repo.add(ledger)

        checkout.complete(order.id)
        checkout_repo.add(checkout)

        logger.info(
            "Order committed",
            order_id=str(order.id),
            checkout_id=str(checkout.id),
            cart_id=str(cart.id),
            item_count=summary.item_count,
            total=summary.total,
        )
        return str(order.id)
