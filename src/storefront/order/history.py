"""Order history: listing, lookup and removal of placed orders."""

from datetime import date

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import Order

logger = structlog.get_logger(__name__)


def list_orders(email: str | None = None, start: date | None = None, end: date | None = None) -> list[Order]:
    """Return orders most recent first.

    Args:
        email: Only orders placed with this contact email (case-insensitive).
        start: Only orders placed on or after this date.
        end: Only orders placed on or before this date.
    """
    repo = current_domain.repository_for(Order)
    orders = repo._dao.query.order_by("-id").limit(None).all().items

    if email:
        wanted = email.strip().lower()
        orders = [o for o in orders if (o.customer_email or "").lower() == wanted]
    if start is not None:
        orders = [o for o in orders if o.placed_at.date() >= start]
    if end is not None:
        orders = [o for o in orders if o.placed_at.date() <= end]

    return orders


def get_order(order_id) -> Order:
    return current_domain.repository_for(Order).get(order_id)


@storefront.command(part_of="Order")
class RemoveOrder:
    order_id = Identifier(required=True)


@storefront.command(part_of="Order")
class ClearOrderHistory:
    """Factory reset: delete every stored order."""


@storefront.command_handler(part_of=Order)
class OrderHistoryHandler:
    @handle(RemoveOrder)
    def remove_order(self, command):
        repo = current_domain.repository_for(Order)
        try:
            order = repo.get(command.order_id)
        except ObjectNotFoundError:
            logger.info("Order not found for removal", order_id=str(command.order_id))
            return False

        repo._dao.delete(order)
        logger.info("Order removed", order_id=str(order.id))
        return True

    @handle(ClearOrderHistory)
    def clear_order_history(self, command):
        repo = current_domain.repository_for(Order)
        orders = repo._dao.query.limit(None).all().items
        for order in orders:
            repo._dao.delete(order)
        removed = len(orders)
        logger.info("Order history cleared", removed_count=removed)
        return removed
