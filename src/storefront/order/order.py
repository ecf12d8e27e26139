"""Order aggregate: an immutable record of a placed order.

An order is a snapshot. Item names, colours and prices are copied from the
priced cart at commit time and never looked up again, so later catalogue or
cart changes cannot alter history. The only lifecycle operation is deletion
of the whole record.

Order ids are time-ordered strings (``ORD-<epoch ms>-<hex>``), so sorting
ids in reverse gives most-recent-first history.
"""

from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4

from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, ValueObject

from storefront.domain import storefront
from storefront.order.events import OrderPlaced

_last_stamp = 0


def next_order_id(now: datetime | None = None) -> str:
    """Return a unique order id that sorts after every id issued before it."""
    global _last_stamp
    stamp = int((now or datetime.now(UTC)).timestamp() * 1000)
    stamp = max(stamp, _last_stamp + 1)
    _last_stamp = stamp
    return f"ORD-{stamp:013d}-{uuid4().hex[:6]}"


class OrderStatus(Enum):
    PLACED = "Placed"


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class OrderDetails:
    """Customer, delivery and payment details copied from the completed checkout.

    Card data is reduced to the last four digits; expiry and CVV are never kept.
    """

    name = String(required=True, max_length=100)
    surname = String(required=True, max_length=100)
    email = String(required=True, max_length=254)
    phone = String(max_length=20)
    address = String(required=True, max_length=255)
    house_number = String(required=True, max_length=20)
    flat_number = String(max_length=20)
    city = String(required=True, max_length=100)
    postal_code = String(required=True, max_length=10)
    country = String(required=True, max_length=100)
    shipping_method = String(required=True, max_length=20)
    payment_method = String(required=True, max_length=20)
    card_last4 = String(max_length=4)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderItem:
    product_id = Identifier(required=True)
    variant_id = Identifier(required=True)
    size = String(max_length=50)
    quantity = Integer(required=True, min_value=1)
    product_name = String(required=True, max_length=255)
    variant_color = String(max_length=100)
    image_url = String(max_length=500)
    unit_price = Float(required=True)
    line_total = Float(required=True)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    items = HasMany(OrderItem)
    subtotal = Float(required=True)
    discount_code = String(max_length=100)
    discount_percentage = Float(default=0.0)
    discount_amount = Float(default=0.0)
    shipping_cost = Float(default=0.0)
    total = Float(required=True)
    details = ValueObject(OrderDetails)
    payment_reference = String(max_length=255)
    status = String(choices=OrderStatus, default=OrderStatus.PLACED.value)
    placed_at = DateTime(required=True)

    @classmethod
    def place(cls, summary, details: dict, payment_reference=None, order_id=None, placed_at=None):
        """Create an order from a ``PriceSummary`` and the checkout's flattened details."""
        placed_at = placed_at or datetime.now(UTC)
        order = cls(
            id=order_id or next_order_id(placed_at),
            items=[
                OrderItem(
                    product_id=line.cart_line.product_id,
                    variant_id=line.cart_line.variant_id,
                    size=line.cart_line.size,
                    quantity=line.cart_line.quantity,
                    product_name=line.product_name,
                    variant_color=line.variant_color,
                    image_url=line.image_url,
                    unit_price=line.unit_price,
                    line_total=line.line_total,
                )
                for line in summary.lines
            ],
            subtotal=summary.subtotal,
            discount_code=summary.discount.code or None,
            discount_percentage=summary.discount.percentage,
            discount_amount=summary.discount_amount,
            shipping_cost=summary.shipping_cost,
            total=summary.total,
            details=OrderDetails(**details),
            payment_reference=payment_reference,
            status=OrderStatus.PLACED.value,
            placed_at=placed_at,
        )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                email=order.details.email,
                item_count=summary.item_count,
                subtotal=order.subtotal,
                discount_code=order.discount_code,
                discount_amount=order.discount_amount,
                shipping_cost=order.shipping_cost,
                total=order.total,
                payment_reference=payment_reference,
                placed_at=placed_at,
            )
        )
        return order

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def customer_email(self):
        return self.details.email if self.details else None
