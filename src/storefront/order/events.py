"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    __version__ = 1

    order_id = Identifier(required=True)
    email = String(max_length=254)
    item_count = Integer(required=True)
    subtotal = Float(required=True)
    discount_code = String(max_length=100)
    discount_amount = Float(default=0.0)
    shipping_cost = Float(default=0.0)
    total = Float(required=True)
    payment_reference = String(max_length=255)
    placed_at = DateTime(required=True)
