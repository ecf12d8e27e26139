"""Domain events for the DiscountLedger aggregate."""

from protean.fields import Float, Identifier, String

from storefront.domain import storefront


@storefront.event(part_of="DiscountLedger")
class DiscountApplied:
    __version__ = 1

    cart_id = Identifier(required=True)
    code = String(required=True, max_length=100)
    percentage = Float(required=True)


@storefront.event(part_of="DiscountLedger")
class DiscountReset:
    __version__ = 1

    cart_id = Identifier(required=True)
    previous_code = String(max_length=100)
