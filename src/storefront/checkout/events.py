"""Domain events for the Checkout aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Checkout")
class CheckoutStarted:
    __version__ = 1

    checkout_id = Identifier(required=True)
    cart_id = Identifier(required=True)
    started_at = DateTime(required=True)


@storefront.event(part_of="Checkout")
class CheckoutStepCompleted:
    __version__ = 1

    checkout_id = Identifier(required=True)
    completed_step = String(required=True, max_length=20)
    next_step = String(required=True, max_length=20)


@storefront.event(part_of="Checkout")
class CheckoutSteppedBack:
    __version__ = 1

    checkout_id = Identifier(required=True)
    from_step = String(required=True, max_length=20)
    to_step = String(required=True, max_length=20)


@storefront.event(part_of="Checkout")
class PaymentAttemptStarted:
    __version__ = 1

    checkout_id = Identifier(required=True)
    attempt = Integer(required=True)


@storefront.event(part_of="Checkout")
class PaymentAttemptFailed:
    __version__ = 1

    checkout_id = Identifier(required=True)
    reason = String(max_length=255)


@storefront.event(part_of="Checkout")
class CheckoutCompleted:
    __version__ = 1

    checkout_id = Identifier(required=True)
    cart_id = Identifier(required=True)
    order_id = Identifier(required=True)
    completed_at = DateTime(required=True)
