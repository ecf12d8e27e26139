"""Checkout aggregate: the four-step wizard draft and its payment guard.

State machine:
    CONTACT → SHIPPING → PAYMENT → SUMMARY → COMPLETED
    SHIPPING/PAYMENT/SUMMARY → previous step (no re-validation)

Each completed step stores one value object. A step can only be recorded
while the checkout sits at that step; the machine never skips ahead.

``payment_status`` is the single-flight guard for order placement:
    IDLE/ERROR → PROCESSING → SUCCESS | ERROR
While PROCESSING, a second placement is refused and the wizard cannot step
back. SUCCESS is terminal and only reached through ``complete``.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import InvalidOperationError, ValidationError
from protean.fields import DateTime, Dict, Identifier, Integer, String, ValueObject

from storefront.checkout.events import (
    CheckoutCompleted,
    CheckoutStarted,
    CheckoutSteppedBack,
    CheckoutStepCompleted,
    PaymentAttemptFailed,
    PaymentAttemptStarted,
)
from storefront.domain import storefront


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class CheckoutStep(Enum):
    CONTACT = "Contact"
    SHIPPING = "Shipping"
    PAYMENT = "Payment"
    SUMMARY = "Summary"
    COMPLETED = "Completed"


class PaymentStatus(Enum):
    IDLE = "Idle"
    PROCESSING = "Processing"
    SUCCESS = "Success"
    ERROR = "Error"


class ShippingMethod(Enum):
    STANDARD = "standard"
    EXPRESS = "express"


class PaymentMethod(Enum):
    CARD = "card"
    TRANSFER = "transfer"


_NEXT_STEP = {
    CheckoutStep.CONTACT: CheckoutStep.SHIPPING,
    CheckoutStep.SHIPPING: CheckoutStep.PAYMENT,
    CheckoutStep.PAYMENT: CheckoutStep.SUMMARY,
}

_PREVIOUS_STEP = {
    CheckoutStep.SHIPPING: CheckoutStep.CONTACT,
    CheckoutStep.PAYMENT: CheckoutStep.SHIPPING,
    CheckoutStep.SUMMARY: CheckoutStep.PAYMENT,
}

# Saved profile values that may pre-fill the contact and shipping steps
PROFILE_FIELDS = (
    "name",
    "surname",
    "email",
    "phone",
    "address",
    "house_number",
    "flat_number",
    "city",
    "postal_code",
    "country",
)


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Checkout")
class ContactDetails:
    name = String(required=True, max_length=100)
    surname = String(required=True, max_length=100)
    email = String(required=True, max_length=254)
    phone = String(required=True, max_length=20)


@storefront.value_object(part_of="Checkout")
class ShippingDetails:
    address = String(required=True, max_length=255)
    house_number = String(required=True, max_length=20)
    flat_number = String(max_length=20)
    city = String(required=True, max_length=100)
    postal_code = String(required=True, max_length=10)
    country = String(required=True, max_length=100)
    method = String(choices=ShippingMethod, default=ShippingMethod.STANDARD.value)


@storefront.value_object(part_of="Checkout")
class PaymentDetails:
    """Payment choice. Card fields are only ever present for card payments."""

    method = String(choices=PaymentMethod, default=PaymentMethod.CARD.value)
    card_number = String(max_length=23)
    expiry_date = String(max_length=5)
    cvv = String(max_length=4)

    @property
    def card_last4(self):
        if not self.card_number:
            return None
        return "".join(ch for ch in self.card_number if ch.isdigit())[-4:]


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Checkout:
    cart_id = Identifier(required=True)
    step = String(choices=CheckoutStep, default=CheckoutStep.CONTACT.value)
    contact = ValueObject(ContactDetails)
    shipping = ValueObject(ShippingDetails)
    payment = ValueObject(PaymentDetails)
    prefill = Dict()
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.IDLE.value)
    payment_attempts = Integer(default=0)
    failure_reason = String(max_length=255)
    order_id = Identifier()
    started_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def start(cls, cart_id, profile=None):
        """Open a draft. Known profile values are kept as defaults for the contact and shipping steps."""
        now = datetime.now(UTC)
        checkout = cls(
            cart_id=str(cart_id),
            prefill={
                key: str(value).strip() for key, value in (profile or {}).items() if key in PROFILE_FIELDS and value
            },
            step=CheckoutStep.CONTACT.value,
            payment_status=PaymentStatus.IDLE.value,
            started_at=now,
            updated_at=now,
        )
        checkout.raise_(
            CheckoutStarted(
                checkout_id=str(checkout.id),
                cart_id=str(cart_id),
                started_at=now,
            )
        )
        return checkout

    @property
    def is_completed(self) -> bool:
        return CheckoutStep(self.step) == CheckoutStep.COMPLETED

    @property
    def shipping_method(self):
        return self.shipping.method if self.shipping else None

    # -------------------------------------------------------------------
    # Step transitions
    # -------------------------------------------------------------------
    def assert_at(self, expected: CheckoutStep):
        current = CheckoutStep(self.step)
        if current != expected:
            raise ValidationError({"step": [f"Checkout is at {current.value} step, not {expected.value}"]})

    def _advance(self):
        current = CheckoutStep(self.step)
        target = _NEXT_STEP[current]
        self.step = target.value
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CheckoutStepCompleted(
                checkout_id=str(self.id),
                completed_step=current.value,
                next_step=target.value,
            )
        )

    def record_contact(self, name, surname, email, phone):
        self.assert_at(CheckoutStep.CONTACT)
        self.contact = ContactDetails(name=name, surname=surname, email=email, phone=phone)
        self._advance()

    def record_shipping(
        self,
        address,
        house_number,
        city,
        postal_code,
        country,
        flat_number=None,
        shipping_method=ShippingMethod.STANDARD.value,
    ):
        self.assert_at(CheckoutStep.SHIPPING)
        self.shipping = ShippingDetails(
            address=address,
            house_number=house_number,
            flat_number=flat_number or None,
            city=city,
            postal_code=postal_code,
            country=country,
            method=shipping_method,
        )
        self._advance()

    def record_payment(self, payment_method, card_number=None, expiry_date=None, cvv=None):
        """Store the payment choice. A transfer never keeps card data."""
        self.assert_at(CheckoutStep.PAYMENT)
        if PaymentMethod(payment_method) == PaymentMethod.TRANSFER:
            self.payment = PaymentDetails(method=PaymentMethod.TRANSFER.value)
        else:
            self.payment = PaymentDetails(
                method=PaymentMethod.CARD.value,
                card_number=card_number,
                expiry_date=expiry_date,
                cvv=cvv,
            )
        self._advance()

    def step_back(self) -> bool:
        """Return to the previous step. Refused at the first step, once completed, or mid-payment."""
        if PaymentStatus(self.payment_status) == PaymentStatus.PROCESSING:
            return False

        current = CheckoutStep(self.step)
        target = _PREVIOUS_STEP.get(current)
        if target is None:
            return False

        self.step = target.value
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CheckoutSteppedBack(
                checkout_id=str(self.id),
                from_step=current.value,
                to_step=target.value,
            )
        )
        return True

    # -------------------------------------------------------------------
    # Payment guard
    # -------------------------------------------------------------------
    def missing_sections(self) -> list[str]:
        missing = [
            name
            for name, value in (
                ("contact", self.contact),
                ("shipping", self.shipping),
                ("payment", self.payment),
            )
            if value is None
        ]
        if CheckoutStep(self.step) != CheckoutStep.SUMMARY:
            missing.append("summary review")
        return missing

    def assert_ready_for_commit(self):
        if self.is_completed:
            raise InvalidOperationError(f"Checkout {self.id} has already been completed")
        missing = self.missing_sections()
        if missing:
            raise InvalidOperationError(f"Checkout {self.id} is incomplete: missing {', '.join(missing)}")

    def begin_payment(self) -> bool:
        """Claim the placement guard. Returns False when a placement is in flight or done."""
        status = PaymentStatus(self.payment_status)
        if status in (PaymentStatus.PROCESSING, PaymentStatus.SUCCESS):
            return False

        self.assert_at(CheckoutStep.SUMMARY)
        self.assert_ready_for_commit()

        self.payment_status = PaymentStatus.PROCESSING.value
        self.payment_attempts = (self.payment_attempts or 0) + 1
        self.failure_reason = None
        self.updated_at = datetime.now(UTC)

        self.raise_(
            PaymentAttemptStarted(
                checkout_id=str(self.id),
                attempt=self.payment_attempts,
            )
        )
        return True

    def record_payment_failure(self, reason=None):
        """Release the guard after a failed attempt; the draft stays intact for a retry."""
        if PaymentStatus(self.payment_status) != PaymentStatus.PROCESSING:
            raise ValidationError({"payment_status": [f"No payment in progress (status is {self.payment_status})"]})

        self.payment_status = PaymentStatus.ERROR.value
        self.failure_reason = reason
        self.updated_at = datetime.now(UTC)

        self.raise_(
            PaymentAttemptFailed(
                checkout_id=str(self.id),
                reason=reason,
            )
        )

    def complete(self, order_id):
        """Mark the checkout done and drop the draft details."""
        self.assert_ready_for_commit()

        now = datetime.now(UTC)
        self.step = CheckoutStep.COMPLETED.value
        self.payment_status = PaymentStatus.SUCCESS.value
        self.failure_reason = None
        self.order_id = str(order_id)
        self.contact = None
        self.shipping = None
        self.payment = None
        self.prefill = {}
        self.updated_at = now

        self.raise_(
            CheckoutCompleted(
                checkout_id=str(self.id),
                cart_id=str(self.cart_id),
                order_id=str(order_id),
                completed_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Snapshot
    # -------------------------------------------------------------------
    def order_details(self) -> dict:
        """Flatten the draft for an order record. Only the card's last four digits survive."""
        return {
            "name": self.contact.name,
            "surname": self.contact.surname,
            "email": self.contact.email,
            "phone": self.contact.phone,
            "address": self.shipping.address,
            "house_number": self.shipping.house_number,
            "flat_number": self.shipping.flat_number,
            "city": self.shipping.city,
            "postal_code": self.shipping.postal_code,
            "country": self.shipping.country,
            "shipping_method": self.shipping.method,
            "payment_method": self.payment.method,
            "card_last4": self.payment.card_last4,
        }
