"""Checkout wizard commands: start, submit each step, and step back.

Submit handlers call the form validation collaborator exactly once. Only when
it reports no errors is the step's value object recorded and the wizard
advanced; a rejected submission leaves the draft untouched. Before the
summary, an empty cart blocks every step. Fields a submission leaves out fall
back to the profile values the checkout was started with.
"""

from dataclasses import dataclass, field

import structlog
from protean import handle
from protean.fields import Dict, Identifier, String
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.catalogue import get_catalog
from storefront.checkout import forms
from storefront.checkout.checkout import Checkout, CheckoutStep
from storefront.domain import storefront
from storefront.pricing.engine import price

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class StepOutcome:
    """Result of a step submission."""

    accepted: bool
    step: str
    errors: dict = field(default_factory=dict)
    blocked: bool = False


@storefront.command(part_of="Checkout")
class StartCheckout:
    cart_id = Identifier(required=True)
    profile = Dict()


@storefront.command(part_of="Checkout")
class SubmitContactDetails:
    checkout_id = Identifier(required=True)
    name = String(max_length=100)
    surname = String(max_length=100)
    email = String(max_length=254)
    phone = String(max_length=50)


@storefront.command(part_of="Checkout")
class SubmitShippingDetails:
    checkout_id = Identifier(required=True)
    address = String(max_length=255)
    house_number = String(max_length=20)
    flat_number = String(max_length=20)
    city = String(max_length=100)
    postal_code = String(max_length=20)
    country = String(max_length=100)
    shipping_method = String(max_length=20)


@storefront.command(part_of="Checkout")
class SubmitPaymentDetails:
    checkout_id = Identifier(required=True)
    payment_method = String(max_length=20)
    card_number = String(max_length=30)
    expiry_date = String(max_length=10)
    cvv = String(max_length=10)


@storefront.command(part_of="Checkout")
class GoBack:
    checkout_id = Identifier(required=True)


def cart_has_priced_lines(cart_id) -> bool:
    cart = current_domain.repository_for(ShoppingCart).get(cart_id)
    return bool(price(cart.items, get_catalog()))


def _values(command, names, prefill=None) -> dict:
    """Submitted values, falling back to the saved profile for fields left out."""
    prefill = prefill or {}
    values = {}
    for name in names:
        value = getattr(command, name)
        values[name] = value if value is not None else prefill.get(name)
    return values


@storefront.command_handler(part_of=Checkout)
class CheckoutWizardHandler:
    @handle(StartCheckout)
    def start_checkout(self, command):
        if not cart_has_priced_lines(command.cart_id):
            logger.info("Checkout blocked: cart is empty", cart_id=str(command.cart_id))
            return None

        checkout = Checkout.start(command.cart_id, profile=command.profile)
        current_domain.repository_for(Checkout).add(checkout)
        logger.info("Checkout started", checkout_id=str(checkout.id), cart_id=str(command.cart_id))
        return str(checkout.id)

    @handle(SubmitContactDetails)
    def submit_contact_details(self, command):
        return self._submit(
            command,
            CheckoutStep.CONTACT,
            "contact",
            ("name", "surname", "email", "phone"),
            lambda checkout, data: checkout.record_contact(**data),
        )

    @handle(SubmitShippingDetails)
    def submit_shipping_details(self, command):
        return self._submit(
            command,
            CheckoutStep.SHIPPING,
            "shipping",
            (
                "address",
                "house_number",
                "flat_number",
                "city",
                "postal_code",
                "country",
                "shipping_method",
            ),
            lambda checkout, data: checkout.record_shipping(**data),
        )

    @handle(SubmitPaymentDetails)
    def submit_payment_details(self, command):
        return self._submit(
            command,
            CheckoutStep.PAYMENT,
            "payment",
            ("payment_method", "card_number", "expiry_date", "cvv"),
            lambda checkout, data: checkout.record_payment(**data),
        )

    @handle(GoBack)
    def go_back(self, command):
        repo = current_domain.repository_for(Checkout)
        checkout = repo.get(command.checkout_id)
        moved = checkout.step_back()
        if moved:
            repo.add(checkout)
        return moved

    def _submit(self, command, expected_step, schema, fields, record):
        repo = current_domain.repository_for(Checkout)
        checkout = repo.get(command.checkout_id)
        checkout.assert_at(expected_step)

        if not cart_has_priced_lines(checkout.cart_id):
            logger.info("Checkout step blocked: cart is empty", checkout_id=str(checkout.id), step=checkout.step)
            return StepOutcome(accepted=False, step=checkout.step, blocked=True)

        values = _values(command, fields, checkout.prefill)
        errors = forms.validate(values, schema)
        if errors:
            logger.info(
                "Checkout step rejected",
                checkout_id=str(checkout.id),
                step=checkout.step,
                invalid_fields=sorted(errors),
            )
            return StepOutcome(accepted=False, step=checkout.step, errors=errors)

        record(checkout, forms.parse(values, schema))
        repo.add(checkout)
        return StepOutcome(accepted=True, step=checkout.step)
