"""Fixtures that drive the storefront through its commands."""

import pytest
from protean import current_domain
from storefront.cart.items import AddToCart
from storefront.cart.management import CreateCart
from storefront.checkout.steps import (
    StartCheckout,
    SubmitContactDetails,
    SubmitPaymentDetails,
    SubmitShippingDetails,
)

CONTACT = {"name": "Anna", "surname": "Nowak", "email": "anna@example.com", "phone": "123456789"}
SHIPPING = {
    "address": "Main Street",
    "house_number": "12",
    "city": "Warsaw",
    "postal_code": "00-001",
    "country": "Poland",
    "shipping_method": "standard",
}
CARD = {"payment_method": "card", "card_number": "4242 4242 4242 4242", "expiry_date": "12/99", "cvv": "123"}


@pytest.fixture()
def contact():
    return dict(CONTACT)


@pytest.fixture()
def shipping():
    return dict(SHIPPING)


@pytest.fixture()
def card():
    return dict(CARD)


@pytest.fixture()
def empty_cart_id():
    return current_domain.process(CreateCart(session_id="sess-001"), asynchronous=False)


@pytest.fixture()
def cart_id(empty_cart_id):
    """A cart holding one p1/v1 (10.0)."""
    current_domain.process(
        AddToCart(cart_id=empty_cart_id, product_id="p1", variant_id="v1", quantity=1),
        asynchronous=False,
    )
    return empty_cart_id


@pytest.fixture()
def checkout_id(cart_id):
    return current_domain.process(StartCheckout(cart_id=cart_id), asynchronous=False)


@pytest.fixture()
def summary_checkout_id(checkout_id, contact, shipping, card):
    """A checkout that has passed every step and sits at the summary."""
    for command in (
        SubmitContactDetails(checkout_id=checkout_id, **contact),
        SubmitShippingDetails(checkout_id=checkout_id, **shipping),
        SubmitPaymentDetails(checkout_id=checkout_id, **card),
    ):
        outcome = current_domain.process(command, asynchronous=False)
        assert outcome.accepted, outcome.errors
    return checkout_id
