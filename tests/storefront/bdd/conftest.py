"""Shared BDD fixtures and step definitions for the storefront."""

import pytest
from protean import current_domain
from pytest_bdd import given, parsers, then
from storefront.cart.items import AddToCart
from storefront.cart.management import CreateCart
from storefront.checkout.checkout import Checkout
from storefront.checkout.steps import (
    StartCheckout,
    SubmitContactDetails,
    SubmitPaymentDetails,
    SubmitShippingDetails,
)


@pytest.fixture()
def contact_details():
    return {"name": "Anna", "surname": "Nowak", "email": "anna@example.com", "phone": "123456789"}


@pytest.fixture()
def shipping_details():
    return {
        "address": "Main Street",
        "house_number": "12",
        "city": "Warsaw",
        "postal_code": "00-001",
        "country": "Poland",
    }


@pytest.fixture()
def card_details():
    return {"payment_method": "card", "card_number": "4242 4242 4242 4242", "expiry_date": "12/99", "cvv": "123"}


@pytest.fixture()
def outcome():
    """Container for the latest step submission result."""
    return {"value": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("an empty stored cart", target_fixture="cart_id")
def empty_stored_cart():
    return current_domain.process(CreateCart(session_id="sess-bdd"), asynchronous=False)


@given(parsers.cfparse('a cart holding product "{product_id}" variant "{variant_id}"'), target_fixture="cart_id")
def cart_holding(product_id, variant_id):
    cart_id = current_domain.process(CreateCart(session_id="sess-bdd"), asynchronous=False)
    current_domain.process(
        AddToCart(cart_id=cart_id, product_id=product_id, variant_id=variant_id, quantity=1),
        asynchronous=False,
    )
    return cart_id


@given("a checkout has been started", target_fixture="checkout_id")
def checkout_started(cart_id):
    return current_domain.process(StartCheckout(cart_id=cart_id), asynchronous=False)


@given(
    parsers.cfparse('the checkout has reached the summary with "{method}" shipping'),
    target_fixture="checkout_id",
)
def checkout_at_summary(cart_id, method, contact_details, shipping_details, card_details):
    checkout_id = current_domain.process(StartCheckout(cart_id=cart_id), asynchronous=False)
    current_domain.process(
        SubmitContactDetails(checkout_id=checkout_id, **contact_details),
        asynchronous=False,
    )
    current_domain.process(
        SubmitShippingDetails(checkout_id=checkout_id, shipping_method=method, **shipping_details),
        asynchronous=False,
    )
    current_domain.process(
        SubmitPaymentDetails(checkout_id=checkout_id, **card_details),
        asynchronous=False,
    )
    return checkout_id


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the checkout is at the "{step}" step'))
def checkout_at_step(checkout_id, step):
    assert current_domain.repository_for(Checkout).get(checkout_id).step == step


@then(parsers.cfparse('the payment status is "{status}"'))
def payment_status_is(checkout_id, status):
    assert current_domain.repository_for(Checkout).get(checkout_id).payment_status == status
