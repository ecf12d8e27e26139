"""Tests for the Checkout wizard state machine."""

import pytest
from protean.exceptions import InvalidOperationError, ValidationError
from storefront.checkout.checkout import Checkout, CheckoutStep, PaymentStatus
from storefront.checkout.events import (
    CheckoutCompleted,
    CheckoutStarted,
    CheckoutSteppedBack,
    CheckoutStepCompleted,
    PaymentAttemptFailed,
)

CONTACT = {"name": "Anna", "surname": "Nowak", "email": "anna@example.com", "phone": "123456789"}
SHIPPING = {
    "address": "Main Street",
    "house_number": "12",
    "city": "Warsaw",
    "postal_code": "00-001",
    "country": "Poland",
    "shipping_method": "express",
}
CARD = {"payment_method": "card", "card_number": "4242 4242 4242 4242", "expiry_date": "12/99", "cvv": "123"}


def _make_checkout():
    return Checkout.start("cart-001")


def _at_summary(payment=CARD):
    checkout = _make_checkout()
    checkout.record_contact(**CONTACT)
    checkout.record_shipping(**SHIPPING)
    checkout.record_payment(**payment)
    return checkout


class TestStart:
    def test_starts_at_contact(self):
        checkout = _make_checkout()
        assert checkout.step == CheckoutStep.CONTACT.value
        assert checkout.payment_status == PaymentStatus.IDLE.value
        assert isinstance(checkout._events[0], CheckoutStarted)

    def test_profile_keeps_known_fields_only(self):
        checkout = Checkout.start("cart-001", profile={"name": " Anna ", "city": "Warsaw", "role": "admin", "phone": ""})
        assert checkout.prefill == {"name": "Anna", "city": "Warsaw"}

    def test_no_profile_means_no_prefill(self):
        assert not _make_checkout().prefill


class TestForward:
    def test_steps_advance_in_order(self):
        checkout = _make_checkout()
        checkout.record_contact(**CONTACT)
        assert checkout.step == CheckoutStep.SHIPPING.value
        checkout.record_shipping(**SHIPPING)
        assert checkout.step == CheckoutStep.PAYMENT.value
        checkout.record_payment(**CARD)
        assert checkout.step == CheckoutStep.SUMMARY.value

        completed = [e.completed_step for e in checkout._events if isinstance(e, CheckoutStepCompleted)]
        assert completed == ["Contact", "Shipping", "Payment"]

    def test_cannot_skip_a_step(self):
        checkout = _make_checkout()
        with pytest.raises(ValidationError):
            checkout.record_shipping(**SHIPPING)
        assert checkout.step == CheckoutStep.CONTACT.value

    def test_cannot_resubmit_a_completed_step(self):
        checkout = _make_checkout()
        checkout.record_contact(**CONTACT)
        with pytest.raises(ValidationError):
            checkout.record_contact(**CONTACT)

    def test_shipping_method_is_exposed(self):
        checkout = _make_checkout()
        assert checkout.shipping_method is None
        checkout.record_contact(**CONTACT)
        checkout.record_shipping(**SHIPPING)
        assert checkout.shipping_method == "express"

    def test_transfer_scrubs_card_fields(self):
        checkout = _at_summary({**CARD, "payment_method": "transfer"})
        assert checkout.payment.method == "transfer"
        assert checkout.payment.card_number is None
        assert checkout.payment.cvv is None


class TestBack:
    def test_back_from_each_step(self):
        checkout = _at_summary()
        assert checkout.step_back() is True
        assert checkout.step == CheckoutStep.PAYMENT.value
        assert checkout.step_back() is True
        assert checkout.step == CheckoutStep.SHIPPING.value
        assert checkout.step_back() is True
        assert checkout.step == CheckoutStep.CONTACT.value

    def test_back_keeps_recorded_details(self):
        checkout = _at_summary()
        checkout.step_back()
        assert checkout.contact.email == "anna@example.com"
        assert checkout.shipping.city == "Warsaw"

    def test_back_from_contact_is_refused(self):
        checkout = _make_checkout()
        assert checkout.step_back() is False
        assert not [e for e in checkout._events if isinstance(e, CheckoutSteppedBack)]

    def test_back_refused_while_payment_processing(self):
        checkout = _at_summary()
        checkout.begin_payment()
        assert checkout.step_back() is False
        assert checkout.step == CheckoutStep.SUMMARY.value


class TestPaymentGuard:
    def test_begin_payment_claims_guard(self):
        checkout = _at_summary()
        assert checkout.begin_payment() is True
        assert checkout.payment_status == PaymentStatus.PROCESSING.value
        assert checkout.payment_attempts == 1

    def test_second_claim_is_rejected(self):
        checkout = _at_summary()
        checkout.begin_payment()
        assert checkout.begin_payment() is False
        assert checkout.payment_attempts == 1

    def test_begin_payment_requires_summary(self):
        checkout = _make_checkout()
        with pytest.raises(ValidationError):
            checkout.begin_payment()

    def test_failure_releases_guard_for_retry(self):
        checkout = _at_summary()
        checkout.begin_payment()
        checkout.record_payment_failure("Card declined")

        assert checkout.payment_status == PaymentStatus.ERROR.value
        assert checkout.failure_reason == "Card declined"
        assert [e.reason for e in checkout._events if isinstance(e, PaymentAttemptFailed)] == ["Card declined"]

        assert checkout.begin_payment() is True
        assert checkout.payment_attempts == 2
        assert checkout.failure_reason is None

    def test_failure_without_attempt_is_rejected(self):
        checkout = _at_summary()
        with pytest.raises(ValidationError):
            checkout.record_payment_failure("Card declined")


class TestComplete:
    def test_incomplete_draft_cannot_commit(self):
        checkout = _make_checkout()
        checkout.record_contact(**CONTACT)
        with pytest.raises(InvalidOperationError):
            checkout.assert_ready_for_commit()
        assert set(checkout.missing_sections()) == {"shipping", "payment", "summary review"}

    def test_complete_drops_draft(self):
        checkout = _at_summary()
        checkout.begin_payment()
        checkout.complete("ORD-1")

        assert checkout.is_completed
        assert checkout.payment_status == PaymentStatus.SUCCESS.value
        assert checkout.order_id == "ORD-1"
        assert checkout.contact is None
        assert checkout.shipping is None
        assert checkout.payment is None
        assert not checkout.prefill
        assert [e.order_id for e in checkout._events if isinstance(e, CheckoutCompleted)] == ["ORD-1"]

    def test_completed_checkout_cannot_pay_or_go_back(self):
        checkout = _at_summary()
        checkout.complete("ORD-1")
        assert checkout.begin_payment() is False
        assert checkout.step_back() is False
        with pytest.raises(InvalidOperationError):
            checkout.complete("ORD-2")


class TestOrderDetails:
    def test_card_reduced_to_last_four_digits(self):
        details = _at_summary().order_details()
        assert details["card_last4"] == "4242"
        assert details["email"] == "anna@example.com"
        assert details["shipping_method"] == "express"
        assert "cvv" not in details
        assert "card_number" not in details

    def test_transfer_has_no_card_digits(self):
        details = _at_summary({"payment_method": "transfer"}).order_details()
        assert details["payment_method"] == "transfer"
        assert details["card_last4"] is None
