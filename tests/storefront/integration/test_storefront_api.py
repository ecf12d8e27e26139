"""Integration tests for the storefront HTTP API via TestClient."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from protean import current_domain
from storefront.api import cart_router, checkout_router, order_router, register_error_handlers
from storefront.cart.cart import ShoppingCart
from storefront.payments.gateway import set_gateway
from storefront.payments.gateway.fake_adapter import FakeGateway

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
def client():
    app = FastAPI()
    app.include_router(cart_router)
    app.include_router(checkout_router)
    app.include_router(order_router)
    register_error_handlers(app)
    return TestClient(app)


def _create_cart(client, session_id="sess-api-001"):
    """Helper: POST /carts and return the cart_id."""
    response = client.post("/carts", json={"session_id": session_id})
    assert response.status_code == 201
    return response.json()["cart_id"]


def _add_item(client, cart_id, product_id="p1", variant_id="v1", quantity=1):
    """Helper: POST /carts/{cart_id}/items."""
    response = client.post(
        f"/carts/{cart_id}/items",
        json={"product_id": product_id, "variant_id": variant_id, "quantity": quantity},
    )
    assert response.status_code == 200
    return response


def _checkout_at_summary(client, cart_id):
    """Helper: start a checkout and fill in every step."""
    checkout_id = client.post("/checkouts", json={"cart_id": cart_id}).json()["checkout_id"]
    assert client.post(f"/checkouts/{checkout_id}/contact", json=CONTACT).json()["accepted"]
    assert client.post(f"/checkouts/{checkout_id}/shipping", json=SHIPPING).json()["accepted"]
    assert client.post(f"/checkouts/{checkout_id}/payment", json=CARD).json()["step"] == "Summary"
    return checkout_id


class TestCartEndpoints:
    def test_create_cart(self, client):
        cart_id = _create_cart(client)

        cart = current_domain.repository_for(ShoppingCart).get(cart_id)
        assert cart.session_id == "sess-api-001"
        assert cart.is_empty

    def test_priced_cart(self, client):
        cart_id = _create_cart(client)
        _add_item(client, cart_id, quantity=2)
        _add_item(client, cart_id, variant_id="v2")

        response = client.get(f"/carts/{cart_id}", params={"shipping_method": "express"})

        assert response.status_code == 200
        summary = response.json()["summary"]
        assert summary["item_count"] == 3
        assert summary["subtotal"] == pytest.approx(32.5)
        assert summary["shipping_cost"] == pytest.approx(15.0)
        assert summary["total"] == pytest.approx(47.5)
        assert [line["variant_color"] for line in summary["lines"]] == ["Gold", "Silver"]

    def test_unpriced_cart_has_no_shipping(self, client):
        cart_id = _create_cart(client)
        _add_item(client, cart_id)

        summary = client.get(f"/carts/{cart_id}").json()["summary"]
        assert summary["shipping_cost"] == 0.0
        assert summary["total"] == pytest.approx(10.0)

    def test_unknown_product_is_not_found(self, client):
        cart_id = _create_cart(client)

        response = client.post(f"/carts/{cart_id}/items", json={"product_id": "nope", "variant_id": "v1"})

        assert response.status_code == 404
        assert current_domain.repository_for(ShoppingCart).get(cart_id).is_empty

    def test_set_quantity_and_remove(self, client):
        cart_id = _create_cart(client)
        _add_item(client, cart_id)

        response = client.put(
            f"/carts/{cart_id}/items",
            json={"product_id": "p1", "variant_id": "v1", "new_quantity": 4},
        )
        assert response.status_code == 200
        assert current_domain.repository_for(ShoppingCart).get(cart_id).items[0].quantity == 4

        response = client.delete(f"/carts/{cart_id}/items", params={"product_id": "p1", "variant_id": "v1"})
        assert response.status_code == 200
        assert current_domain.repository_for(ShoppingCart).get(cart_id).is_empty

    def test_unknown_cart_is_not_found(self, client):
        response = client.get("/carts/does-not-exist")
        assert response.status_code == 404


class TestDiscountEndpoint:
    def test_known_code_is_applied(self, client):
        cart_id = _create_cart(client)
        _add_item(client, cart_id, quantity=2)

        response = client.post(f"/carts/{cart_id}/discount", json={"code": "AURA20"})

        assert response.status_code == 200
        assert response.json() == {"accepted": True, "code": "AURA20", "percentage": 0.2}
        summary = client.get(f"/carts/{cart_id}").json()["summary"]
        assert summary["discount_amount"] == pytest.approx(4.0)

    def test_unknown_code_is_rejected(self, client):
        cart_id = _create_cart(client)

        response = client.post(f"/carts/{cart_id}/discount", json={"code": "BOGUS"})

        assert response.status_code == 200
        assert response.json()["accepted"] is False
        assert response.json()["code"] is None


class TestCheckoutEndpoints:
    def test_empty_cart_cannot_start_checkout(self, client):
        cart_id = _create_cart(client)

        response = client.post("/checkouts", json={"cart_id": cart_id})

        assert response.status_code == 409

    def test_invalid_contact_is_reported(self, client):
        cart_id = _create_cart(client)
        _add_item(client, cart_id)
        checkout_id = client.post("/checkouts", json={"cart_id": cart_id}).json()["checkout_id"]

        response = client.post(f"/checkouts/{checkout_id}/contact", json={**CONTACT, "name": ""})

        body = response.json()
        assert response.status_code == 200
        assert body["accepted"] is False
        assert body["step"] == "Contact"
        assert body["errors"] == {"name": "Name is required"}

    def test_walk_to_summary_and_back(self, client):
        cart_id = _create_cart(client)
        _add_item(client, cart_id)
        checkout_id = _checkout_at_summary(client, cart_id)

        checkout = client.get(f"/checkouts/{checkout_id}").json()
        assert checkout["step"] == "Summary"
        assert checkout["summary"]["total"] == pytest.approx(15.0)

        response = client.post(f"/checkouts/{checkout_id}/back")
        assert response.json() == {"moved": True, "step": "Payment"}

    def test_profile_prefill_is_returned(self, client):
        cart_id = _create_cart(client)
        _add_item(client, cart_id)

        response = client.post("/checkouts", json={"cart_id": cart_id, "profile": {"name": "Anna", "city": "Warsaw"}})
        checkout_id = response.json()["checkout_id"]

        assert client.get(f"/checkouts/{checkout_id}").json()["prefill"] == {"name": "Anna", "city": "Warsaw"}

    def test_submitting_out_of_order_is_rejected(self, client):
        cart_id = _create_cart(client)
        _add_item(client, cart_id)
        checkout_id = client.post("/checkouts", json={"cart_id": cart_id}).json()["checkout_id"]

        response = client.post(f"/checkouts/{checkout_id}/payment", json=CARD)

        assert response.status_code == 400


class TestPlacementAndHistory:
    def test_place_order_and_list_history(self, client):
        set_gateway(FakeGateway())
        cart_id = _create_cart(client)
        _add_item(client, cart_id)
        checkout_id = _checkout_at_summary(client, cart_id)

        response = client.post(f"/checkouts/{checkout_id}/place")

        body = response.json()
        assert body["status"] == "success"
        order_id = body["order_id"]

        orders = client.get("/orders", params={"email": "ANNA@example.com"}).json()
        assert [o["order_id"] for o in orders] == [order_id]
        assert orders[0]["total"] == pytest.approx(15.0)
        assert orders[0]["details"]["card_last4"] == "4242"
        assert client.get(f"/carts/{cart_id}").json()["summary"]["lines"] == []

    def test_failed_payment_reports_reason(self, client):
        set_gateway(FakeGateway(should_succeed=False))
        cart_id = _create_cart(client)
        _add_item(client, cart_id)
        checkout_id = _checkout_at_summary(client, cart_id)

        response = client.post(f"/checkouts/{checkout_id}/place")

        assert response.json() == {"status": "error", "order_id": None, "reason": "Card declined"}
        assert client.get(f"/checkouts/{checkout_id}").json()["payment_status"] == "Error"
        assert client.get("/orders").json() == []

    def test_remove_and_clear_orders(self, client):
        set_gateway(FakeGateway())
        order_ids = []
        for session in ("sess-a", "sess-b"):
            cart_id = _create_cart(client, session)
            _add_item(client, cart_id)
            checkout_id = _checkout_at_summary(client, cart_id)
            order_ids.append(client.post(f"/checkouts/{checkout_id}/place").json()["order_id"])

        assert client.delete(f"/orders/{order_ids[0]}").status_code == 200
        assert [o["order_id"] for o in client.get("/orders").json()] == [order_ids[1]]

        assert client.delete("/orders").json() == {"removed": 1}
        assert client.get("/orders").json() == []

    def test_unknown_order_is_not_found(self, client):
        assert client.get("/orders/ORD-missing").status_code == 404
        assert client.delete("/orders/ORD-missing").status_code == 404
