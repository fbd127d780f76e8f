"""Integration tests for checkout, lookup and fulfillment endpoints via TestClient."""

import re
from decimal import Decimal

import pytest

from conftest import ADDRESS, bearer

GUEST = {"X-Session-Id": "sess-guest-1"}


def _add(client, headers, product_id=1, quantity=2):
    response = client.post("/cart", json={"product_id": product_id, "quantity": quantity}, headers=headers)
    assert response.status_code == 200, response.text


def _checkout(client, headers, **overrides):
    payload = {
        "email": "guest@example.com",
        "shipping_address": ADDRESS,
        "payment_intent_id": "pi_ok_1",
        **overrides,
    }
    return client.post("/orders", json=payload, headers=headers)


@pytest.fixture()
def guest_order(client):
    _add(client, GUEST)
    response = _checkout(client, GUEST)
    assert response.status_code == 201, response.text
    return response.json()


class TestCheckout:
    def test_guest_checkout(self, client, guest_order, notifications):
        assert re.fullmatch(r"ORD-\d+-[A-Z0-9]{6}", guest_order["order_number"])
        assert guest_order["status"] == "pending"
        assert guest_order["email"] == "guest@example.com"
        assert Decimal(guest_order["subtotal"]) == Decimal("100.00")
        assert Decimal(guest_order["shipping_fee"]) == Decimal("10.00")
        assert Decimal(guest_order["tax"]) == Decimal("8.00")
        assert Decimal(guest_order["total"]) == Decimal("118.00")
        assert guest_order["items"][0]["quantity"] == 2
        assert client.get("/cart", headers=GUEST).json()["items"] == []
        assert notifications.sent[0][0] == "confirmation"

    def test_response_does_not_expose_ownership(self, guest_order):
        assert "owner_user_id" not in guest_order
        assert "guest_session_id" not in guest_order
        assert "payment_intent_id" not in guest_order

    def test_no_identity(self, client):
        response = _checkout(client, {})

        assert response.status_code == 401

    def test_empty_cart(self, client):
        response = _checkout(client, GUEST)

        assert response.status_code == 409
        assert response.json()["detail"]["code"] == "empty_cart"

    def test_declined_payment_keeps_cart(self, client):
        _add(client, GUEST)

        response = _checkout(client, GUEST, payment_intent_id="pi_declined_1")

        assert response.status_code == 402
        assert response.json()["detail"]["code"] == "payment_declined"
        assert len(client.get("/cart", headers=GUEST).json()["items"]) == 1

    def test_guest_must_give_email(self, client):
        _add(client, GUEST)

        response = _checkout(client, GUEST, email=None)

        assert response.status_code == 400
        assert response.json()["detail"]["field"] == "email"

    def test_malformed_email(self, client):
        _add(client, GUEST)

        assert _checkout(client, GUEST, email="not-an-email").status_code == 422

    def test_shipping_address_is_required(self, client):
        _add(client, GUEST)

        response = _checkout(client, GUEST, shipping_address=None)

        assert response.status_code == 400
        assert response.json()["detail"]["field"] == "shipping_address"

    def test_guest_cannot_use_saved_address(self, client):
        _add(client, GUEST)

        response = _checkout(client, GUEST, shipping_address=None, address_id=1)

        assert response.status_code == 401

    def test_user_checkout_with_saved_address_and_account_email(self, client):
        headers = bearer("token-alice")
        address_id = client.post("/addresses", json={**ADDRESS, "city": "Salem"}, headers=headers).json()["id"]
        _add(client, headers, product_id=2, quantity=5)

        response = _checkout(client, headers, email=None, shipping_address=None, address_id=address_id)

        assert response.status_code == 201, response.text
        order = response.json()
        assert order["email"] == "alice@example.com"
        assert order["shipping_address"]["city"] == "Salem"
        assert Decimal(order["shipping_fee"]) == Decimal("0.00")

    def test_saved_address_of_another_user(self, client):
        address_id = client.post("/addresses", json=ADDRESS, headers=bearer("token-bob")).json()["id"]
        _add(client, bearer("token-alice"))

        response = _checkout(client, bearer("token-alice"), shipping_address=None, address_id=address_id)

        assert response.status_code == 404


class TestOrderLookup:
    def test_lookup_without_login(self, client, guest_order):
        response = client.get(f"/orders/status/{guest_order['order_number']}")

        assert response.status_code == 200
        assert response.json()["order_number"] == guest_order["order_number"]

    def test_lookup_requires_exact_number(self, client, guest_order):
        assert client.get("/orders/status/ORD-1699999999-ABC123").status_code == 404
        assert client.get(f"/orders/status/{guest_order['order_number'].lower()}").status_code == 404
        assert client.get(f"/orders/status/%20{guest_order['order_number']}%20").status_code == 404

    def test_lookup_shows_snapshot_prices(self, client, guest_order, catalog):
        catalog.set_price(1, "1.00")

        order = client.get(f"/orders/status/{guest_order['order_number']}").json()

        assert Decimal(order["items"][0]["unit_price"]) == Decimal("50.00")

    def test_my_orders_requires_login(self, client):
        assert client.get("/orders", headers=GUEST).status_code == 401

    def test_my_orders_lists_only_owned_orders(self, client, guest_order):
        headers = bearer("token-alice")
        _add(client, headers)
        mine = _checkout(client, headers, email="alice@example.com").json()

        orders = client.get("/orders", headers=headers).json()["orders"]

        assert [o["order_number"] for o in orders] == [mine["order_number"]]


class TestLinkGuestOrders:
    def test_link_after_registration(self, client):
        _add(client, GUEST)
        number = _checkout(client, GUEST, email="alice@example.com").json()["order_number"]

        response = client.post("/orders/link-guest-orders", headers={**bearer("token-alice"), **GUEST})

        assert response.status_code == 200
        assert response.json() == {"linked_count": 1}
        orders = client.get("/orders", headers=bearer("token-alice")).json()["orders"]
        assert [o["order_number"] for o in orders] == [number]

        again = client.post("/orders/link-guest-orders", headers={**bearer("token-alice"), **GUEST})
        assert again.json() == {"linked_count": 0}

    def test_link_requires_login(self, client):
        assert client.post("/orders/link-guest-orders", headers=GUEST).status_code == 401


class TestStatusChange:
    def test_admin_moves_order_forward(self, client, guest_order):
        number = guest_order["order_number"]
        admin = bearer("token-admin")

        assert client.post(f"/orders/{number}/status", json={"status": "processing"}, headers=admin).status_code == 200
        shipped = client.post(
            f"/orders/{number}/status",
            json={"status": "shipped", "tracking_number": "1Z999"},
            headers=admin,
        )

        assert shipped.status_code == 200
        assert shipped.json()["tracking_number"] == "1Z999"
        assert shipped.json()["shipped_at"] is not None

    def test_customer_cannot_change_status(self, client, guest_order):
        response = client.post(
            f"/orders/{guest_order['order_number']}/status",
            json={"status": "cancelled"},
            headers=bearer("token-alice"),
        )

        assert response.status_code == 403

    def test_status_change_requires_login(self, client, guest_order):
        response = client.post(f"/orders/{guest_order['order_number']}/status", json={"status": "cancelled"})

        assert response.status_code == 401

    def test_invalid_transition(self, client, guest_order):
        response = client.post(
            f"/orders/{guest_order['order_number']}/status",
            json={"status": "shipped", "tracking_number": "1Z999"},
            headers=bearer("token-admin"),
        )

        assert response.status_code == 409
        assert response.json()["detail"]["code"] == "invalid_transition"

    def test_unknown_status_value(self, client, guest_order):
        response = client.post(
            f"/orders/{guest_order['order_number']}/status",
            json={"status": "lost"},
            headers=bearer("token-admin"),
        )

        assert response.status_code == 422

    def test_unknown_order(self, client):
        response = client.post(
            "/orders/ORD-1699999999-ABC123/status",
            json={"status": "processing"},
            headers=bearer("token-admin"),
        )

        assert response.status_code == 404
