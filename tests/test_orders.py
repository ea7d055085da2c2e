"""Tests for placing orders, payment and confirmation emails."""

from decimal import Decimal

import pytest
from httpx import AsyncClient

from pizzaportal.services.orders import order_summary
from pizzaportal.store.base import ORDERS, USERS

VISA = "4242424242424242"
FAILURE_CARD = "0909090909090909"


@pytest.fixture
def place(async_client: AsyncClient, customer: dict, cart_id: str):
    async def _place(card: str = VISA):
        return await async_client.post(
            "/api/orders",
            json={"cartId": cart_id, "cardNumber": card},
            headers=customer["headers"],
        )

    return _place


@pytest.fixture
def pay(async_client: AsyncClient, customer: dict):
    async def _pay(order_id: str, status: str = "Paid", card: str = VISA):
        return await async_client.put(
            "/api/orders",
            json={"id": order_id, "paymentStatus": status, "cardNumber": card},
            headers=customer["headers"],
        )

    return _pay


# ── Place ───────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_place_order_paid(async_client: AsyncClient, customer, cart_id, fill_cart, place, payments, notifier):
    """A successful charge marks the order Paid and emails the summary."""
    await fill_cart({"Pizza": 2})
    resp = await place()
    assert resp.status_code == 201
    order = resp.json()
    assert order["paymentStatus"] == "Paid"
    assert order["emailSent"] is True
    assert order["recipient"] == "Ada Lovelace"
    assert order["streetAddress"] == "1 Analytical Way"
    assert order["orderItems"] == {"Pizza": {"quantity": 2, "amount": "$20"}}
    assert order["totalAmount"] == "$20"

    assert payments.calls == [("tok_visa", Decimal("20"), "a@x.com")]
    recipient, body = notifier.sent[0]
    assert recipient == "a@x.com"
    assert "2 x Pizza = $20" in body
    assert "Total amount: $20" in body


@pytest.mark.asyncio
async def test_place_order_clears_cart_and_links_user(
    async_client: AsyncClient, store, customer, cart_id, fill_cart, place
):
    await fill_cart({"Soda": 1})
    order_id = (await place()).json()["id"]

    cart = (await async_client.get("/api/carts", params={"id": cart_id}, headers=customer["headers"])).json()
    assert cart["items"] == {}
    assert cart["totalAmount"] == "$0"
    assert (await store.read(USERS, "a@x.com"))["orders"] == [order_id]


@pytest.mark.asyncio
async def test_empty_cart_rejected(place, store):
    resp = await place()
    assert resp.status_code == 400
    assert await store.list(ORDERS) == []


@pytest.mark.asyncio
async def test_unknown_card_rejected(fill_cart, place, payments, store):
    await fill_cart({"Pizza": 1})
    resp = await place("1234567812345678")
    assert resp.status_code == 400
    assert resp.json()["field"] == "cardNumber"
    assert payments.calls == []
    assert await store.list(ORDERS) == []


@pytest.mark.asyncio
async def test_card_number_formatting_ignored(fill_cart, place, payments):
    await fill_cart({"Pizza": 1})
    resp = await place("4242 4242-4242 4242")
    assert resp.status_code == 201
    assert payments.calls[0][0] == "tok_visa"


@pytest.mark.asyncio
async def test_failure_card_leaves_unpaid_order(
    async_client: AsyncClient, store, customer, cart_id, fill_cart, place, payments
):
    """The failure test card is declined; the order id comes back with the error."""
    await fill_cart({"Pizza": 1})
    resp = await place(FAILURE_CARD)
    assert resp.status_code == 402
    body = resp.json()
    assert body["error"] == "Payment failed"
    order_id = body["id"]
    assert payments.calls == []

    order = await store.read(ORDERS, order_id)
    assert order["paymentStatus"] == "Unpaid"
    assert (await store.read(USERS, "a@x.com"))["orders"] == [order_id]
    cart = (await async_client.get("/api/carts", params={"id": cart_id}, headers=customer["headers"])).json()
    assert cart["items"] == {}


@pytest.mark.asyncio
async def test_gateway_decline_leaves_unpaid_order(fill_cart, place, payments, notifier, store):
    payments.fail = True
    await fill_cart({"Calzone": 1})
    resp = await place()
    assert resp.status_code == 402
    assert "status code: 402" in resp.json()["error"]
    assert (await store.read(ORDERS, resp.json()["id"]))["paymentStatus"] == "Unpaid"
    assert notifier.sent == []


@pytest.mark.asyncio
async def test_email_failure_keeps_payment(fill_cart, place, notifier, store):
    """A lost confirmation email never undoes a successful charge."""
    notifier.fail = True
    await fill_cart({"Pizza": 1})
    resp = await place()
    assert resp.status_code == 201
    assert resp.json()["emailSent"] is False
    assert (await store.read(ORDERS, resp.json()["id"]))["paymentStatus"] == "Paid"


@pytest.mark.asyncio
async def test_order_is_a_snapshot(async_client: AsyncClient, customer, fill_cart, place):
    """Editing the cart after ordering does not touch the order."""
    await fill_cart({"Pizza": 1})
    order_id = (await place()).json()["id"]
    await fill_cart({"Pizza": 4, "Soda": 1})

    resp = await async_client.get("/api/orders", params={"id": order_id}, headers=customer["headers"])
    assert resp.status_code == 200
    assert resp.json()["orderItems"] == {"Pizza": {"quantity": 1, "amount": "$10"}}
    assert resp.json()["totalAmount"] == "$10"


@pytest.mark.asyncio
async def test_place_from_someone_elses_cart(async_client: AsyncClient, signup, cart_id, fill_cart):
    await fill_cart({"Pizza": 1})
    other = await signup("b@x.com")
    resp = await async_client.post(
        "/api/orders", json={"cartId": cart_id, "cardNumber": VISA}, headers=other["headers"]
    )
    assert resp.status_code == 403


# ── Read ────────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_read_order_of_other_user(async_client: AsyncClient, signup, fill_cart, place):
    await fill_cart({"Pizza": 1})
    order_id = (await place()).json()["id"]
    other = await signup("b@x.com")
    resp = await async_client.get("/api/orders", params={"id": order_id}, headers=other["headers"])
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_read_unknown_order(async_client: AsyncClient, customer):
    resp = await async_client.get("/api/orders", params={"id": "q" * 20}, headers=customer["headers"])
    assert resp.status_code == 404


# ── Payment update ──────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_retry_payment_after_failure(fill_cart, place, pay, payments, notifier):
    """An Unpaid order can be paid later with a working card."""
    await fill_cart({"Pizza": 1, "Soda": 2})
    order_id = (await place(FAILURE_CARD)).json()["id"]

    resp = await pay(order_id)
    assert resp.status_code == 200
    assert resp.json()["paymentStatus"] == "Paid"
    assert resp.json()["emailSent"] is True
    assert payments.calls == [("tok_visa", Decimal("15"), "a@x.com")]
    assert len(notifier.sent) == 1


@pytest.mark.asyncio
async def test_retry_with_failure_card_keeps_order_unpaid(fill_cart, place, pay, store):
    await fill_cart({"Pizza": 1})
    order_id = (await place(FAILURE_CARD)).json()["id"]
    resp = await pay(order_id, card=FAILURE_CARD)
    assert resp.status_code == 402
    assert resp.json()["id"] == order_id
    assert (await store.read(ORDERS, order_id))["paymentStatus"] == "Unpaid"


@pytest.mark.asyncio
async def test_paying_a_paid_order_changes_nothing(fill_cart, place, pay, payments):
    await fill_cart({"Pizza": 1})
    order_id = (await place()).json()["id"]
    resp = await pay(order_id)
    assert resp.status_code == 400
    assert resp.json()["error"] == "No data was changed"
    assert len(payments.calls) == 1


@pytest.mark.asyncio
async def test_paid_order_cannot_become_unpaid(fill_cart, place, pay, store):
    await fill_cart({"Pizza": 1})
    order_id = (await place()).json()["id"]
    resp = await pay(order_id, status="Unpaid")
    assert resp.status_code == 400
    assert (await store.read(ORDERS, order_id))["paymentStatus"] == "Paid"


@pytest.mark.asyncio
async def test_unknown_payment_status(fill_cart, place, pay):
    await fill_cart({"Pizza": 1})
    order_id = (await place(FAILURE_CARD)).json()["id"]
    resp = await pay(order_id, status="Refunded")
    assert resp.status_code == 400


# ── Summary ─────────────────────────────────────────────────────────
def test_order_summary_lines():
    summary = order_summary(
        {
            "orderItems": {
                "Pizza": {"quantity": 2, "amount": "$20"},
                "Soda": {"quantity": 1, "amount": "$2.50"},
            },
            "totalAmount": "$22.50",
        }
    )
    assert summary == (
        "Order summary:\n"
        "------------\n"
        "2 x Pizza = $20\n"
        "1 x Soda = $2.50\n"
        "\n"
        "Total amount: $22.50"
    )


@pytest.mark.asyncio
async def test_repeated_get_order_is_stable(async_client: AsyncClient, customer, fill_cart, place):
    """Reads match each other and the placement response."""
    await fill_cart({"Pizza": 2, "Calzone": 1})
    placed = (await place()).json()

    params = {"id": placed["id"]}
    first = await async_client.get("/api/orders", params=params, headers=customer["headers"])
    second = await async_client.get("/api/orders", params=params, headers=customer["headers"])
    assert first.status_code == second.status_code == 200
    assert first.json() == second.json()
    assert first.json()["orderItems"] == placed["orderItems"]
    assert first.json()["totalAmount"] == placed["totalAmount"] == "$34"
