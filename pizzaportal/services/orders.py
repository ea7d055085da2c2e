"""
Order service — turns a cart into an order, charges it and confirms it.

Payment status only moves forward: ``Unpaid`` → ``Paid``. The order is
stored before the charge is attempted, so a failed payment still leaves a
traceable order whose id is returned with the error.
"""

from __future__ import annotations

import copy
import logging
from typing import Any

from pizzaportal.core.exceptions import BadRequest, NotFound, PaymentFailed, RecordNotFound, ServiceError, StoreError
from pizzaportal.core.security import create_random_id, now_ms
from pizzaportal.core.templates import CONFIRMATION_EMAIL, interpolate
from pizzaportal.schemas.order import PAID, UNPAID
from pizzaportal.services.access import load_owned
from pizzaportal.services.carts import EMPTY_TOTAL
from pizzaportal.services.gateway import FAILURE_TEST, GatewayError, Notifier, PaymentGateway, card_source
from pizzaportal.services.money import parse_amount
from pizzaportal.services.tokens import TokenService
from pizzaportal.store.base import CARTS, ORDERS, USERS, RecordStore

logger = logging.getLogger(__name__)


def order_summary(order: dict[str, Any]) -> str:
    lines = ["Order summary:", "------------"]
    for name, line in order["orderItems"].items():
        lines.append(f"{line['quantity']} x {name} = {line['amount']}")
    lines.append("")
    lines.append(f"Total amount: {order['totalAmount']}")
    return "\n".join(lines)


class OrderService:
    def __init__(
        self,
        store: RecordStore,
        tokens: TokenService,
        payments: PaymentGateway,
        notifier: Notifier,
    ) -> None:
        self.store = store
        self.tokens = tokens
        self.payments = payments
        self.notifier = notifier

    # ── Queries ─────────────────────────────────────────────────────
    async def get(self, order_id: str, token: str | None) -> dict[str, Any]:
        return await load_owned(self.store, self.tokens, ORDERS, order_id, token, "Order")

    # ── Commands ────────────────────────────────────────────────────
    async def place(
        self, cart_id: str, card_number: str, token: str | None
    ) -> dict[str, Any]:
        source = card_source(card_number)
        if source is None:
            raise BadRequest("Invalid or missing required field", field="cardNumber")

        cart = await load_owned(self.store, self.tokens, CARTS, cart_id, token, "Cart")
        if not cart.get("items"):
            raise BadRequest("Cannot place an order from an empty cart")

        try:
            user = await self.store.read(USERS, cart["email"])
        except RecordNotFound:
            raise NotFound("User not found") from None

        order = {
            "id": create_random_id(),
            "recipient": f"{user['firstName']} {user['lastName']}",
            "streetAddress": user["streetAddress"],
            "email": user["email"],
            # Snapshot: later cart edits must never reach the order
            "orderItems": copy.deepcopy(cart["items"]),
            "totalAmount": cart["totalAmount"],
            "orderPlacedAt": now_ms(),
            "paymentStatus": UNPAID,
        }
        await self.store.create(ORDERS, order["id"], order)
        logger.info("Order %s placed from cart %s", order["id"], cart_id)

        try:
            user["orders"] = [*(user.get("orders") or []), order["id"]]
            await self.store.update(USERS, user["email"], user)

            cart["items"] = {}
            cart["totalAmount"] = EMPTY_TOTAL
            await self.store.update(CARTS, cart_id, cart)

            await self._charge(order, source)
            order["paymentStatus"] = PAID
            await self.store.update(ORDERS, order["id"], order)
        except ServiceError as exc:
            exc.extra.setdefault("id", order["id"])
            raise
        except StoreError as exc:
            logger.error("Order %s left incomplete: %s", order["id"], exc)
            raise

        return {**order, "emailSent": await self._confirm(order)}

    async def update_payment(
        self,
        order_id: str,
        status: str,
        card_number: str,
        token: str | None,
    ) -> dict[str, Any]:
        order = await load_owned(self.store, self.tokens, ORDERS, order_id, token, "Order")

        if status == order.get("paymentStatus"):
            raise BadRequest("No data was changed")
        if status != PAID:
            raise BadRequest("A paid order cannot be marked as unpaid")

        source = card_source(card_number)
        if source is None:
            raise BadRequest("Invalid or missing required field", field="cardNumber")

        try:
            await self._charge(order, source)
        except ServiceError as exc:
            exc.extra.setdefault("id", order_id)
            raise

        order["paymentStatus"] = PAID
        await self.store.update(ORDERS, order_id, order)
        logger.info("Order %s marked as paid", order_id)
        return {**order, "emailSent": await self._confirm(order)}

    # ── Steps ───────────────────────────────────────────────────────
    async def _charge(self, order: dict[str, Any], source: str) -> None:
        if source == FAILURE_TEST:
            raise PaymentFailed()
        try:
            await self.payments.charge(
                source, parse_amount(order["totalAmount"]), order["email"]
            )
        except GatewayError as exc:
            logger.warning("Payment for order %s failed: %s", order["id"], exc)
            raise PaymentFailed(str(exc)) from exc

    async def _confirm(self, order: dict[str, Any]) -> bool:
        """Send the confirmation email. Failure never undoes the payment."""
        body = interpolate(CONFIRMATION_EMAIL, {"summary": order_summary(order)})
        try:
            await self.notifier.send_email(order["email"], body)
        except GatewayError as exc:
            logger.error("Confirmation email for order %s failed: %s", order["id"], exc)
            return False
        return True
