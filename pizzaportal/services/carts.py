"""
Cart service — one cart per user, mutated by signed quantity deltas.

Invariant kept by every write: ``totalAmount`` equals the sum of the line
amounts and every item present has a positive quantity.
"""

from __future__ import annotations

import logging
from typing import Any

from pizzaportal.core.exceptions import BadRequest, Conflict, RecordNotFound
from pizzaportal.core.security import create_random_id
from pizzaportal.services.access import load_owned
from pizzaportal.services.menu import Menu
from pizzaportal.services.money import format_amount, parse_amount
from pizzaportal.services.tokens import TokenService
from pizzaportal.store.base import CARTS, USERS, RecordStore

logger = logging.getLogger(__name__)

EMPTY_TOTAL = format_amount(parse_amount(""))


def empty_cart(cart_id: str, email: str) -> dict[str, Any]:
    return {"id": cart_id, "email": email, "items": {}, "totalAmount": EMPTY_TOTAL}


def apply_deltas(cart: dict[str, Any], deltas: dict[str, int], menu: Menu) -> dict[str, Any]:
    """Apply quantity deltas to *cart* in place and return it.

    The running total is accumulated from the stored value, one delta at a
    time. A delta that would leave an item at zero or below removes it; a
    zero or negative delta for an absent item is ignored.
    """
    items: dict[str, dict[str, Any]] = cart.setdefault("items", {})
    total = parse_amount(cart.get("totalAmount"))

    for name, delta in deltas.items():
        price = menu.price(name)
        line = items.get(name)
        if line is not None:
            old_quantity = line["quantity"]
            new_quantity = old_quantity + delta
            if delta == 0 or new_quantity <= 0:
                total -= price * old_quantity
                del items[name]
            else:
                total += price * delta
                items[name] = {
                    "quantity": new_quantity,
                    "amount": format_amount(price * new_quantity),
                }
        elif delta > 0:
            total += price * delta
            items[name] = {"quantity": delta, "amount": format_amount(price * delta)}

    cart["totalAmount"] = format_amount(total)
    return cart


class CartService:
    def __init__(self, store: RecordStore, tokens: TokenService, menu: Menu) -> None:
        self.store = store
        self.tokens = tokens
        self.menu = menu

    async def create(self, email: str, token: str | None) -> dict[str, Any]:
        await self.tokens.validate(token, email)
        try:
            user = await self.store.read(USERS, email)
        except RecordNotFound:
            raise BadRequest("User not found") from None

        if user.get("cartId"):
            raise Conflict("The specified user already has a cart")

        cart = empty_cart(create_random_id(), email)
        await self.store.create(CARTS, cart["id"], cart)
        # Second, dependent write: a crash here leaves an unreferenced cart
        user["cartId"] = cart["id"]
        await self.store.update(USERS, email, user)

        logger.info("Created cart %s for %s", cart["id"], email)
        return cart

    async def get(self, cart_id: str, token: str | None) -> dict[str, Any]:
        return await load_owned(self.store, self.tokens, CARTS, cart_id, token, "Cart")

    async def update_items(
        self, cart_id: str, token: str | None, deltas: dict[str, int]
    ) -> dict[str, Any]:
        invalid = sorted(
            name
            for name, delta in deltas.items()
            if name not in self.menu or isinstance(delta, bool) or not isinstance(delta, int)
        )
        if not deltas or invalid:
            raise BadRequest("Required field is missing or invalid", invalid=invalid)

        cart = await load_owned(self.store, self.tokens, CARTS, cart_id, token, "Cart")
        apply_deltas(cart, deltas, self.menu)
        await self.store.update(CARTS, cart_id, cart)
        return cart
