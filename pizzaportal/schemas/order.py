"""Pydantic schemas for orders and payment updates."""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BeforeValidator

from pizzaportal.schemas.cart import LineItem
from pizzaportal.schemas.common import CamelModel, ResourceId

PAID = "Paid"
UNPAID = "Unpaid"

PaymentStatus = Literal["Unpaid", "Paid"]


def _normalise_card(v: object) -> str:
    if isinstance(v, bool) or not isinstance(v, (int, str)):
        raise ValueError("Card number must be numeric")
    digits = str(v).replace(" ", "").replace("-", "")
    if not digits.isdigit():
        raise ValueError("Card number must be numeric")
    # Leading zeros are not significant
    return str(int(digits))


CardNumber = Annotated[str, BeforeValidator(_normalise_card)]


class OrderCreate(CamelModel):
    cart_id: ResourceId
    card_number: CardNumber


class OrderPaymentUpdate(CamelModel):
    id: ResourceId
    payment_status: PaymentStatus
    card_number: CardNumber


class OrderRead(CamelModel):
    id: str
    recipient: str
    street_address: str
    email: str
    order_items: dict[str, LineItem]
    total_amount: str
    order_placed_at: int
    payment_status: PaymentStatus


class OrderPlaced(OrderRead):
    email_sent: bool
