"""
Order endpoints — place from a cart, read, and retry / record payment.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from pizzaportal.api.deps import get_order_service, get_token
from pizzaportal.core.security import ID_LENGTH
from pizzaportal.schemas.order import OrderCreate, OrderPaymentUpdate, OrderPlaced, OrderRead
from pizzaportal.services.orders import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("", response_model=OrderPlaced, status_code=201)
async def place_order(
    body: OrderCreate,
    token: str | None = Depends(get_token),
    orders: OrderService = Depends(get_order_service),
) -> dict:
    """Turn the cart into an order, charge the card and email a confirmation.

    On a failed charge the order is kept as Unpaid and its id is returned
    alongside the error so payment can be retried with PUT.
    """
    return await orders.place(body.cart_id, body.card_number, token)


@router.get("", response_model=OrderRead)
async def read_order(
    id: str = Query(..., min_length=ID_LENGTH, max_length=ID_LENGTH),
    token: str | None = Depends(get_token),
    orders: OrderService = Depends(get_order_service),
) -> dict:
    return await orders.get(id, token)


@router.put("", response_model=OrderPlaced)
async def update_order_payment(
    body: OrderPaymentUpdate,
    token: str | None = Depends(get_token),
    orders: OrderService = Depends(get_order_service),
) -> dict:
    return await orders.update_payment(
        body.id, body.payment_status, body.card_number, token
    )
