"""
Cart endpoints. Every call is checked against the cart owner's token.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from pizzaportal.api.deps import get_cart_service, get_token
from pizzaportal.core.security import ID_LENGTH
from pizzaportal.schemas.cart import CartCreate, CartRead, CartUpdate
from pizzaportal.services.carts import CartService

router = APIRouter(prefix="/carts", tags=["carts"])


@router.post("", response_model=CartRead, status_code=201)
async def create_cart(
    body: CartCreate,
    token: str | None = Depends(get_token),
    carts: CartService = Depends(get_cart_service),
) -> dict:
    """Create the user's cart. A user can only have one."""
    return await carts.create(body.email, token)


@router.get("", response_model=CartRead)
async def read_cart(
    id: str = Query(..., min_length=ID_LENGTH, max_length=ID_LENGTH),
    token: str | None = Depends(get_token),
    carts: CartService = Depends(get_cart_service),
) -> dict:
    return await carts.get(id, token)


@router.put("", response_model=CartRead)
async def update_cart_items(
    body: CartUpdate,
    token: str | None = Depends(get_token),
    carts: CartService = Depends(get_cart_service),
) -> dict:
    """Add or remove menu items: ``{"items": {"Margherita": 2, "Soda": -1}}``."""
    return await carts.update_items(body.id, token, body.items)
