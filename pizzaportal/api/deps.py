"""
FastAPI dependencies — bearer token extraction and service wiring.

Services are cheap to build: each request gets fresh instances around the
long-lived store, menu snapshot and gateways held on ``app.state``.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header, Request
from fastapi.security import OAuth2PasswordBearer

from pizzaportal.services.carts import CartService
from pizzaportal.services.gateway import Notifier, PaymentGateway
from pizzaportal.services.menu import Menu, MenuService
from pizzaportal.services.orders import OrderService
from pizzaportal.services.tokens import TokenService
from pizzaportal.services.users import UserService
from pizzaportal.store.base import RecordStore

# Optional: the plain ``token`` header is accepted as well
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/tokens", auto_error=False)


# ── App state ───────────────────────────────────────────────────────
def get_store(request: Request) -> RecordStore:
    return request.app.state.store


def get_menu(request: Request) -> Menu:
    return request.app.state.menu


def get_payments(request: Request) -> PaymentGateway:
    return request.app.state.payments


def get_notifier(request: Request) -> Notifier:
    return request.app.state.notifier


# ── Bearer token ────────────────────────────────────────────────────
async def get_token(
    token: Optional[str] = Header(default=None),
    bearer: Optional[str] = Depends(oauth2_scheme),
) -> str | None:
    """Token from the ``token`` header, else from ``Authorization: Bearer``."""
    # Priority: token header > Authorization header
    return token or bearer or None


# ── Services ────────────────────────────────────────────────────────
def get_token_service(store: RecordStore = Depends(get_store)) -> TokenService:
    return TokenService(store)


def get_user_service(
    store: RecordStore = Depends(get_store),
    tokens: TokenService = Depends(get_token_service),
) -> UserService:
    return UserService(store, tokens)


def get_menu_service(
    menu: Menu = Depends(get_menu),
    tokens: TokenService = Depends(get_token_service),
) -> MenuService:
    return MenuService(menu, tokens)


def get_cart_service(
    store: RecordStore = Depends(get_store),
    tokens: TokenService = Depends(get_token_service),
    menu: Menu = Depends(get_menu),
) -> CartService:
    return CartService(store, tokens, menu)


def get_order_service(
    store: RecordStore = Depends(get_store),
    tokens: TokenService = Depends(get_token_service),
    payments: PaymentGateway = Depends(get_payments),
    notifier: Notifier = Depends(get_notifier),
) -> OrderService:
    return OrderService(store, tokens, payments, notifier)
