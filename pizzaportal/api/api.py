"""
Mounts every resource router under one APIRouter.
"""

from fastapi import APIRouter

from pizzaportal.api.endpoints import carts, menu, orders, tokens, users

api_router = APIRouter()

api_router.include_router(users.router)
api_router.include_router(tokens.router)
api_router.include_router(menu.router)
api_router.include_router(carts.router)
api_router.include_router(orders.router)
