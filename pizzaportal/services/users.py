"""
User accounts — registration, profile reads / edits and cascading delete.

The stored password hash never leaves this module.
"""

from __future__ import annotations

import logging
from typing import Any

from pizzaportal.core.exceptions import BadRequest, Conflict, InternalError, NotFound, RecordExists, RecordNotFound, StoreError
from pizzaportal.core.security import get_password_hash
from pizzaportal.schemas.user import UserCreate, UserUpdate
from pizzaportal.services.tokens import TokenService
from pizzaportal.store.base import CARTS, ORDERS, USERS, RecordStore

logger = logging.getLogger(__name__)


def public_view(user: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in user.items() if k != "hashedPassword"}


class UserService:
    def __init__(self, store: RecordStore, tokens: TokenService) -> None:
        self.store = store
        self.tokens = tokens

    async def register(self, body: UserCreate) -> dict[str, Any]:
        try:
            await self.store.read(USERS, body.email)
        except RecordNotFound:
            pass
        else:
            raise Conflict("A user with that email already exists")

        user = {
            "firstName": body.first_name,
            "lastName": body.last_name,
            "email": body.email,
            "streetAddress": body.street_address,
            "hashedPassword": get_password_hash(body.password),
            "tosAgreement": True,
            "cartId": None,
            "orders": [],
        }
        try:
            await self.store.create(USERS, body.email, user)
        except RecordExists:
            raise Conflict("A user with that email already exists") from None

        logger.info("Registered user %s", body.email)
        return public_view(user)

    async def get(self, email: str, token: str | None) -> dict[str, Any]:
        await self.tokens.validate(token, email)
        try:
            user = await self.store.read(USERS, email)
        except RecordNotFound:
            raise NotFound("User not found") from None
        return public_view(user)

    async def update(self, body: UserUpdate, token: str | None) -> dict[str, Any]:
        changes = body.changes()
        if not changes:
            raise BadRequest("Missing field to update")

        await self.tokens.validate(token, body.email)
        try:
            user = await self.store.read(USERS, body.email)
        except RecordNotFound:
            raise BadRequest("The specified user does not exist") from None

        password = changes.pop("password", None)
        if password is not None:
            user["hashedPassword"] = get_password_hash(password)
        user.update(changes)

        await self.store.update(USERS, body.email, user)
        logger.info("Updated user %s", body.email)
        return public_view(user)

    async def delete(self, email: str, token: str | None) -> None:
        """Delete the user, its cart and its orders, all or nothing."""
        await self.tokens.validate(token, email)
        try:
            user = await self.store.read(USERS, email)
        except RecordNotFound:
            raise BadRequest("Could not find the specified user") from None

        # Snapshot everything first so a failed step can be undone
        owned: list[tuple[str, str, dict[str, Any]]] = []
        refs = [(CARTS, user["cartId"])] if user.get("cartId") else []
        refs += [(ORDERS, order_id) for order_id in user.get("orders") or []]
        for collection, key in refs:
            try:
                owned.append((collection, key, await self.store.read(collection, key)))
            except RecordNotFound:
                logger.warning("User %s references missing %s/%s", email, collection, key)

        deleted: list[tuple[str, str, dict[str, Any]]] = []
        try:
            for collection, key, record in owned:
                await self.store.delete(collection, key)
                deleted.append((collection, key, record))
            await self.store.delete(USERS, email)
        except StoreError as exc:
            await self._restore(deleted)
            raise InternalError(f"Could not delete user {email}: {exc}") from exc

        logger.info("Deleted user %s with %d owned records", email, len(owned))

    async def _restore(self, deleted: list[tuple[str, str, dict[str, Any]]]) -> None:
        for collection, key, record in reversed(deleted):
            try:
                await self.store.create(collection, key, record)
            except StoreError:
                logger.exception("Could not restore %s/%s after failed delete", collection, key)
