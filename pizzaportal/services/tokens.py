"""
Bearer token service — login, validation, extension and logout.

Tokens are opaque random ids stored in the ``tokens`` collection with the
email they are bound to and an absolute expiry in epoch milliseconds.
"""

from __future__ import annotations

import logging
from typing import Any

from pizzaportal.core.exceptions import InvalidCredentials, InvalidToken, NotFound, RecordNotFound, TokenExpired
from pizzaportal.core.security import create_random_id, now_ms, token_expiry, verify_password
from pizzaportal.store.base import TOKENS, USERS, RecordStore

logger = logging.getLogger(__name__)


class TokenService:
    def __init__(self, store: RecordStore) -> None:
        self.store = store

    async def issue(self, email: str, password: str) -> dict[str, Any]:
        try:
            user = await self.store.read(USERS, email)
        except RecordNotFound:
            raise NotFound("User not found") from None

        if not verify_password(password, user.get("hashedPassword")):
            raise InvalidCredentials()

        token = {
            "id": create_random_id(),
            "email": email,
            "expires": token_expiry(),
        }
        await self.store.create(TOKENS, token["id"], token)
        logger.info("Token issued for %s", email)
        return token

    async def get(self, token_id: str) -> dict[str, Any]:
        try:
            return await self.store.read(TOKENS, token_id)
        except RecordNotFound:
            raise NotFound("Token not found") from None

    async def validate(
        self, token_id: str | None, email: str | None = None
    ) -> dict[str, Any]:
        """Return the token if it is live (and bound to *email*, when given)."""
        if not token_id:
            raise InvalidToken()
        try:
            token = await self.store.read(TOKENS, token_id)
        except RecordNotFound:
            raise InvalidToken() from None

        if token.get("expires", 0) <= now_ms():
            raise InvalidToken()
        if email is not None and token.get("email") != email:
            raise InvalidToken()
        return token

    async def extend(self, token_id: str) -> dict[str, Any]:
        try:
            token = await self.store.read(TOKENS, token_id)
        except RecordNotFound:
            raise NotFound("Specified token does not exist") from None

        if token.get("expires", 0) <= now_ms():
            raise TokenExpired()

        token["expires"] = token_expiry()
        await self.store.update(TOKENS, token_id, token)
        return token

    async def revoke(self, token_id: str) -> None:
        try:
            await self.store.delete(TOKENS, token_id)
        except RecordNotFound:
            raise NotFound("Could not find the specified token") from None
        logger.info("Token %s… revoked", token_id[:4])
