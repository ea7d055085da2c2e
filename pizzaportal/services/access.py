"""Resource-ownership check shared by the cart and order services."""

from __future__ import annotations

from typing import Any

from pizzaportal.core.exceptions import InvalidToken, NotFound, RecordNotFound
from pizzaportal.services.tokens import TokenService
from pizzaportal.store.base import RecordStore


async def load_owned(
    store: RecordStore,
    tokens: TokenService,
    collection: str,
    key: str,
    token: str | None,
    label: str,
) -> dict[str, Any]:
    """Fetch a record and require *token* to be bound to its owner's email."""
    try:
        record = await store.read(collection, key)
    except RecordNotFound:
        raise NotFound(f"{label} not found") from None

    owner = record.get("email")
    if not owner:
        raise InvalidToken()
    await tokens.validate(token, owner)
    return record
