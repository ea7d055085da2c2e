"""
Record store contract — key-value persistence per collection.

Every backend gives exclusive-create, replace-on-update semantics and is
atomic per key only. Dependent writes across keys are not transactional.
"""

from __future__ import annotations

import abc
import re
from typing import Any

USERS = "users"
TOKENS = "tokens"
CARTS = "carts"
ORDERS = "orders"
MENU = "menu"

COLLECTIONS = (USERS, TOKENS, CARTS, ORDERS, MENU)

# Keys every backend can store; user emails are checked against it up front
SAFE_KEY_RE = re.compile(r"^[A-Za-z0-9@_+-][A-Za-z0-9@._+-]{0,319}$")

Record = dict[str, Any]


class RecordStore(abc.ABC):
    """Async key-value store. Raises ``RecordExists`` / ``RecordNotFound``."""

    @abc.abstractmethod
    async def create(self, collection: str, key: str, record: Record) -> None: ...

    @abc.abstractmethod
    async def read(self, collection: str, key: str) -> Record: ...

    @abc.abstractmethod
    async def update(self, collection: str, key: str, record: Record) -> None: ...

    @abc.abstractmethod
    async def delete(self, collection: str, key: str) -> None: ...

    @abc.abstractmethod
    async def list(self, collection: str) -> list[str]: ...

    async def init(self) -> None:
        """Prepare backing storage (directories, tables)."""

    async def close(self) -> None:
        """Release backend resources."""
