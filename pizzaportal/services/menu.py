"""
Menu snapshot and the read-only menu service.

The menu is read from the store once at startup and never changes for the
life of the process; services receive the snapshot at construction time.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from decimal import Decimal
from types import MappingProxyType

from pizzaportal.core.exceptions import RecordNotFound
from pizzaportal.services.money import parse_amount
from pizzaportal.services.tokens import TokenService
from pizzaportal.store.base import MENU, RecordStore

logger = logging.getLogger(__name__)

MENU_KEY = "menu"


class Menu(Mapping[str, str]):
    """Immutable mapping of item name to its price label."""

    def __init__(self, prices: Mapping[str, str]) -> None:
        self._labels = MappingProxyType(dict(prices))
        self._prices = MappingProxyType(
            {name: parse_amount(label) for name, label in prices.items()}
        )

    def __getitem__(self, name: str) -> str:
        return self._labels[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._labels)

    def __len__(self) -> int:
        return len(self._labels)

    def price(self, name: str) -> Decimal:
        return self._prices[name]

    def as_dict(self) -> dict[str, str]:
        return dict(self._labels)


async def load_menu(store: RecordStore, default: Mapping[str, str]) -> Menu:
    """Read the menu record, seeding it from *default* when absent."""
    try:
        record = await store.read(MENU, MENU_KEY)
    except RecordNotFound:
        record = dict(default)
        await store.create(MENU, MENU_KEY, record)
        logger.info("Seeded menu with %d default items", len(record))
    menu = Menu(record)
    logger.info("Menu loaded: %d items", len(menu))
    return menu


class MenuService:
    def __init__(self, menu: Menu, tokens: TokenService) -> None:
        self.menu = menu
        self.tokens = tokens

    async def get(self, token: str | None) -> dict[str, str]:
        """Any valid token may read the menu."""
        await self.tokens.validate(token)
        return self.menu.as_dict()
