"""
Operator console — inspect users, menu and orders from a terminal.

Commands are looked up in an explicit table by the text before ``--``;
anything after ``--`` is the command's argument.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import shutil
import time
from collections.abc import Awaitable, Callable
from typing import TextIO

from pizzaportal.core.config import settings
from pizzaportal.core.exceptions import StoreError
from pizzaportal.core.security import now_ms
from pizzaportal.store.base import MENU, ORDERS, USERS, RecordStore
from pizzaportal.store.factory import build_store

logger = logging.getLogger(__name__)

DAY_MS = 24 * 60 * 60 * 1000

Handler = Callable[[str], Awaitable[None]]


class ExitConsole(Exception):
    pass


class Console:
    def __init__(self, store: RecordStore, out: TextIO | None = None) -> None:
        self.store = store
        self.out = out
        self.started = time.monotonic()
        self.commands: dict[str, tuple[Handler, str]] = {
            "man": (self.help, "Show this help page"),
            "help": (self.help, "Alias of the 'man' command"),
            "exit": (self.exit, "Kill the console"),
            "stats": (self.stats, "Statistics on the host and this process"),
            "list users": (self.list_users, "Show all registered users"),
            "more user info": (self.user_info, "Show details of a user: more user info --{email}"),
            "list menu": (self.list_menu, "Show all items on the menu"),
            "list orders": (
                self.list_orders,
                "Orders placed in the last 24 hours; --all lists every order",
            ),
        }

    # ── Output ──────────────────────────────────────────────────────
    def echo(self, line: str = "") -> None:
        print(line, file=self.out)

    def rule(self) -> None:
        self.echo("-" * shutil.get_terminal_size((80, 20)).columns)

    # ── Dispatch ────────────────────────────────────────────────────
    async def dispatch(self, line: str) -> bool:
        """Run one input line. Returns False once the console should stop."""
        text = line.strip()
        if not text:
            return True

        head, _, arg = text.partition("--")
        head = " ".join(head.lower().split())
        for name, (handler, _) in self.commands.items():
            if head == name:
                try:
                    await handler(arg.strip())
                except ExitConsole:
                    return False
                except StoreError as exc:
                    self.echo(f"Caught an error: {exc}")
                return True

        self.echo("Sorry, try again")
        return True

    async def run(self) -> None:
        self.echo("The console is running")
        while True:
            try:
                line = await asyncio.to_thread(input, "> ")
            except EOFError:
                break
            if not await self.dispatch(line):
                break

    # ── Responders ──────────────────────────────────────────────────
    async def help(self, _arg: str) -> None:
        self.rule()
        self.echo("CONSOLE MANUAL".center(shutil.get_terminal_size((80, 20)).columns))
        self.rule()
        for name, (_, description) in self.commands.items():
            self.echo(f" {name:<40}{description}")
        self.rule()

    async def exit(self, _arg: str) -> None:
        raise ExitConsole()

    async def stats(self, _arg: str) -> None:
        stats = {
            "CPU Count": os.cpu_count(),
            "Uptime": f"{int(time.monotonic() - self.started)} Seconds",
            "Store Backend": settings.STORE_BACKEND,
        }
        if hasattr(os, "getloadavg"):
            stats["Load Average"] = " ".join(f"{v:.2f}" for v in os.getloadavg())
        for key, value in stats.items():
            self.echo(f" {key:<40}{value}")

    async def list_users(self, _arg: str) -> None:
        for email in sorted(await self.store.list(USERS)):
            user = await self.store.read(USERS, email)
            self.echo(
                f"Name: {user.get('firstName')} {user.get('lastName')}\t"
                f"E-mail: {user.get('email')}\t"
                f"Orders: {len(user.get('orders') or [])}"
            )

    async def user_info(self, email: str) -> None:
        if not email:
            self.echo("Usage: more user info --{email}")
            return
        user = await self.store.read(USERS, email)
        user.pop("hashedPassword", None)
        self.echo(json.dumps(user, indent=2))

    async def list_menu(self, _arg: str) -> None:
        for name, price in (await self.store.read(MENU, "menu")).items():
            self.echo(f"{name:<30}Price: {price}")

    async def list_orders(self, arg: str) -> None:
        everything = arg.lower() == "all"
        now = now_ms()
        for order_id in sorted(await self.store.list(ORDERS)):
            order = await self.store.read(ORDERS, order_id)
            if everything or now - order.get("orderPlacedAt", 0) <= DAY_MS:
                self.echo(json.dumps(order, indent=2))


async def _main() -> None:
    store = build_store(settings)
    await store.init()
    try:
        await Console(store).run()
    finally:
        await store.close()


def main() -> None:
    logging.basicConfig(level=logging.WARNING)
    asyncio.run(_main())


if __name__ == "__main__":
    main()
