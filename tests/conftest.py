"""
Shared test fixtures for the PizzaPortal test suite.

Every API test runs against both record store backends (JSON files and
async SQLAlchemy on in-memory SQLite), with fake payment / email gateways.
"""

import os
import sys
from decimal import Decimal
from typing import AsyncGenerator

import pytest

# Ensure project root is importable
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Override environment BEFORE importing application modules
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["CORS_ORIGINS"] = '["*"]'
os.environ["STRIPE_API_KEY"] = "sk_test_key"
os.environ["MAILGUN_API_KEY"] = "mg_test_key"
os.environ["MAILGUN_DOMAIN"] = "mg.example.com"
os.environ["MAILGUN_FROM"] = "orders@example.com"
os.environ["GATEWAY_CONNECT_RETRIES"] = "1"

from httpx import ASGITransport, AsyncClient

from pizzaportal.db.session import build_engine
from pizzaportal.main import app
from pizzaportal.services.gateway import GatewayError
from pizzaportal.services.menu import Menu
from pizzaportal.services.tokens import TokenService
from pizzaportal.store.base import RecordStore
from pizzaportal.store.file import FileRecordStore
from pizzaportal.store.sql import SqlRecordStore

PASSWORD = "pw1"


# ── Fake gateways ───────────────────────────────────────────────────
class FakePayments:
    def __init__(self) -> None:
        self.calls: list[tuple[str, Decimal, str]] = []
        self.fail = False

    async def charge(self, source: str, amount: Decimal, email: str) -> None:
        self.calls.append((source, amount, email))
        if self.fail:
            raise GatewayError("Could not process payment, status code: 402", 402)


class FakeNotifier:
    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []
        self.fail = False

    async def send_email(self, recipient: str, body: str) -> None:
        if self.fail:
            raise GatewayError("Could not send email, status code: 500", 500)
        self.sent.append((recipient, body))


# ── Store & app state ───────────────────────────────────────────────
@pytest.fixture(params=["file", "sql"])
async def store(request, tmp_path) -> AsyncGenerator[RecordStore, None]:
    if request.param == "file":
        backend: RecordStore = FileRecordStore(tmp_path / "data")
    else:
        backend = SqlRecordStore(build_engine("sqlite+aiosqlite:///:memory:"))
    await backend.init()
    yield backend
    await backend.close()


@pytest.fixture
def menu() -> Menu:
    return Menu({"Pizza": "$10", "Soda": "$2.50", "Calzone": "$14"})


@pytest.fixture
def payments() -> FakePayments:
    return FakePayments()


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def tokens(store) -> TokenService:
    return TokenService(store)


@pytest.fixture
async def async_client(store, menu, payments, notifier) -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app."""
    app.state.store = store
    app.state.menu = menu
    app.state.payments = payments
    app.state.notifier = notifier
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# ── Accounts ────────────────────────────────────────────────────────
def make_user_payload(email: str = "a@x.com", **overrides) -> dict:
    payload = {
        "firstName": "Ada",
        "lastName": "Lovelace",
        "email": email,
        "streetAddress": "1 Analytical Way",
        "password": PASSWORD,
        "tosAgreement": True,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def user_payload():
    """Factory for a valid registration body."""
    return make_user_payload


@pytest.fixture
def signup(async_client: AsyncClient):
    """Register + log in. Returns the email, token id and auth headers."""

    async def _signup(email: str = "a@x.com") -> dict:
        resp = await async_client.post("/api/users", json=make_user_payload(email))
        assert resp.status_code == 201, resp.text
        resp = await async_client.post(
            "/api/tokens", json={"email": email, "password": PASSWORD}
        )
        assert resp.status_code == 201, resp.text
        token = resp.json()["id"]
        return {"email": email, "token": token, "headers": {"token": token}}

    return _signup


@pytest.fixture
async def customer(signup) -> dict:
    return await signup()


@pytest.fixture
async def cart_id(async_client: AsyncClient, customer: dict) -> str:
    resp = await async_client.post(
        "/api/carts", json={"email": customer["email"]}, headers=customer["headers"]
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["id"]


@pytest.fixture
def fill_cart(async_client: AsyncClient, customer: dict, cart_id: str):
    """Apply item deltas to the customer's cart and return the cart body."""

    async def _fill(items: dict) -> dict:
        resp = await async_client.put(
            "/api/carts", json={"id": cart_id, "items": items}, headers=customer["headers"]
        )
        assert resp.status_code == 200, resp.text
        return resp.json()

    return _fill
