"""Tests for the Stripe and Mailgun adapters against a mocked transport."""

import base64
from decimal import Decimal
from urllib.parse import parse_qs

import httpx
import pytest

from pizzaportal.core.config import Settings
from pizzaportal.services.gateway import FAILURE_TEST, GatewayError, MailgunNotifier, StripePayments, card_source

CONFIG = Settings(
    STRIPE_API_KEY="sk_test_key",
    STRIPE_CURRENCY="usd",
    STRIPE_API_BASE="https://stripe.test",
    MAILGUN_API_KEY="mg_test_key",
    MAILGUN_DOMAIN="mg.example.com",
    MAILGUN_FROM="orders@example.com",
    MAILGUN_API_BASE="https://mailgun.test",
    CONFIRMATION_SUBJECT="Your order is confirmed!",
)


class Recorder:
    """httpx.MockTransport handler that records requests."""

    def __init__(self, status_code: int = 200) -> None:
        self.status_code = status_code
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json={"id": "obj_1"})

    def form(self, index: int = 0) -> dict[str, str]:
        parsed = parse_qs(self.requests[index].content.decode())
        return {k: v[0] for k, v in parsed.items()}


def _basic(user: str, password: str) -> str:
    return "Basic " + base64.b64encode(f"{user}:{password}".encode()).decode()


# ── Card numbers ────────────────────────────────────────────────────
@pytest.mark.parametrize(
    "number, expected",
    [
        ("4242424242424242", "tok_visa"),
        ("5555555555554444", "tok_mastercard"),
        ("378282246310005", "tok_amex"),
        ("0909090909090909", FAILURE_TEST),
        ("909090909090909", FAILURE_TEST),
        ("1111111111111111", None),
        ("", None),
    ],
)
def test_card_source(number: str, expected):
    assert card_source(number) == expected


# ── Stripe ──────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_stripe_charge_request():
    """Amounts go out in cents with the test-card source and receipt email."""
    recorder = Recorder()
    stripe = StripePayments(CONFIG, transport=httpx.MockTransport(recorder))
    await stripe.charge("tok_visa", Decimal("22.50"), "a@x.com")

    request = recorder.requests[0]
    assert request.method == "POST"
    assert str(request.url) == "https://stripe.test/v1/charges"
    assert request.headers["Authorization"] == _basic("sk_test_key", "")
    assert recorder.form() == {
        "amount": "2250",
        "currency": "usd",
        "source": "tok_visa",
        "receipt_email": "a@x.com",
    }


@pytest.mark.asyncio
async def test_stripe_decline_raises():
    recorder = Recorder(status_code=402)
    stripe = StripePayments(CONFIG, transport=httpx.MockTransport(recorder))
    with pytest.raises(GatewayError) as exc_info:
        await stripe.charge("tok_visa", Decimal("10"), "a@x.com")
    assert exc_info.value.status_code == 402
    assert "status code: 402" in str(exc_info.value)


@pytest.mark.asyncio
async def test_stripe_unreachable_raises():
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    stripe = StripePayments(CONFIG, transport=httpx.MockTransport(refuse))
    with pytest.raises(GatewayError) as exc_info:
        await stripe.charge("tok_visa", Decimal("10"), "a@x.com")
    assert exc_info.value.status_code is None


# ── Mailgun ─────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_mailgun_send_request():
    recorder = Recorder()
    mailgun = MailgunNotifier(CONFIG, transport=httpx.MockTransport(recorder))
    await mailgun.send_email("a@x.com", "Order summary")

    request = recorder.requests[0]
    assert str(request.url) == "https://mailgun.test/v3/mg.example.com/messages"
    assert request.headers["Authorization"] == _basic("api", "mg_test_key")
    assert recorder.form() == {
        "from": "orders@example.com",
        "to": "a@x.com",
        "subject": "Your order is confirmed!",
        "text": "Order summary",
    }


@pytest.mark.asyncio
async def test_mailgun_error_raises():
    recorder = Recorder(status_code=500)
    mailgun = MailgunNotifier(CONFIG, transport=httpx.MockTransport(recorder))
    with pytest.raises(GatewayError) as exc_info:
        await mailgun.send_email("a@x.com", "hi")
    assert exc_info.value.status_code == 500
