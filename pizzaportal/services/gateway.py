"""
Outbound payment (Stripe charges) and email (Mailgun messages) adapters.

Both talk form-encoded HTTP through httpx. Connection failures are retried
with tenacity since nothing reached the provider; HTTP error responses are
reported as ``GatewayError`` and never retried.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Protocol

import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from pizzaportal.core.config import Settings, settings
from pizzaportal.services.money import to_cents

logger = logging.getLogger(__name__)

FAILURE_TEST = "failure_test"

# Stripe test card numbers and the sources they charge.
TEST_CARD_SOURCES: dict[str, str] = {
    "4242424242424242": "tok_visa",
    "4000056655665556": "tok_visa_debit",
    "5555555555554444": "tok_mastercard",
    "5200828282828210": "tok_mastercard_debit",
    "5105105105105100": "tok_mastercard_prepaid",
    "378282246310005": "tok_amex",
    "371449635398431": "tok_amex",
    "6011111111111117": "tok_discover",
    # 0909090909090909: always declines without reaching the provider
    "909090909090909": FAILURE_TEST,
}


def card_source(card_number: str) -> str | None:
    """Map a card number (leading zeros ignored) to its charge source."""
    digits = card_number.strip()
    if digits.isdigit():
        digits = str(int(digits))
    return TEST_CARD_SOURCES.get(digits)


class GatewayError(Exception):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class PaymentGateway(Protocol):
    async def charge(self, source: str, amount: Decimal, email: str) -> None: ...


class Notifier(Protocol):
    async def send_email(self, recipient: str, body: str) -> None: ...


def gateway_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(max(1, settings.GATEWAY_CONNECT_RETRIES)),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
        retry=retry_if_exception_type(httpx.ConnectError),
    )


class _FormClient:
    """POSTs a form to one provider endpoint and checks the status."""

    provider = "provider"

    def __init__(
        self,
        base_url: str,
        auth: tuple[str, str],
        timeout: float,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.auth = auth
        self.timeout = timeout
        self.transport = transport

    @gateway_retry()
    async def _send(self, path: str, data: dict[str, str]) -> httpx.Response:
        async with httpx.AsyncClient(
            base_url=self.base_url,
            auth=self.auth,
            timeout=self.timeout,
            transport=self.transport,
        ) as client:
            return await client.post(path, data=data)

    async def _post(self, path: str, data: dict[str, str], failure: str) -> None:
        logger.info("%s POST %s", self.provider, path)
        try:
            resp = await self._send(path, data)
        except httpx.HTTPError as exc:
            logger.error("%s request failed: %s", self.provider, exc)
            raise GatewayError(f"{failure}, provider unreachable") from exc

        if resp.status_code not in (200, 201):
            logger.warning(
                "%s responded %s: %s", self.provider, resp.status_code, resp.text[:200]
            )
            raise GatewayError(
                f"{failure}, status code: {resp.status_code}", resp.status_code
            )


class StripePayments(_FormClient):
    provider = "Stripe"

    def __init__(self, config: Settings, transport: httpx.AsyncBaseTransport | None = None) -> None:
        super().__init__(
            config.STRIPE_API_BASE,
            (config.STRIPE_API_KEY, ""),
            config.GATEWAY_TIMEOUT_SECONDS,
            transport,
        )
        self.currency = config.STRIPE_CURRENCY

    async def charge(self, source: str, amount: Decimal, email: str) -> None:
        await self._post(
            "/v1/charges",
            {
                "amount": str(to_cents(amount)),
                "currency": self.currency,
                "source": source,
                "receipt_email": email,
            },
            "Could not process payment",
        )


class MailgunNotifier(_FormClient):
    provider = "Mailgun"

    def __init__(self, config: Settings, transport: httpx.AsyncBaseTransport | None = None) -> None:
        super().__init__(
            config.MAILGUN_API_BASE,
            ("api", config.MAILGUN_API_KEY),
            config.GATEWAY_TIMEOUT_SECONDS,
            transport,
        )
        self.domain = config.MAILGUN_DOMAIN
        self.sender = config.MAILGUN_FROM
        self.subject = config.CONFIRMATION_SUBJECT

    async def send_email(self, recipient: str, body: str) -> None:
        await self._post(
            f"/v3/{self.domain}/messages",
            {
                "from": self.sender,
                "to": recipient,
                "subject": self.subject,
                "text": body,
            },
            "Could not send email",
        )
