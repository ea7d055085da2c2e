"""
PizzaPortal settings. Every field can be set from an environment variable
of the same name or from a `.env` file in the working directory.
"""

from __future__ import annotations

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── Project ──────────────────────────────────────────────────────
    PROJECT_NAME: str = "PizzaPortal"
    VERSION: str = "1.0.0"
    ENV_NAME: str = "staging"
    API_PREFIX: str = "/api"

    # ── Server ───────────────────────────────────────────────────────
    HTTP_HOST: str = "0.0.0.0"
    HTTP_PORT: int = 3000
    HTTPS_KEY_FILE: str | None = None
    HTTPS_CERT_FILE: str | None = None

    # ── Record store ─────────────────────────────────────────────────
    STORE_BACKEND: str = "file"  # file | sql
    DATA_DIR: str = ".data"
    DATABASE_URL: str = "sqlite+aiosqlite:///./pizzaportal.db"

    @field_validator("STORE_BACKEND")
    @classmethod
    def _validate_backend(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in {"file", "sql"}:
            raise ValueError("STORE_BACKEND must be 'file' or 'sql'")
        return v

    # ── Tokens ───────────────────────────────────────────────────────
    TOKEN_TTL_SECONDS: int = 60 * 60

    # ── Menu (seeded into the store when no menu record exists) ─────
    DEFAULT_MENU: dict[str, str] = {
        "Margherita": "$10",
        "Pepperoni": "$12",
        "Quattro Formaggi": "$13",
        "Calzone": "$14",
        "Soda": "$2",
    }

    # ── Payments (Stripe) ────────────────────────────────────────────
    STRIPE_API_KEY: str = ""
    STRIPE_CURRENCY: str = "usd"
    STRIPE_API_BASE: str = "https://api.stripe.com"

    # ── Email (Mailgun) ──────────────────────────────────────────────
    MAILGUN_API_KEY: str = ""
    MAILGUN_DOMAIN: str = ""
    MAILGUN_FROM: str = ""
    MAILGUN_API_BASE: str = "https://api.mailgun.net"
    CONFIRMATION_SUBJECT: str = "Your order is confirmed!"

    GATEWAY_TIMEOUT_SECONDS: float = 10.0
    GATEWAY_CONNECT_RETRIES: int = 3

    # ── Templates ────────────────────────────────────────────────────
    TEMPLATE_GLOBALS: dict[str, str] = {
        "appName": "PizzaPortal",
        "companyName": "Papa's Pizza Palace",
        "yearCreated": "2018",
        "baseUrl": "http://localhost:3000/",
    }

    # ── CORS ─────────────────────────────────────────────────────────
    CORS_ORIGINS: list[str] = [
        "http://localhost",
        "http://localhost:3000",
        "http://127.0.0.1",
        "http://127.0.0.1:3000",
    ]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def _parse_cors(cls, v: object) -> list[str]:
        if isinstance(v, str):
            return [o.strip() for o in v.split(",") if o.strip()]
        return v  # type: ignore[return-value]

    # ── Rate limiting ────────────────────────────────────────────────
    RATE_LIMIT_ENABLED: bool = True
    LOGIN_RATE_LIMIT: str = "5/minute"

    # ── Logging ──────────────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "ignore",
    }


settings = Settings()

if not settings.STRIPE_API_KEY or not settings.MAILGUN_API_KEY:
    import logging

    logging.getLogger("pizzaportal.core.config").warning(
        "Payment or email credentials are not configured; "
        "charges and confirmation emails will be rejected by the providers."
    )
