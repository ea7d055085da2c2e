"""
Password hashing (passlib), random record ids and token expiry clock.
"""

from __future__ import annotations

import secrets
import string
import time

from passlib.context import CryptContext

from pizzaportal.core.config import settings
from pizzaportal.core.exceptions import HashingFailed

# pbkdf2_sha256 is salted and ships with passlib itself (no native backend).
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

ID_LENGTH = 20
_ID_ALPHABET = string.ascii_lowercase + string.digits


# ── Passwords ───────────────────────────────────────────────────────
def verify_password(plain: str, hashed: str | None) -> bool:
    if not hashed:
        return False
    try:
        return pwd_context.verify(plain, hashed)
    except (ValueError, TypeError):
        # Unrecognised or corrupt stored hash
        return False


def get_password_hash(plain: str) -> str:
    try:
        hashed = pwd_context.hash(plain)
    except (ValueError, TypeError) as exc:
        raise HashingFailed() from exc
    if not hashed:
        raise HashingFailed()
    return hashed


# ── Ids & time ──────────────────────────────────────────────────────
def create_random_id(length: int = ID_LENGTH) -> str:
    """Opaque id used for tokens, carts and orders."""
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(length))


def now_ms() -> int:
    return int(time.time() * 1000)


def token_expiry(start_ms: int | None = None) -> int:
    start = now_ms() if start_ms is None else start_ms
    return start + settings.TOKEN_TTL_SECONDS * 1000
