"""Pydantic schemas for User CRUD."""

from __future__ import annotations

from pydantic import StrictBool, field_validator

from pizzaportal.schemas.common import CamelModel, OptionalText, RequiredText
from pizzaportal.store.base import SAFE_KEY_RE


class UserCreate(CamelModel):
    first_name: RequiredText
    last_name: RequiredText
    email: RequiredText
    street_address: RequiredText
    password: RequiredText
    tos_agreement: StrictBool

    @field_validator("email")
    @classmethod
    def _check_email(cls, v: str) -> str:
        # Identity key: kept case-sensitive as given, and must be storable as-is
        if "@" not in v or not SAFE_KEY_RE.match(v):
            raise ValueError("Invalid email address")
        return v

    @field_validator("tos_agreement")
    @classmethod
    def _must_agree(cls, v: bool) -> bool:
        if not v:
            raise ValueError("The terms of service must be accepted")
        return v


class UserUpdate(CamelModel):
    email: RequiredText
    first_name: OptionalText = None
    last_name: OptionalText = None
    street_address: OptionalText = None
    password: OptionalText = None

    def changes(self) -> dict[str, str]:
        """Supplied profile fields, keyed by their record names."""
        return self.model_dump(
            by_alias=True, exclude={"email"}, exclude_none=True
        )


class UserRead(CamelModel):
    first_name: str
    last_name: str
    email: str
    street_address: str
    tos_agreement: bool = True
    cart_id: str | None = None
    orders: list[str] = []
