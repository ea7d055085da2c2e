"""Pydantic schemas for carts and the line items shared with orders."""

from __future__ import annotations

from pydantic import StrictInt, field_validator

from pizzaportal.schemas.common import CamelModel, RequiredText, ResourceId


class LineItem(CamelModel):
    quantity: int
    amount: str


class CartCreate(CamelModel):
    email: RequiredText


class CartUpdate(CamelModel):
    id: ResourceId
    # menu item name -> signed quantity delta
    items: dict[str, StrictInt]

    @field_validator("items")
    @classmethod
    def _not_empty(cls, v: dict[str, int]) -> dict[str, int]:
        if not v:
            raise ValueError("At least one item must be given")
        return v


class CartRead(CamelModel):
    id: str
    email: str
    items: dict[str, LineItem] = {}
    total_amount: str
