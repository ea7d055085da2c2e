"""Pydantic schemas for bearer tokens."""

from __future__ import annotations

from pydantic import BaseModel, StrictBool, field_validator

from pizzaportal.schemas.common import RequiredText, ResourceId


class TokenCreate(BaseModel):
    email: RequiredText
    password: RequiredText


class TokenRead(BaseModel):
    id: str
    email: str
    expires: int


class TokenExtend(BaseModel):
    id: ResourceId
    extend: StrictBool

    @field_validator("extend")
    @classmethod
    def _must_extend(cls, v: bool) -> bool:
        if not v:
            raise ValueError("extend must be true")
        return v
