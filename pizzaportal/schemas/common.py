"""Shared pydantic building blocks for request / response schemas."""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, BeforeValidator, ConfigDict, StringConstraints
from pydantic.alias_generators import to_camel

from pizzaportal.core.security import ID_LENGTH

# Token, cart and order ids
ResourceId = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=ID_LENGTH, max_length=ID_LENGTH),
]

RequiredText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class CamelModel(BaseModel):
    """Fields are snake_case in Python and camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _blank_to_none(v: object) -> object:
    if isinstance(v, str):
        return v.strip() or None
    return v


# Optional text where an empty string means "not supplied"
OptionalText = Annotated[str | None, BeforeValidator(_blank_to_none)]


class DeleteResponse(BaseModel):
    success: bool
    message: str
