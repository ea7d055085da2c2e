"""
User account endpoints.

- POST registers a new account (no token).
- GET / PUT / DELETE require a token bound to the account's email.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from pizzaportal.api.deps import get_token, get_user_service
from pizzaportal.schemas.common import DeleteResponse
from pizzaportal.schemas.user import UserCreate, UserRead, UserUpdate
from pizzaportal.services.users import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=UserRead, status_code=201)
async def register_user(
    body: UserCreate,
    users: UserService = Depends(get_user_service),
) -> dict:
    """Create an account. The terms of service must be accepted."""
    return await users.register(body)


@router.get("", response_model=UserRead)
async def read_user(
    email: str = Query(..., min_length=1),
    token: str | None = Depends(get_token),
    users: UserService = Depends(get_user_service),
) -> dict:
    return await users.get(email.strip(), token)


@router.put("", response_model=UserRead)
async def update_user(
    body: UserUpdate,
    token: str | None = Depends(get_token),
    users: UserService = Depends(get_user_service),
) -> dict:
    """Change any of firstName, lastName, streetAddress, password."""
    return await users.update(body, token)


@router.delete("", response_model=DeleteResponse)
async def delete_user(
    email: str = Query(..., min_length=1),
    token: str | None = Depends(get_token),
    users: UserService = Depends(get_user_service),
) -> DeleteResponse:
    """Delete the account together with its cart and orders."""
    await users.delete(email.strip(), token)
    return DeleteResponse(success=True, message="User deleted")
