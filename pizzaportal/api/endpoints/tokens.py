"""
Token endpoints — login, lookup, extension and logout.
"""

from fastapi import APIRouter, Depends, Query, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from pizzaportal.api.deps import get_token_service
from pizzaportal.core.config import settings
from pizzaportal.core.security import ID_LENGTH
from pizzaportal.schemas.common import DeleteResponse
from pizzaportal.schemas.token import TokenCreate, TokenExtend, TokenRead
from pizzaportal.services.tokens import TokenService

# Login attempts are limited per client IP
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)

router = APIRouter(prefix="/tokens", tags=["tokens"])


@router.post("", response_model=TokenRead, status_code=201)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    body: TokenCreate,
    tokens: TokenService = Depends(get_token_service),
) -> dict:
    """Exchange email + password for a bearer token valid for one hour."""
    return await tokens.issue(body.email, body.password)


@router.get("", response_model=TokenRead)
async def read_token(
    id: str = Query(..., min_length=ID_LENGTH, max_length=ID_LENGTH),
    tokens: TokenService = Depends(get_token_service),
) -> dict:
    return await tokens.get(id)


@router.put("", response_model=TokenRead)
async def extend_token(
    body: TokenExtend,
    tokens: TokenService = Depends(get_token_service),
) -> dict:
    """Push the expiry one hour forward. Expired tokens cannot be revived."""
    return await tokens.extend(body.id)


@router.delete("", response_model=DeleteResponse)
async def logout(
    id: str = Query(..., min_length=ID_LENGTH, max_length=ID_LENGTH),
    tokens: TokenService = Depends(get_token_service),
) -> DeleteResponse:
    await tokens.revoke(id)
    return DeleteResponse(success=True, message="Logged out")
