"""Menu endpoint — read only, any valid token."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from pizzaportal.api.deps import get_menu_service, get_token
from pizzaportal.services.menu import MenuService

router = APIRouter(prefix="/menu", tags=["menu"])


@router.get("", response_model=dict[str, str])
async def read_menu(
    token: str | None = Depends(get_token),
    menu: MenuService = Depends(get_menu_service),
) -> dict[str, str]:
    return await menu.get(token)
