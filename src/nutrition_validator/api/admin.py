"""Admin API endpoints for the ingredient cache with simple token auth."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from pydantic import BaseModel

if TYPE_CHECKING:
    from nutrition_validator.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])


class ClearIngredientsRequest(BaseModel):
    """Names of cached ingredients to drop."""

    names: list[str]


def _get_admin_token(request: Request) -> str | None:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str | None = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not admin_token or not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.delete("/ingredient-cache", dependencies=[Depends(require_admin)])
async def clear_ingredient_cache(request: Request) -> dict[str, int]:
    """Drop every cached ingredient so the next run re-fetches from FDC."""
    container: AppContainer = request.app.state.container
    return {"cleared": container.ingredient_resolver.clear_all()}


@router.post("/ingredient-cache/clear", dependencies=[Depends(require_admin)])
async def clear_named_ingredients(
    payload: ClearIngredientsRequest, request: Request
) -> dict[str, int]:
    """Drop the named cached ingredients."""
    container: AppContainer = request.app.state.container
    return {"cleared": container.ingredient_resolver.clear(payload.names)}
