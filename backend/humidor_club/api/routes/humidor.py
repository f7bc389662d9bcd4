"""
Humidor endpoints.

All endpoints require authentication and act on the current user's items.
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from humidor_club.api.deps import CurrentUser
from humidor_club.db.session import get_db
from humidor_club.schemas.humidor import (
    HumidorItemCreate,
    HumidorItemResponse,
    HumidorItemUpdate,
    HumidorResponse,
    MarketplaceAvailabilityUpdate,
    SmokeRequest,
    ToggleAction,
    ToggleResponse,
)
from humidor_club.services.humidor import HumidorLedger

router = APIRouter()


@router.get("", response_model=HumidorResponse)
async def get_humidor(
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    """The current user's items, newest first, with totals."""
    items, stats = await HumidorLedger(db).list_items(current_user.id)
    return HumidorResponse(
        items=[HumidorItemResponse.model_validate(item) for item in items],
        stats=stats,
    )


@router.post("", response_model=HumidorItemResponse, status_code=status.HTTP_201_CREATED)
async def add_to_humidor(
    body: HumidorItemCreate,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    """Add a cigar; every add creates a new item."""
    return await HumidorLedger(db).add_item(current_user.id, body)


@router.post("/smoke", response_model=HumidorItemResponse)
async def smoke_cigars(
    body: SmokeRequest,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    """Record smoking cigars from an item."""
    return await HumidorLedger(db).smoke(
        body.item_id,
        current_user.id,
        count=body.count,
        smoked_at=body.smoked_date,
    )


@router.post("/toggle", response_model=ToggleResponse)
async def toggle_humidor(
    current_user: CurrentUser,
    cigar_id: int = Query(...),
    db: AsyncSession = Depends(get_db),
):
    """Add a cigar if absent, otherwise remove its first item."""
    in_humidor, item = await HumidorLedger(db).toggle(current_user.id, cigar_id)
    return ToggleResponse(
        action=ToggleAction.ADDED if in_humidor else ToggleAction.REMOVED,
        in_humidor=in_humidor,
        item=HumidorItemResponse.model_validate(item) if item is not None else None,
    )


@router.patch("/{item_id}", response_model=HumidorItemResponse)
async def update_humidor_item(
    item_id: int,
    body: HumidorItemUpdate,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    return await HumidorLedger(db).update_item(item_id, current_user.id, body)


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_humidor_item(
    item_id: int,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    await HumidorLedger(db).remove_item(item_id, current_user.id)


@router.patch("/{item_id}/marketplace", response_model=HumidorItemResponse)
async def update_marketplace_availability(
    item_id: int,
    body: MarketplaceAvailabilityUpdate,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    """Set how many of an item are reserved for sale and for trade."""
    return await HumidorLedger(db).set_marketplace_availability(
        item_id,
        current_user.id,
        for_sale=body.available_for_sale,
        for_trade=body.available_for_trade,
    )
