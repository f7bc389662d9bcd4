"""
Marketplace listing endpoints.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from humidor_club.api.deps import CurrentUser
from humidor_club.db.session import get_db
from humidor_club.models.listing import ListingStatus, ListingType
from humidor_club.schemas.listing import (
    ListingCreate,
    ListingListResponse,
    ListingResponse,
    ListingUpdate,
)
from humidor_club.services.listings import ListingService

router = APIRouter()


@router.get("", response_model=ListingListResponse)
async def list_listings(
    type: Optional[ListingType] = None,
    status_filter: ListingStatus = Query(ListingStatus.ACTIVE, alias="status"),
    region: Optional[str] = Query(None, max_length=100),
    min_price: Optional[int] = Query(None, ge=0),
    max_price: Optional[int] = Query(None, ge=0),
    user_id: Optional[int] = None,
    cigar_id: Optional[int] = None,
    limit: int = Query(24, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    """Browse listings; only ACTIVE ones unless another status is asked for."""
    items, total = await ListingService(db).search(
        listing_type=type,
        status=status_filter,
        region=region,
        min_price=min_price,
        max_price=max_price,
        user_id=user_id,
        cigar_id=cigar_id,
        limit=limit,
        offset=offset,
    )
    return ListingListResponse(
        items=[ListingResponse.model_validate(listing) for listing in items],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.post("", response_model=ListingResponse, status_code=status.HTTP_201_CREATED)
async def create_listing(
    body: ListingCreate,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    return await ListingService(db).create(current_user.id, body)


@router.get("/{listing_id}", response_model=ListingResponse)
async def get_listing(
    listing_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Fetch a listing; every fetch counts as a view."""
    return await ListingService(db).view(listing_id)


@router.patch("/{listing_id}", response_model=ListingResponse)
async def update_listing(
    listing_id: int,
    body: ListingUpdate,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    return await ListingService(db).update(listing_id, current_user.id, body)


@router.delete("/{listing_id}", response_model=ListingResponse)
async def withdraw_listing(
    listing_id: int,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    """Withdraw a listing. The record is kept."""
    return await ListingService(db).withdraw(listing_id, current_user.id)
