"""
Brand catalog endpoints.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from humidor_club.api.deps import CurrentUser
from humidor_club.db.session import get_db
from humidor_club.schemas.catalog import BrandCreate, BrandResponse
from humidor_club.services.catalog import CatalogService

router = APIRouter()


@router.get("", response_model=list[BrandResponse])
async def list_brands(
    search: Optional[str] = Query(None, max_length=100),
    db: AsyncSession = Depends(get_db),
):
    """List brands by name, optionally filtered by a case-insensitive search."""
    return await CatalogService(db).list_brands(search)


@router.post("", response_model=BrandResponse, status_code=status.HTTP_201_CREATED)
async def create_brand(
    body: BrandCreate,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    """Create a brand. Names are unique ignoring case."""
    return await CatalogService(db).create_brand(body)
