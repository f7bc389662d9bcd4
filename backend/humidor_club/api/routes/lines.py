"""
Line catalog endpoints.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from humidor_club.api.deps import CurrentUser
from humidor_club.db.session import get_db
from humidor_club.schemas.catalog import LineCreate, LineResponse
from humidor_club.services.catalog import CatalogService

router = APIRouter()


@router.get("", response_model=list[LineResponse])
async def list_lines(
    brand_id: Optional[int] = None,
    search: Optional[str] = Query(None, max_length=100),
    db: AsyncSession = Depends(get_db),
):
    """List lines, optionally for one brand."""
    return await CatalogService(db).list_lines(brand_id, search)


@router.post("", response_model=LineResponse, status_code=status.HTTP_201_CREATED)
async def create_line(
    body: LineCreate,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    """Create a line under an existing brand."""
    return await CatalogService(db).create_line(body)
