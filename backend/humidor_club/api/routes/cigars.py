"""
Cigar catalog endpoints.

Creating a cigar also adds one to the creator's humidor.
"""
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from humidor_club.api.deps import CurrentUser
from humidor_club.db.session import get_db
from humidor_club.schemas.catalog import (
    CigarCreate,
    CigarCreateResponse,
    CigarRecordRequest,
    CigarResponse,
    CigarUpdate,
    SuggestionResponse,
)
from humidor_club.services.catalog import CatalogService

router = APIRouter()
logger = structlog.get_logger()


def _build_create_response(cigar, item) -> CigarCreateResponse:
    return CigarCreateResponse(
        cigar=CigarResponse.model_validate(cigar),
        added_to_humidor=item is not None,
        humidor_item_id=item.id if item is not None else None,
    )


@router.get("", response_model=list[CigarResponse])
async def list_cigars(
    limit: int = Query(50, ge=1, le=200),
    search: Optional[str] = Query(None, max_length=100),
    db: AsyncSession = Depends(get_db),
):
    """Newest cigars first, with line and brand."""
    return await CatalogService(db).list_cigars(limit=limit, search=search)


@router.get("/suggestions", response_model=SuggestionResponse)
async def get_suggestions(
    field: str = Query(...),
    search: Optional[str] = Query(None, max_length=100),
    db: AsyncSession = Depends(get_db),
):
    """
    Autocomplete values for a cigar field.

    Supported fields: vitola, country, origin, wrapper, binder, filler.
    """
    values = await CatalogService(db).suggestions(field, search)
    return SuggestionResponse(field=field, values=values)


@router.post("", response_model=CigarCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_cigar(
    body: CigarCreate,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    """Create a cigar under an existing line."""
    cigar, item = await CatalogService(db).create_cigar(current_user.id, body)
    return _build_create_response(cigar, item)


@router.post("/record", response_model=CigarCreateResponse, status_code=status.HTTP_201_CREATED)
async def record_cigar(
    body: CigarRecordRequest,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    """Record a cigar by brand and line name, creating either when missing."""
    cigar, item = await CatalogService(db).record_cigar(current_user.id, body)
    return _build_create_response(cigar, item)


@router.get("/{cigar_id}", response_model=CigarResponse)
async def get_cigar(
    cigar_id: int,
    db: AsyncSession = Depends(get_db),
):
    return await CatalogService(db).get_cigar(cigar_id)


@router.patch("/{cigar_id}", response_model=CigarResponse)
async def update_cigar(
    cigar_id: int,
    body: CigarUpdate,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    """Partially update a cigar."""
    cigar = await CatalogService(db).update_cigar(cigar_id, body)
    logger.info("Cigar edited", cigar_id=cigar_id, user_id=current_user.id)
    return cigar
