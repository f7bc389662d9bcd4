"""
Member endpoints.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from humidor_club.api.deps import CurrentUser
from humidor_club.db.session import get_db
from humidor_club.schemas.auth import UserSummary
from humidor_club.schemas.humidor import HumidorItemResponse, HumidorResponse
from humidor_club.schemas.profile import MemberListResponse
from humidor_club.services.humidor import HumidorLedger
from humidor_club.services.members import MemberService

router = APIRouter()


@router.get("", response_model=MemberListResponse)
async def list_members(
    current_user: CurrentUser,
    search: Optional[str] = Query(None, max_length=100),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    """Member directory; the caller is left out."""
    users, total = await MemberService(db).search(current_user.id, search, limit=limit, offset=offset)
    return MemberListResponse(
        items=[UserSummary.model_validate(user) for user in users],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/{user_id}/humidor", response_model=HumidorResponse)
async def get_member_humidor(
    user_id: int,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    """Another member's in-stock cigars and totals over them."""
    items, stats = await HumidorLedger(db).list_public_items(user_id)
    return HumidorResponse(
        items=[HumidorItemResponse.model_validate(item) for item in items],
        stats=stats,
    )
