"""
Profile endpoints for the signed-in member.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from humidor_club.api.deps import CurrentUser
from humidor_club.db.session import get_db
from humidor_club.schemas.profile import ProfileResponse, ProfileUpdate
from humidor_club.services.members import MemberService

router = APIRouter()


@router.get("", response_model=ProfileResponse)
async def get_my_profile(
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    """Get the current user's profile."""
    return await MemberService(db).get_profile(current_user.id)


@router.patch("", response_model=ProfileResponse)
async def update_my_profile(
    body: ProfileUpdate,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    """
    Update the current user's profile.

    Only provided fields will be updated.
    """
    return await MemberService(db).update_profile(current_user.id, body)
