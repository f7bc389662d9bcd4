"""
Dashboard endpoints.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from humidor_club.api.deps import CurrentUser
from humidor_club.db.session import get_db
from humidor_club.schemas.dashboard import DashboardStats
from humidor_club.services.dashboard import DashboardService

router = APIRouter()


@router.get("/stats", response_model=DashboardStats)
async def get_dashboard_stats(
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    """Club catalog totals alongside the current user's humidor and listings."""
    return await DashboardService(db).get_stats(current_user.id)
