"""
Dashboard totals for the signed-in member.
"""
from sqlalchemy.ext.asyncio import AsyncSession

from humidor_club.core.errors import translate_persistence_errors
from humidor_club.repositories.catalog_repo import CigarRepository
from humidor_club.repositories.humidor_repo import HumidorRepository
from humidor_club.repositories.listing_repo import ListingRepository
from humidor_club.schemas.dashboard import DashboardStats


class DashboardService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.cigars = CigarRepository(db)
        self.humidor = HumidorRepository(db)
        self.listings = ListingRepository(db)

    @translate_persistence_errors("dashboard.stats")
    async def get_stats(self, user_id: int) -> DashboardStats:
        """Club catalog totals alongside the member's humidor and active listings."""
        catalog = await self.cigars.catalog_totals()
        humidor = await self.humidor.get_stats(user_id)
        active_listings = await self.listings.count_active_for_user(user_id)

        return DashboardStats(
            club_cigars=catalog["total_cigars"],
            club_value_cents=catalog["total_value_cents"],
            my_humidor_cigars=humidor["total_cigars"],
            my_humidor_value_cents=humidor["total_value_cents"],
            my_active_listings=active_listings,
        )
