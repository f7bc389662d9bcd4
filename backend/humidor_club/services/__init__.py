"""
Business logic services.
"""
from humidor_club.services.catalog import CatalogService
from humidor_club.services.dashboard import DashboardService
from humidor_club.services.humidor import HumidorLedger
from humidor_club.services.listings import ListingService, listing_quantity_cap, listing_update_cap
from humidor_club.services.members import MemberService

__all__ = [
    "CatalogService",
    "DashboardService",
    "HumidorLedger",
    "ListingService",
    "MemberService",
    "listing_quantity_cap",
    "listing_update_cap",
]
