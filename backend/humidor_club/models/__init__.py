"""
SQLAlchemy models for the Humidor Club application.
"""
from humidor_club.models.user import User
from humidor_club.models.catalog import Brand, Line, Cigar
from humidor_club.models.humidor import HumidorItem
from humidor_club.models.listing import Listing, ListingStatus, ListingType

__all__ = [
    "User",
    "Brand",
    "Line",
    "Cigar",
    "HumidorItem",
    "Listing",
    "ListingStatus",
    "ListingType",
]
