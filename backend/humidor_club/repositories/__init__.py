"""
Repository layer for data access.

Repositories hide SQL and ORM details from the services and own the
single-statement conditional updates that keep the humidor ledger valid.
"""
from humidor_club.repositories.base import BaseRepository
from humidor_club.repositories.catalog_repo import BrandRepository, CigarRepository, LineRepository
from humidor_club.repositories.humidor_repo import HumidorRepository
from humidor_club.repositories.listing_repo import ListingRepository
from humidor_club.repositories.user_repo import UserRepository

__all__ = [
    "BaseRepository",
    "BrandRepository",
    "CigarRepository",
    "HumidorRepository",
    "LineRepository",
    "ListingRepository",
    "UserRepository",
]
