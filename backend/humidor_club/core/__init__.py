"""
Core module containing configuration and shared utilities.
"""
from humidor_club.core.config import settings
from humidor_club.core.errors import (
    AppError,
    ConflictError,
    ErrorCode,
    ForbiddenError,
    InsufficientQuantityError,
    InternalError,
    ListingFrozenError,
    NotFoundError,
    RateLimitError,
    UnauthorizedError,
    ValidationError,
)

__all__ = [
    "settings",
    "AppError",
    "ConflictError",
    "ErrorCode",
    "ForbiddenError",
    "InsufficientQuantityError",
    "InternalError",
    "ListingFrozenError",
    "NotFoundError",
    "RateLimitError",
    "UnauthorizedError",
    "ValidationError",
]
