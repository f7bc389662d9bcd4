"""
API module for FastAPI routes.
"""
from fastapi import APIRouter

from humidor_club.api.routes import (
    auth,
    brands,
    cigars,
    dashboard,
    health,
    humidor,
    lines,
    listings,
    profile,
    users,
    valuation,
)

api_router = APIRouter()

api_router.include_router(health.router, tags=["Health"])
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(brands.router, prefix="/brands", tags=["Catalog"])
api_router.include_router(lines.router, prefix="/lines", tags=["Catalog"])
api_router.include_router(cigars.router, prefix="/cigars", tags=["Catalog"])
api_router.include_router(humidor.router, prefix="/humidor", tags=["Humidor"])
api_router.include_router(profile.router, prefix="/profile", tags=["Users"])
api_router.include_router(users.router, prefix="/users", tags=["Users"])
api_router.include_router(listings.router, prefix="/listings", tags=["Marketplace"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["Dashboard"])
api_router.include_router(valuation.router, prefix="/valuation", tags=["Valuation"])
