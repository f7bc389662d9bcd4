"""
Dashboard schemas.
"""
from pydantic import BaseModel


class DashboardStats(BaseModel):
    club_cigars: int
    club_value_cents: int
    my_humidor_cigars: int
    my_humidor_value_cents: int
    my_active_listings: int
