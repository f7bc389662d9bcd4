"""
Profile and member directory schemas.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from humidor_club.schemas.auth import UserSummary


class ProfileUpdate(BaseModel):
    """Edit the caller's profile; blank strings clear a field."""
    display_name: Optional[str] = Field(None, max_length=100)
    avatar_url: Optional[str] = Field(None, max_length=500)
    bio: Optional[str] = Field(None, max_length=2000)
    city: Optional[str] = Field(None, max_length=100)
    region: Optional[str] = Field(None, max_length=100)
    country: Optional[str] = Field(None, max_length=100)


class ProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    bio: Optional[str] = None
    city: Optional[str] = None
    region: Optional[str] = None
    country: Optional[str] = None
    email_verified_at: Optional[datetime] = None
    created_at: datetime


class MemberListResponse(BaseModel):
    items: list[UserSummary]
    total: int
    limit: int
    offset: int
