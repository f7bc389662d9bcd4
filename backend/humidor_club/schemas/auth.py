"""
Authentication schemas for magic-link sign in and token management.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class MagicLinkRequest(BaseModel):
    """Request a sign-in link for an email address."""

    email: EmailStr


class MagicLinkResponse(BaseModel):
    """Acknowledgement that a sign-in link was issued."""

    message: str = "Check your email for a sign-in link"
    expires_in_minutes: int


class MagicLinkLookup(BaseModel):
    """Latest stored sign-in link for an email (development only)."""

    email: str
    url: str


class VerifyRequest(BaseModel):
    """Exchange a magic-link token for an access token."""

    token: str = Field(..., min_length=1)


class Token(BaseModel):
    """Schema for access token response."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Token lifetime in seconds")


class TokenPayload(BaseModel):
    """Decoded JWT claims."""

    sub: str
    exp: datetime
    type: str
    email: Optional[str] = None


class UserResponse(BaseModel):
    """Schema for user response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    city: Optional[str] = None
    region: Optional[str] = None
    country: Optional[str] = None
    is_active: bool
    is_admin: bool
    created_at: datetime
    last_login: Optional[datetime] = None


class UserSummary(BaseModel):
    """Public view of a member."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    city: Optional[str] = None
    region: Optional[str] = None
