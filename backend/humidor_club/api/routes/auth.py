"""
Authentication endpoints: magic-link sign in.
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from humidor_club.api.deps import CurrentUser
from humidor_club.core.config import settings
from humidor_club.core.errors import NotFoundError
from humidor_club.core.magic_links import get_magic_link_store
from humidor_club.db.session import get_db
from humidor_club.schemas.auth import (
    MagicLinkLookup,
    MagicLinkRequest,
    MagicLinkResponse,
    Token,
    UserResponse,
    VerifyRequest,
)
from humidor_club.services.auth import create_access_token, normalize_email, request_magic_link, verify_magic_link

router = APIRouter()


@router.post("/magic-link", response_model=MagicLinkResponse, status_code=status.HTTP_202_ACCEPTED)
async def send_magic_link(
    body: MagicLinkRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Issue a sign-in link for an email address.

    The account is created on first use.
    """
    await request_magic_link(db, body.email, store=get_magic_link_store())
    return MagicLinkResponse(expires_in_minutes=settings.magic_link_expire_minutes)


@router.post("/verify", response_model=Token)
async def verify(
    body: VerifyRequest,
    db: AsyncSession = Depends(get_db),
):
    """Exchange a sign-in link token for an access token."""
    user = await verify_magic_link(db, body.token)
    return Token(
        access_token=create_access_token(user.id),
        expires_in=settings.jwt_access_token_expire_minutes * 60,
    )


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: CurrentUser):
    """Get the current user."""
    return current_user


@router.get("/magic-link", response_model=MagicLinkLookup)
async def get_latest_magic_link(email: str = Query(..., min_length=3)):
    """
    Latest sign-in link issued for an email.

    Development aid; answers 404 when the link store is disabled.
    """
    store = get_magic_link_store()
    if store is None:
        raise NotFoundError("Magic link")

    normalized = normalize_email(email)
    url = store.get(normalized)
    if url is None:
        raise NotFoundError("Magic link")
    return MagicLinkLookup(email=normalized, url=url)
