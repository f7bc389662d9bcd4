"""
API dependencies for authentication.
"""
from typing import Annotated, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from humidor_club.core.errors import UnauthorizedError
from humidor_club.db.session import get_db
from humidor_club.models.user import User
from humidor_club.repositories.user_repo import UserRepository
from humidor_club.services.auth import decode_token

# Security scheme for JWT bearer tokens
security = HTTPBearer(auto_error=False)


async def get_current_user(
    db: Annotated[AsyncSession, Depends(get_db)],
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
) -> User:
    """
    Get the current authenticated user from the bearer token.

    Raises UnauthorizedError if the token is missing or invalid, or the
    user is unknown or disabled.
    """
    if not credentials:
        raise UnauthorizedError("Not authenticated")

    payload = decode_token(credentials.credentials)
    if not payload:
        raise UnauthorizedError("Invalid or expired token")

    try:
        user_id = int(payload.sub)
    except (ValueError, TypeError):
        raise UnauthorizedError("Invalid token payload")

    user = await UserRepository(db).get_by_id(user_id)
    if not user:
        raise UnauthorizedError("User not found")

    if not user.is_active:
        raise UnauthorizedError("User account is disabled")

    return user


async def get_current_user_optional(
    db: Annotated[AsyncSession, Depends(get_db)],
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
) -> Optional[User]:
    """Get the current user if a valid token was sent, None otherwise."""
    if not credentials:
        return None
    try:
        return await get_current_user(db, credentials)
    except UnauthorizedError:
        return None


CurrentUser = Annotated[User, Depends(get_current_user)]
OptionalUser = Annotated[Optional[User], Depends(get_current_user_optional)]
