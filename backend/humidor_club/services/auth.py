"""
Authentication service: magic-link issuance and JWT access tokens.

Members sign in by requesting a link, which carries a short-lived signed
token of type ``magic_link``. Verifying that token issues an ``access``
token used as a bearer credential on every other request.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional
from urllib.parse import urlencode

from jose import JWTError, jwt
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from humidor_club.core.config import settings
from humidor_club.core.errors import UnauthorizedError, ValidationError
from humidor_club.core.magic_links import MagicLinkStore
from humidor_club.models.user import User
from humidor_club.repositories.user_repo import UserRepository
from humidor_club.schemas.auth import TokenPayload
from humidor_club.utils.sanitize import sanitize_email

logger = structlog.get_logger()

ACCESS_TOKEN_TYPE = "access"
MAGIC_LINK_TOKEN_TYPE = "magic_link"


def normalize_email(email: str) -> str:
    """Normalize email address for consistent comparison."""
    try:
        return sanitize_email(email)
    except ValueError as e:
        raise ValidationError(str(e), {"field": "email"}) from e


def _encode(claims: dict, expires_delta: timedelta) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        **claims,
        "exp": now + expires_delta,
        "iat": now,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def create_access_token(user_id: int, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token."""
    return _encode(
        {"sub": str(user_id), "type": ACCESS_TOKEN_TYPE},
        expires_delta or timedelta(minutes=settings.jwt_access_token_expire_minutes),
    )


def create_magic_link_token(user_id: int, email: str, expires_delta: Optional[timedelta] = None) -> str:
    """Create the single-purpose token embedded in a sign-in link."""
    return _encode(
        {"sub": str(user_id), "email": email, "type": MAGIC_LINK_TOKEN_TYPE},
        expires_delta or timedelta(minutes=settings.magic_link_expire_minutes),
    )


def decode_token(token: str, expected_type: str = ACCESS_TOKEN_TYPE) -> Optional[TokenPayload]:
    """
    Decode and validate a JWT.

    Validates:
    - Token signature
    - Token expiration
    - Token type
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
        token_data = TokenPayload(**payload)
    except (JWTError, PydanticValidationError) as e:
        logger.warning("JWT decode error", error=str(e))
        return None

    if token_data.type != expected_type:
        logger.warning("Invalid token type", token_type=token_data.type, expected=expected_type)
        return None

    return token_data


def build_magic_link_url(token: str) -> str:
    base = settings.frontend_url.rstrip("/")
    return f"{base}/auth/verify?{urlencode({'token': token})}"


async def get_or_create_user(db: AsyncSession, email: str) -> User:
    """Find a member by email, creating the account on first sign in."""
    users = UserRepository(db)
    normalized = normalize_email(email)

    user = await users.find_by_email(normalized)
    if user:
        return user

    user = await users.create(email=normalized, is_active=True, is_admin=False)
    logger.info("User created", user_id=user.id)
    return user


async def request_magic_link(
    db: AsyncSession,
    email: str,
    store: Optional[MagicLinkStore] = None,
) -> tuple[User, str]:
    """
    Issue a sign-in link for an email.

    Delivery is left to the mail provider; the link is logged at debug level
    and kept in the development store when one is given.

    Returns:
        Tuple of (user, link URL)
    """
    user = await get_or_create_user(db, email)
    if not user.is_active:
        raise UnauthorizedError("This account has been disabled")

    token = create_magic_link_token(user.id, user.email)
    url = build_magic_link_url(token)

    if store is not None:
        store.store(user.email, url)

    logger.info("Magic link issued", user_id=user.id)
    logger.debug("Magic link URL", user_id=user.id, url=url)
    return user, url


async def verify_magic_link(db: AsyncSession, token: str) -> User:
    """
    Exchange a magic-link token for the member it was issued to.

    Raises:
        UnauthorizedError: If the token is invalid, expired, of the wrong
            type, or names an unknown or disabled member
    """
    payload = decode_token(token, expected_type=MAGIC_LINK_TOKEN_TYPE)
    if payload is None:
        raise UnauthorizedError("This sign-in link is invalid or has expired")

    users = UserRepository(db)
    try:
        user = await users.get_by_id(int(payload.sub))
    except ValueError:
        user = None

    if user is None or not user.is_active or user.email != (payload.email or "").lower():
        raise UnauthorizedError("This sign-in link is invalid or has expired")

    now = datetime.now(timezone.utc)
    if user.email_verified_at is None:
        user.email_verified_at = now
    user.last_login = now
    await users.update(user)

    logger.info("Magic link verified", user_id=user.id)
    return user
