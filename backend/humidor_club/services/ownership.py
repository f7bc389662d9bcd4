"""
Ownership checks for member-owned resources.

Services call these before any mutation so a request against another
member's humidor item or listing fails without touching it.
"""
from typing import Optional, TypeVar

from humidor_club.core.errors import ForbiddenError, NotFoundError

T = TypeVar("T")


def require_found(item: Optional[T], resource: str) -> T:
    """Return the item or raise NotFoundError naming the resource."""
    if item is None:
        raise NotFoundError(resource)
    return item


def require_ownership(
    item: object,
    user_id: int,
    resource: str,
    user_id_field: str = "user_id",
) -> None:
    """
    Verify a loaded item belongs to the user.

    Raises:
        ForbiddenError: If the item's owner is someone else
    """
    if getattr(item, user_id_field, None) != user_id:
        raise ForbiddenError(f"You do not own this {resource.lower()}")
