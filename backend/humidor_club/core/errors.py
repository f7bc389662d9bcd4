"""
Application error types.

Services raise these instead of HTTPException so the same failure can be
reported by any caller. The API layer renders them as
``{"detail": ..., "code": ..., "details": ...}`` with the matching status.
"""
import functools
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, TypeVar

import structlog
from sqlalchemy.exc import SQLAlchemyError

logger = structlog.get_logger()

T = TypeVar("T")


class ErrorCode(str, Enum):
    """Machine-checkable error codes returned to clients."""
    # Auth (401)
    UNAUTHORIZED = "UNAUTHORIZED"
    SESSION_EXPIRED = "SESSION_EXPIRED"

    # Authorization (403)
    FORBIDDEN = "FORBIDDEN"

    # Validation (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Resources (404 / 409)
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"

    # Business logic (422)
    INSUFFICIENT_QUANTITY = "INSUFFICIENT_QUANTITY"
    LISTING_FROZEN = "LISTING_FROZEN"

    # Rate limiting (429)
    RATE_LIMITED = "RATE_LIMITED"

    # Server (5xx)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    DATABASE_UNAVAILABLE = "DATABASE_UNAVAILABLE"


class AppError(Exception):
    """Base exception for expected application failures."""

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        status_code: int = 400,
        details: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        self.headers = headers

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"detail": self.message, "code": self.code.value}
        if self.details:
            body["details"] = self.details
        return body


class UnauthorizedError(AppError):
    def __init__(self, message: str = "Please sign in to continue"):
        super().__init__(
            message,
            ErrorCode.UNAUTHORIZED,
            401,
            headers={"WWW-Authenticate": "Bearer"},
        )


class ForbiddenError(AppError):
    def __init__(self, message: str = "You do not have permission to perform this action"):
        super().__init__(message, ErrorCode.FORBIDDEN, 403)


class NotFoundError(AppError):
    def __init__(self, resource: str = "Resource"):
        super().__init__(f"{resource} not found", ErrorCode.NOT_FOUND, 404, {"resource": resource})


class ValidationError(AppError):
    def __init__(self, message: str = "Invalid input", details: Optional[dict[str, Any]] = None):
        super().__init__(message, ErrorCode.VALIDATION_ERROR, 400, details)


class ConflictError(AppError):
    def __init__(self, message: str = "Resource already exists"):
        super().__init__(message, ErrorCode.CONFLICT, 409)


class InsufficientQuantityError(AppError):
    """Raised when more cigars are smoked than remain in a humidor item."""

    def __init__(self, requested: int, available: int):
        super().__init__(
            f"Cannot smoke {requested} cigar(s): only {available} remaining",
            ErrorCode.INSUFFICIENT_QUANTITY,
            422,
            {"requested": requested, "available": available},
        )


class ListingFrozenError(AppError):
    def __init__(self, message: str = "This listing has been frozen by a moderator"):
        super().__init__(message, ErrorCode.LISTING_FROZEN, 422)


class RateLimitError(AppError):
    def __init__(self, message: str = "Too many requests. Please try again later."):
        super().__init__(
            message,
            ErrorCode.RATE_LIMITED,
            429,
            headers={"Retry-After": "60"},
        )


class InternalError(AppError):
    def __init__(self, message: str = "An unexpected error occurred"):
        super().__init__(message, ErrorCode.INTERNAL_ERROR, 500)


def translate_persistence_errors(
    operation: str,
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """
    Wrap a service coroutine so database failures surface as InternalError.

    The original exception is logged with the operation name and the call
    arguments; the caller only sees a generic message. AppErrors raised by
    the wrapped coroutine pass through unchanged.

    Usage:
        @translate_persistence_errors("humidor.smoke")
        async def smoke(self, item_id: int, user_id: int, count: int): ...
    """
    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            try:
                return await func(*args, **kwargs)
            except SQLAlchemyError as e:
                logger.error(
                    "Persistence failure",
                    operation=operation,
                    error=str(e),
                    error_type=type(e).__name__,
                    call_args=[repr(a) for a in args[1:]],
                    call_kwargs={k: repr(v) for k, v in kwargs.items()},
                    exc_info=True,
                )
                raise InternalError() from e
        return wrapper
    return decorator
