"""
Error classification helpers for API exception handlers.
"""
import asyncio

from sqlalchemy.exc import OperationalError, TimeoutError as SQLTimeoutError


def is_database_connection_error(error: BaseException) -> bool:
    """
    Check if an error is a database connection/pool issue.

    Args:
        error: Exception to check

    Returns:
        True if error is related to database connection/pool
    """
    if isinstance(error, (OperationalError, SQLTimeoutError, asyncio.TimeoutError)):
        return True

    error_str = str(error).lower()
    if "queuepool" in error_str or "connection pool" in error_str:
        return True
    if "connection timed out" in error_str or "connection refused" in error_str:
        return True

    cause = error.__cause__
    if cause is not None and cause is not error:
        return is_database_connection_error(cause)
    return False
