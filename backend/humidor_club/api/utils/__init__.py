"""
Shared utility functions for API routes.
"""
from humidor_club.api.utils.error_handling import is_database_connection_error

__all__ = ["is_database_connection_error"]
