"""Middleware package for the application."""

from humidor_club.middleware.rate_limit import RateLimitMiddleware
from humidor_club.middleware.request_id import RequestIdMiddleware

__all__ = ["RateLimitMiddleware", "RequestIdMiddleware"]
