"""
Main FastAPI application entry point.
"""
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from humidor_club.api import api_router
from humidor_club.api.utils import is_database_connection_error
from humidor_club.core.config import settings
from humidor_club.core.errors import AppError, ErrorCode
from humidor_club.core.logging import setup_logging
from humidor_club.db.session import engine
from humidor_club.middleware import RateLimitMiddleware, RequestIdMiddleware

# Setup logging
setup_logging()
logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup and shutdown events.
    """
    logger.info(
        "Starting Humidor Club API",
        version="1.0.0",
        debug=settings.api_debug,
        magic_link_store=settings.magic_link_store_active,
    )

    yield

    logger.info("Shutting down Humidor Club API")
    await engine.dispose()


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    description="Humidor Club - cigar humidor tracking, catalog and member marketplace",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add rate limiting middleware (after CORS)
app.add_middleware(
    RateLimitMiddleware,
    requests_per_minute=settings.rate_limit_per_minute,
    auth_requests_per_minute=settings.auth_rate_limit_per_minute,
)

# Outermost, so every log line in the request carries its ID
app.add_middleware(RequestIdMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """Render expected application errors with their code and status."""
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        "Request failed",
        path=request.url.path,
        method=request.method,
        code=exc.code.value,
        status=exc.status_code,
        error=exc.message,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers=exc.headers,
    )


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unhandled exceptions."""
    is_pool_error = is_database_connection_error(exc)

    logger.error(
        "Unhandled exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__,
        is_pool_error=is_pool_error,
    )

    if is_pool_error:
        return JSONResponse(
            status_code=503,
            content={
                "detail": "Service temporarily unavailable. Please try again in a moment.",
                "code": ErrorCode.DATABASE_UNAVAILABLE.value,
            },
        )

    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "code": ErrorCode.INTERNAL_ERROR.value},
    )


# Include API routes with /api prefix
app.include_router(api_router, prefix="/api")


# Middleware for request logging
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all requests."""
    logger.debug(
        "Request",
        method=request.method,
        path=request.url.path,
    )
    response = await call_next(request)
    logger.debug(
        "Response",
        method=request.method,
        path=request.url.path,
        status=response.status_code,
    )
    return response


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "humidor_club.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_debug,
    )
