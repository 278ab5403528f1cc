"""
MyBlog API - FastAPI application entry point.
"""
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from .config import get_settings
from .database import engine, Base
from . import models  # noqa: F401  registers the mappers
from .middleware import SecurityHeadersMiddleware
from .limiter import limiter
from .logging_config import api_logger, configure_logging, log_request
from .responses import ApiException, api_exception_handler
from .routes import (
    auth_router,
    posts_router,
    comments_router,
    profiles_router,
    search_router,
    uploads_router,
)

settings = get_settings()
configure_logging(settings.log_level, settings.log_format)

# Create tables (in production, use Alembic migrations instead)
Base.metadata.create_all(bind=engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Make sure the storage root exists before serving uploads."""
    Path(settings.storage_root).mkdir(parents=True, exist_ok=True)
    api_logger.info("MyBlog API started", environment=settings.environment)
    yield
    api_logger.info("MyBlog API stopped")


app = FastAPI(
    title="MyBlog API",
    description="Backend API for the MyBlog blogging app",
    version="1.0.0",
    docs_url="/api/docs" if settings.debug else None,
    redoc_url="/api/redoc" if settings.debug else None,
    lifespan=lifespan,
)

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_exception_handler(ApiException, api_exception_handler)

app.add_middleware(SecurityHeadersMiddleware, storage_origin=settings.public_base_url)

# Request logging middleware (only in debug mode)
if settings.debug:
    app.add_middleware(log_request(api_logger))

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=[
        "Authorization",
        "Content-Type",
        "Accept",
        "Origin",
        "X-Requested-With",
        "X-Request-ID",
    ],
    max_age=3600,  # Cache preflight requests for 1 hour
)

# Routes
app.include_router(auth_router)
app.include_router(posts_router)
app.include_router(comments_router)
app.include_router(profiles_router)
app.include_router(search_router)
app.include_router(uploads_router)


@app.get("/api/health")
def health_check():
    """Health check endpoint for load balancers and monitoring."""
    return {
        "status": "healthy",
        "environment": settings.environment,
        "version": "1.0.0",
    }


@app.get("/")
def root():
    return {
        "message": "MyBlog API",
        "docs": "/api/docs" if settings.debug else "Disabled in production",
    }
